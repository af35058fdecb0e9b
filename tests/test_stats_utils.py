import math

import pytest

from trip_sampling import stats_utils
from trip_sampling.errors import ConfigurationError


def test_z_critical_tabulated_and_computed():
    assert stats_utils.z_critical(0.95) == 1.96
    assert stats_utils.z_critical(0.90) == 1.645
    assert stats_utils.z_critical(0.80) == pytest.approx(1.2816, abs=1e-4)
    with pytest.raises(ConfigurationError):
        stats_utils.z_critical(1.0)


def test_normal_ci_and_covers():
    lo, hi = stats_utils.normal_ci(100.0, 10.0)
    assert (lo, hi) == pytest.approx((80.4, 119.6))
    assert stats_utils.covers(lo, hi, 80.4)
    assert not stats_utils.covers(lo, hi, 120.0)
    assert not stats_utils.covers(math.nan, hi, 100.0)
