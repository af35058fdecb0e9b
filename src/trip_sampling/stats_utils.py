# -*- coding: utf-8 -*-
"""Statistical helper functions (critical values, normal CIs, coverage)."""
from __future__ import annotations

import math
from typing import Tuple

from scipy import stats

from . import config
from .errors import ConfigurationError

# ---------------------------------------------------------------------------
# Two-sided normal critical values
# ---------------------------------------------------------------------------

# Common levels use the rounded values printed in survey texts
_Z_TABLE = {
    0.90: 1.645,
    0.95: config.Z_95,
    0.99: 2.576,
}


def z_critical(confidence: float = config.CONFIDENCE_LEVEL) -> float:
    """Return the two-sided normal critical value for *confidence*.

    Parameters
    ----------
    confidence : float, default 0.95
        Confidence level in (0, 1).  0.90/0.95/0.99 map to the tabulated
        1.645/1.96/2.576; anything else goes through ``scipy.stats.norm.ppf``.
    """
    if not 0.0 < confidence < 1.0:
        raise ConfigurationError(f"confidence must lie in (0, 1), got {confidence}")
    for level, z in _Z_TABLE.items():
        if abs(confidence - level) < 1e-9:
            return z
    return float(stats.norm.ppf(1 - (1 - confidence) / 2))


# ---------------------------------------------------------------------------
# Normal-approximation interval
# ---------------------------------------------------------------------------

def normal_ci(mean: float, se: float, z: float = config.Z_95) -> Tuple[float, float]:
    """Return ``(mean - z*se, mean + z*se)``."""
    half = z * se
    return (mean - half, mean + half)


def covers(lower: float, upper: float, value: float) -> bool:
    """``lower <= value <= upper``; NaN bounds never cover."""
    if math.isnan(lower) or math.isnan(upper):
        return False
    return bool(lower <= value <= upper)
