"""Design effects and the sample sizes derived from them."""
from __future__ import annotations

import math

from . import config
from .errors import ConfigurationError

# Products like 1000 * 1.25 can land a hair above an integer
_CEIL_DECIMALS = 9


def _ceil(value: float) -> int:
    return int(math.ceil(round(value, _CEIL_DECIMALS)))


def design_effect(complex_se: float, srs_se: float) -> float:
    """Ratio of a complex design's SE to the SRS SE at the same sample size.

    Equal standard errors give 1.0 even when both are zero.
    """
    if complex_se == srs_se:
        return 1.0
    if not srs_se > 0:
        raise ConfigurationError(f"SRS standard error must be positive, got {srs_se}")
    if complex_se < 0:
        raise ConfigurationError(f"standard error cannot be negative, got {complex_se}")
    return complex_se / srs_se


def corrected_sample_size(complex_se: float, srs_se: float, srs_target_total: int) -> int:
    """Rescale *srs_target_total* by the design effect, rounding up."""
    if complex_se == srs_se:
        return srs_target_total
    return _ceil(srs_target_total * design_effect(complex_se, srs_se))


def required_sample_size(sd: float, margin_of_error: float, z: float = config.Z_95) -> int:
    """SRS size whose CI half-width ``z * sd / sqrt(n)`` is at most *margin_of_error*."""
    if not margin_of_error > 0:
        raise ConfigurationError(f"margin of error must be positive, got {margin_of_error}")
    if not math.isfinite(sd) or sd < 0:
        raise ConfigurationError(f"standard deviation must be finite and non-negative, got {sd}")
    return max(1, _ceil((z * sd / margin_of_error) ** 2))
