"""Global configuration constants for the trip-duration sampling analysis."""
from __future__ import annotations

from pathlib import Path

# ---------------------------------------------------------------------------
# Core paths
# ---------------------------------------------------------------------------
ROOT_DIR = Path(__file__).resolve().parents[2]
REPORTS_DIR = ROOT_DIR / "reports"

DEFAULT_REPORT_CSV = REPORTS_DIR / "sampling_comparison.csv"

# ---------------------------------------------------------------------------
# Population columns
# ---------------------------------------------------------------------------
DURATION_COL = "duration"
DAY_COL = "day_of_week"
TIME_COL = "time_of_day"
POPULATION_COLS = (DURATION_COL, DAY_COL, TIME_COL)

# Trips of a day or longer are treated as unreturned bikes / logging faults
DURATION_CEILING_S = 86_400

# ---------------------------------------------------------------------------
# Strata labels (order here is the stratum iteration order)
# ---------------------------------------------------------------------------
DAYS_OF_WEEK = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
TIMES_OF_DAY = ("Morning", "Midday", "Evening", "Night")

# Inclusive start-hour ranges; Night wraps past midnight
TIME_OF_DAY_BANDS = {
    "Morning": (5, 10),
    "Midday": (11, 15),
    "Evening": (16, 20),
    "Night": (21, 4),
}

# ---------------------------------------------------------------------------
# Estimation
# ---------------------------------------------------------------------------
CONFIDENCE_LEVEL = 0.95
Z_95 = 1.96  # survey-package convention, not 1.95996...

# Sampling fraction below which the finite-population correction is skipped
FPC_THRESHOLD = 0.10

DEFAULT_MARGIN_OF_ERROR_S = 5.0
DEFAULT_PILOT_SEED = 2024
DEFAULT_SEEDS = (11, 22, 33, 44, 55, 66, 77, 88, 99, 110)


def ensure_dir(path: Path) -> Path:
    """Create *path*'s parent directory if needed and return *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
