from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from trip_sampling import config

# Mean trip length (s) per time-of-day band; weekends run 1.5x longer
_BASE = {"Morning": 600.0, "Midday": 900.0, "Evening": 700.0, "Night": 500.0}


def make_population(per_stratum: int = 60, seed: int = 0, outliers: int = 0) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    parts = []
    for day in config.DAYS_OF_WEEK:
        factor = 1.5 if day in ("Saturday", "Sunday") else 1.0
        for tod in config.TIMES_OF_DAY:
            scale = _BASE[tod] * factor / 2
            parts.append(
                pd.DataFrame(
                    {
                        "duration": rng.gamma(2.0, scale, size=per_stratum),
                        "day_of_week": day,
                        "time_of_day": tod,
                    }
                )
            )
    df = pd.concat(parts, ignore_index=True)
    if outliers:
        extra = pd.DataFrame(
            {
                "duration": [config.DURATION_CEILING_S + 3600.0 * (i + 1) for i in range(outliers)],
                "day_of_week": "Monday",
                "time_of_day": "Night",
            }
        )
        df = pd.concat([df, extra], ignore_index=True)
    # interleave strata so grouping cannot rely on input order
    return df.sample(frac=1.0, random_state=7).reset_index(drop=True)


@pytest.fixture
def trips() -> pd.DataFrame:
    return make_population()


@pytest.fixture
def two_strata() -> pd.DataFrame:
    """Monday/Morning x6 and Monday/Midday x4 (N = 10)."""
    return pd.DataFrame(
        {
            "duration": [100.0, 200.0, 300.0, 400.0, 500.0, 600.0, 700.0, 800.0, 900.0, 1000.0],
            "day_of_week": ["Monday"] * 10,
            "time_of_day": ["Morning"] * 6 + ["Midday"] * 4,
        }
    )
