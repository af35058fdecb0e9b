# -*- coding: utf-8 -*-
"""Load a bike-share trip table and reduce it to the sampling population.

The population used everywhere downstream is a DataFrame with exactly three
columns:

    duration      trip length in seconds (float, non-negative)
    day_of_week   weekday name, one of ``config.DAYS_OF_WEEK``
    time_of_day   start-time band, one of ``config.TIMES_OF_DAY``

Input files may already carry those columns, or be raw operator exports with
``started_at``/``ended_at`` timestamps (newer Divvy / Citi Bike layout) or
``starttime`` + ``tripduration`` (older layout).  In the latter case the three
columns are derived here.
"""
from __future__ import annotations

from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd
from loguru import logger

from . import config
from .errors import ConfigurationError

# ---------------------------------------------------------------------------
# Raw column aliases
# ---------------------------------------------------------------------------
START_COLS = ("started_at", "starttime", "start_time")
END_COLS = ("ended_at", "stoptime", "end_time")
RAW_DURATION_COLS = ("tripduration", "trip_duration")


def time_of_day_for_hour(hour: int) -> str:
    """Return the ``TIME_OF_DAY_BANDS`` label containing *hour* (0-23)."""
    if not 0 <= int(hour) <= 23:
        raise ConfigurationError(f"hour out of range: {hour!r}")
    for label, (lo, hi) in config.TIME_OF_DAY_BANDS.items():
        if lo <= hi:
            if lo <= hour <= hi:
                return label
        elif hour >= lo or hour <= hi:  # band wraps past midnight
            return label
    raise ConfigurationError(f"no time-of-day band covers hour {hour}")


# Label for each start hour 0-23
HOUR_LABELS = np.array([time_of_day_for_hour(h) for h in range(24)], dtype=object)


def time_of_day_for_hours(hours: pd.Series) -> pd.Series:
    """Vectorised :func:`time_of_day_for_hour`; missing hours stay NaN."""
    idx = hours.fillna(0).astype(int).to_numpy()
    labels = pd.Series(HOUR_LABELS[idx], index=hours.index)
    return labels.where(hours.notna())


def _first_present(df: pd.DataFrame, candidates) -> str | None:
    for col in candidates:
        if col in df.columns:
            return col
    return None


def _derive_columns(raw: pd.DataFrame) -> pd.DataFrame:
    """Build duration / day_of_week / time_of_day from raw trip timestamps."""
    start_col = _first_present(raw, START_COLS)
    if start_col is None:
        raise ConfigurationError(
            "input lacks a trip start column; expected one of "
            f"{', '.join(START_COLS)} or the canonical {', '.join(config.POPULATION_COLS)}"
        )
    started = pd.to_datetime(raw[start_col], errors="coerce")

    dur_col = _first_present(raw, RAW_DURATION_COLS)
    end_col = _first_present(raw, END_COLS)
    if dur_col is not None:
        duration = pd.to_numeric(raw[dur_col], errors="coerce")
    elif end_col is not None:
        ended = pd.to_datetime(raw[end_col], errors="coerce")
        duration = (ended - started).dt.total_seconds()
    else:
        raise ConfigurationError(
            f"cannot derive trip duration: need one of {RAW_DURATION_COLS + END_COLS}"
        )

    out = pd.DataFrame(
        {
            config.DURATION_COL: duration,
            config.DAY_COL: started.dt.day_name(),
            config.TIME_COL: time_of_day_for_hours(started.dt.hour),
        }
    )
    return out


def prepare_population(raw: pd.DataFrame) -> pd.DataFrame:
    """Return *raw* reduced to the canonical columns, dropping unusable rows.

    Rows with a missing, unparsable or negative duration (clock skew in the
    operator export) are dropped and counted in the log.
    """
    if set(config.POPULATION_COLS).issubset(raw.columns):
        df = raw[list(config.POPULATION_COLS)].copy()
        df[config.DURATION_COL] = pd.to_numeric(df[config.DURATION_COL], errors="coerce")
    else:
        df = _derive_columns(raw)

    before = len(df)
    df = df.dropna(subset=list(config.POPULATION_COLS))
    df = df[df[config.DURATION_COL] >= 0]
    dropped = before - len(df)
    if dropped:
        logger.warning(f"Dropped {dropped} trips with missing or negative fields")

    df[config.DURATION_COL] = df[config.DURATION_COL].astype(float)
    df[config.DAY_COL] = df[config.DAY_COL].astype(str)
    df[config.TIME_COL] = df[config.TIME_COL].astype(str)
    return df.reset_index(drop=True)


def load_population(path: Union[str, Path]) -> pd.DataFrame:
    """Read a trip CSV and return the canonical (unfiltered) population."""
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"trip file not found: {path}")
    logger.info(f"Loading trips from {path} …")
    raw = pd.read_csv(path)
    df = prepare_population(raw)
    logger.success(f"Loaded {len(df):,} trips → {path.name}")
    return df


def filter_outliers(
    population: pd.DataFrame, ceiling: float = config.DURATION_CEILING_S
) -> pd.DataFrame:
    """Keep trips with ``duration < ceiling`` and only the downstream columns."""
    keep = population[config.DURATION_COL] < ceiling
    out = population.loc[keep, list(config.POPULATION_COLS)].reset_index(drop=True)
    removed = len(population) - len(out)
    logger.info(f"Outlier filter (< {ceiling:,.0f} s) removed {removed} of {len(population)} trips")
    return out


def true_mean(population: pd.DataFrame) -> float:
    """Mean trip duration over the whole (filtered) population."""
    if population.empty:
        raise ConfigurationError("population is empty")
    return float(population[config.DURATION_COL].mean())
