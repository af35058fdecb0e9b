"""Per-stratum population statistics.

A stratum is one ``(day_of_week, time_of_day)`` combination.  The table built
here fixes the stratum iteration order once (day-major, following
``config.DAYS_OF_WEEK`` then ``config.TIMES_OF_DAY``) and every consumer -
allocation, reconciliation tie-breaks, the stratified draw - walks
``StratumTable.keys`` in that order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Sequence, Tuple

import numpy as np
import pandas as pd
from loguru import logger

from . import config
from .errors import ConfigurationError

Stratum = Tuple[str, str]


@dataclass(frozen=True)
class StratumTable:
    keys: Tuple[Stratum, ...]
    counts: Dict[Stratum, int]
    proportions: Dict[Stratum, float]
    stds: Dict[Stratum, float]
    durations: Dict[Stratum, np.ndarray]

    @property
    def population_size(self) -> int:
        return sum(self.counts.values())

    def __iter__(self) -> Iterator[Stratum]:
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    def to_frame(self) -> pd.DataFrame:
        """Tabular view (one row per stratum, iteration order preserved)."""
        return pd.DataFrame(
            {
                config.DAY_COL: [k[0] for k in self.keys],
                config.TIME_COL: [k[1] for k in self.keys],
                "N_h": [self.counts[k] for k in self.keys],
                "p_h": [self.proportions[k] for k in self.keys],
                "S_h": [self.stds[k] for k in self.keys],
            }
        )


def _check_labels(values: pd.Series, allowed: Sequence[str], column: str) -> None:
    unknown = sorted(set(values.unique()) - set(allowed))
    if unknown:
        raise ConfigurationError(f"unknown {column} label(s): {', '.join(map(str, unknown))}")


def build_table(
    population: pd.DataFrame,
    days: Sequence[str] = config.DAYS_OF_WEEK,
    times: Sequence[str] = config.TIMES_OF_DAY,
) -> StratumTable:
    """Group *population* by (day, time) and compute ``N_h``, ``p_h`` and ``S_h``.

    ``S_h`` is the sample standard deviation (ddof=1) of duration within the
    stratum; a single-trip stratum gets 0.0.  Combinations with no trips are
    left out of the table.
    """
    if population.empty:
        raise ConfigurationError("cannot stratify an empty population")
    _check_labels(population[config.DAY_COL], days, config.DAY_COL)
    _check_labels(population[config.TIME_COL], times, config.TIME_COL)

    total = len(population)
    groups = population.groupby([config.DAY_COL, config.TIME_COL], sort=False).indices
    durations_all = population[config.DURATION_COL].to_numpy(dtype=float)

    keys = []
    counts: Dict[Stratum, int] = {}
    proportions: Dict[Stratum, float] = {}
    stds: Dict[Stratum, float] = {}
    durations: Dict[Stratum, np.ndarray] = {}
    for day in days:
        for tod in times:
            idx = groups.get((day, tod))
            if idx is None or len(idx) == 0:
                continue
            key = (day, tod)
            values = durations_all[np.sort(idx)]
            keys.append(key)
            counts[key] = len(values)
            proportions[key] = len(values) / total
            stds[key] = float(values.std(ddof=1)) if len(values) > 1 else 0.0
            durations[key] = values
            logger.debug(f"[Stratum] {day}/{tod}: N_h={len(values)} S_h={stds[key]:.1f}")

    logger.info(f"Built stratum table: {len(keys)} strata over {total:,} trips")
    return StratumTable(tuple(keys), counts, proportions, stds, durations)


def single_stratum(population: pd.DataFrame) -> StratumTable:
    """Whole population as one stratum (the SRS design)."""
    values = population[config.DURATION_COL].to_numpy(dtype=float)
    if len(values) == 0:
        raise ConfigurationError("population is empty")
    key: Stratum = ("All", "All")
    std = float(values.std(ddof=1)) if len(values) > 1 else 0.0
    return StratumTable((key,), {key: len(values)}, {key: 1.0}, {key: std}, {key: values})
