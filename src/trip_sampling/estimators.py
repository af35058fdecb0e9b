# -*- coding: utf-8 -*-
"""Design-based estimates of mean trip duration.

There is one estimator, :func:`stratified_estimate`.  Simple random sampling
is its single-stratum special case (:func:`srs_estimate`), so SRS and the
stratified designs share the draw, the variance formula and the CI.

For a plan ``{h: n_h}`` over strata of size ``N_h`` (``N = sum N_h``)::

    mean = sum_h (N_h/N) * ybar_h
    SE   = sqrt( sum_h (N_h/N)^2 * s_h^2 / n_h )
    CI   = mean ± z * SE

Each call builds its own ``numpy.random.Generator`` from *seed* and walks the
strata in table order, so the same seed and population always give the same
sample.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd
from loguru import logger

from . import config
from .allocation import AllocationPlan
from .errors import ConfigurationError, InsufficientPopulation, InvalidAllocation
from .stats_utils import normal_ci
from .strata import StratumTable, single_stratum


@dataclass(frozen=True)
class EstimateResult:
    mean: float
    se: float
    lci: float
    uci: float

    @property
    def margin(self) -> float:
        """Half-width of the confidence interval."""
        return (self.uci - self.lci) / 2

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.mean, self.se, self.lci, self.uci)


def _check_seed(seed) -> int:
    if seed is None:
        raise ConfigurationError("a seed is required for a reproducible draw")
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise ConfigurationError(f"seed must be a non-negative integer, got {seed!r}")
    return int(seed)


def stratified_estimate(
    table: StratumTable,
    plan: AllocationPlan,
    seed: int,
    z: float = config.Z_95,
    *,
    fpc: bool = False,
) -> EstimateResult:
    """Draw the stratified sample described by *plan* and estimate the mean.

    Parameters
    ----------
    table : StratumTable
        Population strata; fixes the draw order.
    plan : AllocationPlan
        Sample size per stratum.  Every stratum in *table* must receive at
        least one unit, none more than ``N_h``.
    seed : int
        Seeds the generator for this call only.
    z : float, default 1.96
        Critical value for the interval.
    fpc : bool, default False
        Apply ``(1 - n_h/N_h)`` to strata whose sampling fraction reaches
        ``config.FPC_THRESHOLD``.  Off by default; bike-share fractions are
        far below the threshold.
    """
    seed = _check_seed(seed)
    stray = [k for k in plan if k not in table.counts]
    if stray:
        raise ConfigurationError(f"plan references strata absent from the table: {stray}")

    rng = np.random.default_rng(seed)
    pop_total = table.population_size
    mean = 0.0
    variance = 0.0
    for key in table.keys:
        n_h = int(plan.counts.get(key, 0))
        cap = table.counts[key]
        if n_h > cap:
            raise InsufficientPopulation(
                f"stratum {key[0]}/{key[1]}: requested {n_h} of {cap} trips"
            )
        if n_h <= 0:
            raise InvalidAllocation(
                f"stratum {key[0]}/{key[1]} allocated {n_h} units; its mean is undefined"
            )

        picks = rng.choice(cap, size=n_h, replace=False)
        sample = table.durations[key][picks]
        weight = cap / pop_total
        mean += weight * float(sample.mean())

        if n_h > 1:
            term = weight ** 2 * float(sample.var(ddof=1)) / n_h
            if fpc and n_h / cap >= config.FPC_THRESHOLD:
                term *= 1 - n_h / cap
            variance += term
        else:
            logger.warning(f"Stratum {key[0]}/{key[1]} sampled once; contributes no variance")

    se = math.sqrt(variance)
    lci, uci = normal_ci(mean, se, z)
    return EstimateResult(mean, se, lci, uci)


def srs_estimate(
    population: pd.DataFrame,
    seed: int,
    sample_size: int,
    z: float = config.Z_95,
    *,
    fpc: bool = False,
) -> EstimateResult:
    """Simple random sample of *sample_size* trips without replacement."""
    if isinstance(sample_size, bool) or not isinstance(sample_size, (int, np.integer)) or sample_size <= 0:
        raise ConfigurationError(f"sample size must be a positive integer, got {sample_size!r}")
    if sample_size > len(population):
        raise InsufficientPopulation(
            f"sample size {sample_size} exceeds population size {len(population)}"
        )
    table = single_stratum(population)
    key = table.keys[0]
    plan = AllocationPlan("srs", int(sample_size), {key: int(sample_size)})
    return stratified_estimate(table, plan, seed, z, fpc=fpc)
