# -*- coding: utf-8 -*-
"""Split a total sample size across strata.

Two policies are offered:

* **Proportional** - ``n_h = round(p_h * n - adjustment)``.  ``adjustment`` is
  an optional hand-tuned constant from the earlier notebook analysis;
  leave it as ``None`` for plain proportional allocation.
* **Neyman** - ``n_h = round(n * N_h S_h / sum(N_j S_j))``.

Both go through :func:`reconcile`, which guarantees ``sum(n_h) == n``.

Reconciliation rule
-------------------
Raw values are rounded half-up.  If the rounded counts overshoot the target
by ``k``, the ``k`` strata that were rounded *up* with the smallest excess of
their fractional part over 0.5 lose one unit each.  If they undershoot, the
``k`` strata rounded *down* whose fractional part is closest to 0.5 gain one
unit.  Remaining ties go to the stratum that comes first in table order.
"""
from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Optional, Tuple

import pandas as pd
from loguru import logger

from .errors import ConfigurationError, InsufficientPopulation, InvalidAllocation
from .strata import Stratum, StratumTable

# Raw allocations are products of float proportions; anything closer than
# this to a rounding boundary is treated as sitting on it.
_RAW_DECIMALS = 9


@dataclass(frozen=True)
class AllocationPlan:
    method: str
    target_total: int
    counts: Dict[Stratum, int]
    raw: Dict[Stratum, float] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def __getitem__(self, key: Stratum) -> int:
        return self.counts[key]

    def __iter__(self) -> Iterator[Stratum]:
        return iter(self.counts)

    def __len__(self) -> int:
        return len(self.counts)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def reconcile(raw: Mapping[Stratum, float], target_total: int) -> Dict[Stratum, int]:
    """Round *raw* per-stratum values so they sum to exactly *target_total*."""
    keys = list(raw)
    values = {k: round(float(raw[k]), _RAW_DECIMALS) for k in keys}
    fracs = {k: round(v - math.floor(v), _RAW_DECIMALS) for k, v in values.items()}
    counts = {k: _round_half_up(v) for k, v in values.items()}

    drift = sum(counts.values()) - target_total
    if drift > 0:
        candidates = [(fracs[k] - 0.5, pos, k) for pos, k in enumerate(keys) if fracs[k] >= 0.5]
        step = -1
    elif drift < 0:
        candidates = [(0.5 - fracs[k], pos, k) for pos, k in enumerate(keys) if fracs[k] < 0.5]
        step = 1
    else:
        candidates, step = [], 0

    need = abs(drift)
    if need:
        if len(candidates) < need:
            raise InvalidAllocation(
                f"rounded counts miss target {target_total} by {drift:+d} but only "
                f"{len(candidates)} strata can be adjusted"
            )
        candidates.sort(key=lambda c: (c[0], c[1]))
        for _, _, key in candidates[:need]:
            counts[key] += step
        logger.debug(f"Reconciled rounding drift {drift:+d} over {need} strata")

    negative = [k for k, n in counts.items() if n < 0]
    if negative:
        raise InvalidAllocation(f"negative sample size for strata: {negative}")
    return counts


def _check_target(table: StratumTable, target_total: int) -> None:
    if isinstance(target_total, bool) or not isinstance(target_total, numbers.Integral) or target_total <= 0:
        raise ConfigurationError(f"target total must be a positive integer, got {target_total!r}")
    if target_total > table.population_size:
        raise InsufficientPopulation(
            f"target total {target_total} exceeds population size {table.population_size}"
        )


def _build_plan(
    method: str, table: StratumTable, raw: Dict[Stratum, float], target_total: int
) -> AllocationPlan:
    counts = reconcile(raw, target_total)
    over = [(k, n, table.counts[k]) for k, n in counts.items() if n > table.counts[k]]
    if over:
        k, n, cap = over[0]
        raise InsufficientPopulation(
            f"{method}: stratum {k[0]}/{k[1]} needs {n} trips but only has {cap}"
        )
    plan = AllocationPlan(method, target_total, counts, raw)
    logger.info(f"{method} allocation: {plan.total} units over {len(plan)} strata")
    return plan


def proportional_allocation(
    table: StratumTable, target_total: int, adjustment: Optional[float] = None
) -> AllocationPlan:
    """Allocate proportionally to ``p_h``, optionally shifted by a manual *adjustment*."""
    _check_target(table, target_total)
    shift = 0.0 if adjustment is None else float(adjustment)
    raw = {k: table.proportions[k] * target_total - shift for k in table.keys}
    method = "proportional" if adjustment is None else f"proportional(adjustment={shift:g})"
    return _build_plan(method, table, raw, target_total)


def neyman_allocation(table: StratumTable, target_total: int) -> AllocationPlan:
    """Allocate proportionally to ``N_h * S_h``."""
    _check_target(table, target_total)
    weights = {k: table.counts[k] * table.stds[k] for k in table.keys}
    total_weight = sum(weights.values())
    if total_weight <= 0:
        raise InvalidAllocation("Neyman weights are all zero (no within-stratum variation)")
    raw = {k: target_total * w / total_weight for k, w in weights.items()}
    return _build_plan("neyman", table, raw, target_total)


def plan_from_counts(table: StratumTable, counts: Mapping[Stratum, int]) -> AllocationPlan:
    """Wrap explicit per-stratum counts, validated against *table*."""
    unknown = [k for k in counts if k not in table.counts]
    if unknown:
        raise ConfigurationError(f"unknown strata in plan: {unknown}")
    ordered = {k: int(counts[k]) for k in table.keys if k in counts}
    total = sum(ordered.values())
    _check_target(table, total)
    for k, n in ordered.items():
        if n < 0:
            raise InvalidAllocation(f"negative sample size for stratum {k}")
        if n > table.counts[k]:
            raise InsufficientPopulation(
                f"stratum {k[0]}/{k[1]} needs {n} trips but only has {table.counts[k]}"
            )
    return AllocationPlan("fixed", total, ordered, {k: float(n) for k, n in ordered.items()})


def allocation_summary(plans: Tuple[AllocationPlan, ...], table: StratumTable) -> pd.DataFrame:
    """Side-by-side ``n_h`` of several plans next to the stratum table."""
    frame = table.to_frame()
    for plan in plans:
        frame[plan.method] = [plan.counts.get(k, 0) for k in table.keys]
    return frame
