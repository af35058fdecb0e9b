# -*- coding: utf-8 -*-
"""End-to-end comparison of SRS, proportional and Neyman designs.

Workflow
--------
1. Drop trips of a day or longer and compute the true mean duration.
2. Size an SRS for the target margin of error from the population SD.
3. Pilot SRS, proportional and Neyman estimates at that size; their SE ratios
   against the SRS pilot are the design effects.
4. Rescale each stratified design's total by its design effect.
5. Repeat every design over the seed list and record CI coverage.

Usage (from repository root)::

    python -m trip_sampling.analysis --input data/raw/trips.csv

The comparison table is written to ``reports/sampling_comparison.csv`` unless
``--output`` says otherwise; a coverage summary is printed to stdout.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import click
import pandas as pd
from loguru import logger

from . import config
from .allocation import AllocationPlan, allocation_summary, neyman_allocation, proportional_allocation
from .design_effect import corrected_sample_size, design_effect, required_sample_size
from .errors import InsufficientPopulation, SamplingError
from .estimators import EstimateResult, srs_estimate, stratified_estimate
from .harness import Design, coverage_summary, rows_to_frame, run
from .population import filter_outliers, load_population, true_mean
from .stats_utils import z_critical
from .strata import StratumTable, build_table


@dataclass(frozen=True)
class AnalysisSummary:
    true_mean: float
    population_size: int
    srs_size: int
    strata: StratumTable
    proportional: AllocationPlan
    neyman: AllocationPlan
    pilot: Dict[str, EstimateResult]
    design_effects: Dict[str, float]
    comparison: pd.DataFrame

    @property
    def coverage(self) -> pd.DataFrame:
        return coverage_summary(self.comparison)

    def allocation_table(self) -> pd.DataFrame:
        return allocation_summary((self.proportional, self.neyman), self.strata)


def build_designs(
    population: pd.DataFrame,
    table: StratumTable,
    srs_size: int,
    plans: Sequence[Tuple[str, AllocationPlan]],
    z: float = config.Z_95,
) -> List[Design]:
    """SRS at *srs_size* followed by one stratified design per named plan."""
    designs = [Design("SRS", lambda seed: srs_estimate(population, seed, srs_size, z))]
    for name, plan in plans:
        designs.append(
            Design(name, lambda seed, plan=plan: stratified_estimate(table, plan, seed, z))
        )
    return designs


def run_analysis(
    population: pd.DataFrame,
    *,
    margin_of_error: float = config.DEFAULT_MARGIN_OF_ERROR_S,
    seeds: Sequence[int] = config.DEFAULT_SEEDS,
    pilot_seed: int = config.DEFAULT_PILOT_SEED,
    adjustment: Optional[float] = None,
    z: float = config.Z_95,
    ceiling: float = config.DURATION_CEILING_S,
) -> AnalysisSummary:
    """Run the whole comparison on an unfiltered *population*."""
    filtered = filter_outliers(population, ceiling)
    if len(filtered) < 2:
        raise InsufficientPopulation(
            f"need at least 2 trips under {ceiling:,.0f} s to estimate a spread, got {len(filtered)}"
        )
    truth = true_mean(filtered)
    sd = float(filtered[config.DURATION_COL].std(ddof=1))
    srs_n = required_sample_size(sd, margin_of_error, z)
    logger.info(
        f"Population {len(filtered):,} trips, mean {truth:.2f} s, SD {sd:.2f} s "
        f"→ SRS size {srs_n} for MOE {margin_of_error:g} s"
    )

    table = build_table(filtered)

    # Pilots at the SRS size ---------------------------------------------------
    srs_pilot = srs_estimate(filtered, pilot_seed, srs_n, z)
    prop_pilot = stratified_estimate(
        table, proportional_allocation(table, srs_n, adjustment), pilot_seed, z
    )
    ney_pilot = stratified_estimate(table, neyman_allocation(table, srs_n), pilot_seed, z)

    deffs = {
        "Proportional": design_effect(prop_pilot.se, srs_pilot.se),
        "Neyman": design_effect(ney_pilot.se, srs_pilot.se),
    }
    prop_n = corrected_sample_size(prop_pilot.se, srs_pilot.se, srs_n)
    ney_n = corrected_sample_size(ney_pilot.se, srs_pilot.se, srs_n)
    for name, n in (("Proportional", prop_n), ("Neyman", ney_n)):
        logger.info(f"{name}: deff {deffs[name]:.4f} → corrected total {n}")

    proportional = proportional_allocation(table, prop_n, adjustment)
    neyman = neyman_allocation(table, ney_n)

    # Repetitions --------------------------------------------------------------
    designs = build_designs(
        filtered, table, srs_n, [("Proportional", proportional), ("Neyman", neyman)], z
    )
    rows = run(filtered, designs, seeds)

    return AnalysisSummary(
        true_mean=truth,
        population_size=len(filtered),
        srs_size=srs_n,
        strata=table,
        proportional=proportional,
        neyman=neyman,
        pilot={"SRS": srs_pilot, "Proportional": prop_pilot, "Neyman": ney_pilot},
        design_effects=deffs,
        comparison=rows_to_frame(rows),
    )


###############################################################################
# CLI
###############################################################################


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(lambda msg: click.echo(msg, nl=False, err=True), level="DEBUG" if verbose else "INFO")


@click.command()
@click.option("--input", "input_csv", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=True, help="Trip CSV (canonical or raw operator export).")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=config.DEFAULT_REPORT_CSV, show_default=True, help="Comparison report CSV.")
@click.option("--moe", "margin_of_error", type=float, default=config.DEFAULT_MARGIN_OF_ERROR_S, show_default=True, help="Target margin of error in seconds.")
@click.option("--seed", "seeds", type=int, multiple=True, help="Repetition seed (repeatable). Defaults to config.DEFAULT_SEEDS.")
@click.option("--pilot-seed", type=int, default=config.DEFAULT_PILOT_SEED, show_default=True)
@click.option("--adjustment", type=float, default=None, help="Manual proportional-allocation correction; omit for automatic reconciliation.")
@click.option("--confidence", type=float, default=config.CONFIDENCE_LEVEL, show_default=True)
@click.option("--ceiling", type=float, default=config.DURATION_CEILING_S, show_default=True, help="Drop trips at or above this duration (s).")
@click.option("--verbose", is_flag=True, help="Per-stratum debug logging.")
def main(
    input_csv: Path,
    output: Path,
    margin_of_error: float,
    seeds: Tuple[int, ...],
    pilot_seed: int,
    adjustment: Optional[float],
    confidence: float,
    ceiling: float,
    verbose: bool,
) -> None:
    """Compare SRS, proportional and Neyman estimates of mean trip duration."""
    _configure_logging(verbose)
    logger.info("=== TRIP DURATION SAMPLING COMPARISON ===")
    try:
        z = z_critical(confidence)
        population = load_population(input_csv)
        summary = run_analysis(
            population,
            margin_of_error=margin_of_error,
            seeds=seeds or config.DEFAULT_SEEDS,
            pilot_seed=pilot_seed,
            adjustment=adjustment,
            z=z,
            ceiling=ceiling,
        )
    except SamplingError as exc:
        logger.error(f"Analysis aborted: {exc}")
        raise SystemExit(1)

    summary.comparison.to_csv(config.ensure_dir(output), index=False)
    logger.success(f"Wrote {len(summary.comparison)} comparison rows → {output}")

    click.echo(f"True mean duration: {summary.true_mean:.2f} s ({summary.population_size:,} trips)")
    click.echo(f"SRS sample size:    {summary.srs_size}")
    for name, deff in summary.design_effects.items():
        click.echo(f"Design effect ({name}): {deff:.4f}")
    click.echo("\nAllocation:\n" + summary.allocation_table().to_string(index=False))
    click.echo("\nCoverage:\n" + summary.coverage.to_string(index=False))


if __name__ == "__main__":
    main()
