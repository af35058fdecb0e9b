from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from trip_sampling import allocation, estimators, strata
from trip_sampling.allocation import AllocationPlan
from trip_sampling.errors import ConfigurationError, InsufficientPopulation, InvalidAllocation


@pytest.fixture
def ten_trips() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "duration": [float(d) for d in range(100, 1001, 100)],
            "day_of_week": "Monday",
            "time_of_day": "Morning",
        }
    )


def test_srs_mean_is_average_of_seeded_draw(ten_trips):
    res = estimators.srs_estimate(ten_trips, seed=1, sample_size=5)
    picks = np.random.default_rng(1).choice(10, size=5, replace=False)
    chosen = ten_trips["duration"].to_numpy()[picks]
    assert res.mean == pytest.approx(chosen.mean())
    assert res.se == pytest.approx(chosen.std(ddof=1) / np.sqrt(5))
    assert estimators.srs_estimate(ten_trips, seed=1, sample_size=5) == res


def test_srs_whole_population_recovers_true_mean(ten_trips):
    res = estimators.srs_estimate(ten_trips, seed=3, sample_size=10)
    assert res.mean == pytest.approx(550.0)


def test_srs_rejects_oversized_sample(ten_trips):
    with pytest.raises(InsufficientPopulation):
        estimators.srs_estimate(ten_trips, seed=1, sample_size=11)


@pytest.mark.parametrize("seed", [None, -1, 1.5])
def test_seed_required(ten_trips, seed):
    with pytest.raises(ConfigurationError):
        estimators.srs_estimate(ten_trips, seed=seed, sample_size=3)


def test_stratified_is_reproducible(trips):
    table = strata.build_table(trips)
    plan = allocation.neyman_allocation(table, 200)
    first = estimators.stratified_estimate(table, plan, seed=42)
    second = estimators.stratified_estimate(table, plan, seed=42)
    assert first.as_tuple() == second.as_tuple()
    others = {estimators.stratified_estimate(table, plan, seed=s).mean for s in range(5)}
    assert len(others) > 1


def test_ci_is_symmetric_about_mean(trips):
    table = strata.build_table(trips)
    plan = allocation.proportional_allocation(table, 140)
    for seed in range(10):
        res = estimators.stratified_estimate(table, plan, seed)
        assert res.lci <= res.mean <= res.uci
        assert res.uci - res.lci == pytest.approx(2 * 1.96 * res.se)
        assert res.margin == pytest.approx(1.96 * res.se)


def test_stratified_census_matches_population(trips):
    table = strata.build_table(trips)
    plan = allocation.plan_from_counts(table, table.counts)
    res = estimators.stratified_estimate(table, plan, seed=0)
    assert res.mean == pytest.approx(trips["duration"].mean())
    assert res.se > 0
    assert estimators.stratified_estimate(table, plan, seed=0, fpc=True).se == pytest.approx(0.0)


def test_stratified_standard_error_formula(two_strata):
    table = strata.build_table(two_strata)
    plan = allocation.plan_from_counts(table, {("Monday", "Morning"): 3, ("Monday", "Midday"): 2})
    res = estimators.stratified_estimate(table, plan, seed=9)

    rng = np.random.default_rng(9)
    morning = table.durations[("Monday", "Morning")][rng.choice(6, size=3, replace=False)]
    midday = table.durations[("Monday", "Midday")][rng.choice(4, size=2, replace=False)]
    mean = 0.6 * morning.mean() + 0.4 * midday.mean()
    se = np.sqrt(0.36 * morning.var(ddof=1) / 3 + 0.16 * midday.var(ddof=1) / 2)
    assert res.mean == pytest.approx(mean)
    assert res.se == pytest.approx(se)


def test_stratified_rejects_oversampling(two_strata):
    table = strata.build_table(two_strata)
    plan = AllocationPlan("fixed", 7, {("Monday", "Morning"): 2, ("Monday", "Midday"): 5})
    with pytest.raises(InsufficientPopulation):
        estimators.stratified_estimate(table, plan, seed=1)


def test_stratified_rejects_empty_stratum(two_strata):
    table = strata.build_table(two_strata)
    plan = AllocationPlan("fixed", 3, {("Monday", "Morning"): 3, ("Monday", "Midday"): 0})
    with pytest.raises(InvalidAllocation):
        estimators.stratified_estimate(table, plan, seed=1)


def test_stratified_rejects_foreign_strata(two_strata):
    table = strata.build_table(two_strata)
    plan = AllocationPlan("fixed", 2, {("Sunday", "Night"): 2})
    with pytest.raises(ConfigurationError):
        estimators.stratified_estimate(table, plan, seed=1)


def test_custom_critical_value(ten_trips):
    res = estimators.srs_estimate(ten_trips, seed=2, sample_size=4, z=2.576)
    assert res.uci - res.mean == pytest.approx(2.576 * res.se)
