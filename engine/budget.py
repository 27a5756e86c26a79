"""Budget envelopes reconciled against the resource cost forecast."""

from typing import Iterable, Optional, Tuple

from engine.stats_cache import StatsCache
from models.resource import Resource
from models.scenario import BudgetEnvelope, EnvelopeType
from models.stats import BudgetSummary


def envelope_totals(envelopes: Iterable[BudgetEnvelope]) -> Tuple[float, float]:
    """Total budget as (RUN, CHANGE)."""
    run = change = 0.0
    for env in envelopes:
        if env.type is EnvelopeType.RUN:
            run += env.amount
        else:
            change += env.amount
    return run, change


def forecast_split(
    resources: Iterable[Resource],
    year: int,
    cache: Optional[StatsCache] = None,
) -> Tuple[float, float]:
    """Forecast cost as (RUN, CHANGE), split per resource by its change ratio."""
    if cache is None:
        cache = StatsCache()
    run = change = 0.0
    for res in resources:
        cost = cache.get_stats(res, year).cost
        change += cost * res.change_share
        run += cost * res.run_share
    return run, change


def budget_summary(
    envelopes: Iterable[BudgetEnvelope],
    resources: Iterable[Resource],
    year: int,
    cache: Optional[StatsCache] = None,
) -> BudgetSummary:
    budget_run, budget_change = envelope_totals(envelopes)
    forecast_run, forecast_change = forecast_split(resources, year, cache)
    return BudgetSummary(
        budget_run=budget_run,
        budget_change=budget_change,
        forecast_run=forecast_run,
        forecast_change=forecast_change,
    )
