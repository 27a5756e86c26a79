"""Presence and cost aggregation over a year, a month or any date window."""

import calendar
from datetime import date
from typing import Dict, List, Optional

from engine.calendar_rules import (
    DateLike, contract_bounds, holiday_set, is_weekend, iter_days, to_iso,
)
from engine.errors import ValidationError
from models.resource import Resource
from models.stats import PeriodStats


def aggregate_period(
    resource: Resource,
    start: DateLike,
    end: DateLike,
    holidays: Optional[Dict[str, List[str]]] = None,
) -> PeriodStats:
    """Sum presence between start and end (inclusive) and derive the cost.

    Same rules as ``resolve_day`` in the order that short-circuits best:
    bounds, override, holiday, weekend. The holiday set is built once per call.
    """
    start_iso, end_iso = to_iso(start), to_iso(end)
    if start_iso > end_iso:
        raise ValidationError([f"Period start {start_iso} is after end {end_iso}"])

    lower, upper = contract_bounds(resource)
    off_days = holiday_set(resource, holidays)
    overrides = resource.overrides

    total = 0
    for day in iter_days(start_iso, end_iso):
        iso = day.isoformat()
        if iso < lower or iso > upper:
            continue
        if iso in overrides:
            total += overrides[iso]
            continue
        if iso in off_days or is_weekend(day):
            continue
        total += 1

    return PeriodStats(start=start_iso, end=end_iso, days=total, cost=total * resource.tjm)


def aggregate_year(
    resource: Resource,
    year: int,
    holidays: Optional[Dict[str, List[str]]] = None,
) -> PeriodStats:
    return aggregate_period(resource, date(year, 1, 1), date(year, 12, 31), holidays)


def monthly_breakdown(
    resource: Resource,
    year: int,
    holidays: Optional[Dict[str, List[str]]] = None,
) -> List[PeriodStats]:
    """One PeriodStats per calendar month of the year, January first."""
    months = []
    for month in range(1, 13):
        last_day = calendar.monthrange(year, month)[1]
        months.append(
            aggregate_period(resource, date(year, month, 1), date(year, month, last_day), holidays)
        )
    return months
