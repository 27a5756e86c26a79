"""Day-status resolution: default calendar, holidays, overrides and contract bounds."""

from datetime import date, datetime, timedelta
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple, Union

from config.defaults import MAX_BOUND, MIN_BOUND
from config.holidays import static_holidays
from models.resource import Resource
from models.stats import DayStatus

DateLike = Union[date, str]


def to_iso(day: DateLike) -> str:
    """Zero-padded YYYY-MM-DD form; string comparison on it orders dates."""
    return parse_iso(day).isoformat()


def parse_iso(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def iter_days(start: DateLike, end: DateLike) -> Iterator[date]:
    """Every calendar day from start to end, both inclusive, in order."""
    current = parse_iso(start)
    last = parse_iso(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


def contract_bounds(resource: Resource) -> Tuple[str, str]:
    return resource.start_date or MIN_BOUND, resource.end_date or MAX_BOUND


def holiday_set(resource: Resource, holidays: Optional[Dict[str, List[str]]] = None) -> FrozenSet[str]:
    """Static country holidays plus the resource's imported ones."""
    return static_holidays(resource.country, holidays) | frozenset(resource.dynamic_holidays)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def resolve_day(
    day: DateLike,
    resource: Resource,
    holidays: Optional[Dict[str, List[str]]] = None,
) -> DayStatus:
    """Presence value and classification flags for one resource on one date.

    An override replaces the weekday/weekend/holiday default, but nothing makes
    a resource present outside its contract: out-of-bounds days are always 0.
    """
    the_day = parse_iso(day)
    iso = the_day.isoformat()
    start, end = contract_bounds(resource)

    out_of_bounds = iso < start or iso > end
    holiday = iso in holiday_set(resource, holidays)
    weekend = is_weekend(the_day)
    default_value = 0 if (holiday or weekend) else 1

    override_active = iso in resource.overrides
    value = resource.overrides[iso] if override_active else default_value
    if out_of_bounds:
        value = 0

    return DayStatus(
        value=value,
        default_value=default_value,
        is_holiday=holiday,
        is_weekend=weekend,
        override_active=override_active,
        out_of_bounds=out_of_bounds,
    )
