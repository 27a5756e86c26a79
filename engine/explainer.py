"""Generates human-readable explanations for day statuses."""

from typing import List, Optional

from models.resource import PRESENCE_VALUES
from models.stats import DayStatus

STYLE_OUT_OF_BOUNDS = "out_of_bounds"
STYLE_OVERRIDE = "override"
STYLE_HOLIDAY = "holiday"
STYLE_WEEKEND = "weekend"
STYLE_WORKING = "working"

PRESENCE_LABELS = {0: "Off", 0.5: "Half-day", 1: "Full day"}
CLEAR_LABEL = "Clear (back to default)"


def presence_label(value: float) -> str:
    return PRESENCE_LABELS.get(value, str(value))


def presence_choices() -> List[str]:
    return [presence_label(v) for v in PRESENCE_VALUES] + [CLEAR_LABEL]


def presence_from_label(label: str) -> Optional[float]:
    """Value behind a choice from presence_choices; the clear choice gives None."""
    if label == CLEAR_LABEL:
        return None
    return next(v for v in PRESENCE_VALUES if presence_label(v) == label)


def day_style(status: DayStatus) -> str:
    """Display class for a calendar cell.

    Imported holidays are stored as 0 overrides, so a holiday with an override
    of 0 still renders as a holiday rather than as a plain day off.
    """
    if status.out_of_bounds:
        return STYLE_OUT_OF_BOUNDS
    if status.is_holiday and (not status.override_active or status.value == 0):
        return STYLE_HOLIDAY
    if status.override_active:
        return STYLE_OVERRIDE
    if status.is_weekend:
        return STYLE_WEEKEND
    return STYLE_WORKING


def explain_day(iso_date: str, status: DayStatus) -> List[str]:
    """Produce step-by-step explanation for one resolved day."""
    steps = []

    if status.is_holiday:
        reason = "public holiday"
    elif status.is_weekend:
        reason = "weekend"
    else:
        reason = "working day"
    steps.append(
        f"Step 1 - Default: {iso_date} is a {reason} => {presence_label(status.default_value)}"
    )

    if status.override_active:
        steps.append("Step 2 - Override: a manual value replaces the default")
    else:
        steps.append("Step 2 - Override: none, default applies")

    if status.out_of_bounds:
        steps.append("Step 3 - Contract: date outside contract bounds => Off")
    else:
        steps.append("Step 3 - Contract: date within contract bounds")

    steps.append(f"Result: {presence_label(status.value)} ({status.value})")
    return steps
