"""Field validation for resources, overrides, envelopes and templates."""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from config.defaults import RATIO_MAX, RATIO_MIN
from models.resource import CalendarTemplate, PRESENCE_VALUES, Resource
from models.scenario import BudgetEnvelope, EnvelopeType


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def fail(self, message: str) -> None:
        self.is_valid = False
        self.errors.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        if not other.is_valid:
            self.is_valid = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self


def _is_iso_date(value: str) -> bool:
    if not isinstance(value, str) or len(value) != 10:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _is_presence_value(value) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and value in PRESENCE_VALUES


def validate_override_value(value: Optional[float], label: str = "Override") -> ValidationResult:
    """``None`` clears an override; anything else must be 0, 0.5 or 1."""
    result = ValidationResult()
    if value is not None and not _is_presence_value(value):
        result.fail(f"{label}: presence value must be one of 0, 0.5, 1 (got {value!r}).")
    return result


def validate_override_map(overrides: dict, label: str = "Overrides") -> ValidationResult:
    result = ValidationResult()
    for key, value in overrides.items():
        if not _is_iso_date(key):
            result.fail(f"{label}: '{key}' is not a YYYY-MM-DD date.")
        if not _is_presence_value(value):
            result.fail(f"{label}: value for {key} must be one of 0, 0.5, 1 (got {value!r}).")
    return result


def validate_date_range(start: str, end: str, label: str = "Period") -> ValidationResult:
    result = ValidationResult()
    for name, value in (("start", start), ("end", end)):
        if value and not _is_iso_date(value):
            result.fail(f"{label}: {name} date '{value}' is not a YYYY-MM-DD date.")
    if result.is_valid and start and end and start > end:
        result.fail(f"{label}: start date {start} is after end date {end}.")
    return result


def validate_holiday_dates(dates: Iterable[str]) -> ValidationResult:
    result = ValidationResult()
    bad = [d for d in dates if not _is_iso_date(d)]
    if bad:
        result.fail(f"Holidays: invalid dates {', '.join(map(str, bad))}.")
    return result


def validate_resource(resource: Resource) -> ValidationResult:
    result = ValidationResult()

    if not resource.first_name.strip() and not resource.last_name.strip():
        result.fail("Resource: a first or last name is required.")
    if resource.contract_type is None:
        result.fail("Resource: contract type is required.")
    if resource.country is None:
        result.fail("Resource: country is required.")
    if resource.tjm is None or resource.tjm < 0:
        result.fail("Resource: daily rate cannot be negative.")
    if resource.ratio_change is None or not RATIO_MIN <= resource.ratio_change <= RATIO_MAX:
        result.fail(f"Resource: change ratio must be between {RATIO_MIN} and {RATIO_MAX}.")

    result.merge(validate_date_range(resource.start_date, resource.end_date, "Resource contract"))
    result.merge(validate_override_map(resource.overrides, "Resource overrides"))
    result.merge(validate_holiday_dates(resource.dynamic_holidays))

    if resource.tjm == 0:
        result.warnings.append(f"Resource {resource.full_name}: daily rate is 0, cost will be 0.")
    return result


def validate_envelope(envelope: BudgetEnvelope) -> ValidationResult:
    result = ValidationResult()
    if not envelope.name or not envelope.name.strip():
        result.fail("Envelope: name is required.")
    if not isinstance(envelope.type, EnvelopeType):
        result.fail(f"Envelope: type must be RUN or CHANGE (got {envelope.type!r}).")
    if envelope.amount is None or envelope.amount < 0:
        result.fail("Envelope: amount cannot be negative.")
    return result


def validate_template(template: CalendarTemplate) -> ValidationResult:
    result = ValidationResult()
    if not template.name or not template.name.strip():
        result.fail("Template: name is required.")
    result.merge(validate_override_map(template.overrides, "Template overrides"))
    result.merge(validate_holiday_dates(template.dynamic_holidays))
    return result
