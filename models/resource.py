from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

PRESENCE_VALUES = (0, 0.5, 1)


class Country(str, Enum):
    FR = "FR"
    PT = "PT"
    IN = "IN"
    CO = "CO"


class ContractType(str, Enum):
    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"
    APPRENTICE = "APPRENTICE"
    INTERN = "INTERN"


@dataclass(frozen=True)
class Resource:
    """A person or contract tracked day by day.

    Instances are never mutated: every edit returns a new value, which is what
    lets the stats cache key on object identity.
    """
    first_name: str
    last_name: str
    contract_type: ContractType
    tjm: float                     # daily rate
    country: Country               # selects the static holiday set
    ratio_change: float            # 0-100, share of cost booked on CHANGE
    start_date: str                # YYYY-MM-DD, inclusive, "" = unbounded
    end_date: str                  # YYYY-MM-DD, inclusive, "" = unbounded
    overrides: Dict[str, float] = field(default_factory=dict)
    dynamic_holidays: Tuple[str, ...] = ()
    tribe: Optional[str] = None
    id: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def change_share(self) -> float:
        return self.ratio_change / 100.0

    @property
    def run_share(self) -> float:
        return (100 - self.ratio_change) / 100.0

    def with_changes(self, **changes) -> "Resource":
        return replace(self, **changes)

    def with_override(self, iso_date: str, value: Optional[float]) -> "Resource":
        """Set (or clear, with ``None``) the override for one date."""
        return self.with_overrides([iso_date], value)

    def with_overrides(self, iso_dates: Iterable[str], value: Optional[float]) -> "Resource":
        overrides = dict(self.overrides)
        for d in iso_dates:
            if value is None:
                overrides.pop(d, None)
            else:
                overrides[d] = value
        return replace(self, overrides=overrides)

    def with_holidays(self, iso_dates: Iterable[str]) -> "Resource":
        """Mark imported holidays as days off and remember them as holidays."""
        dates = list(iso_dates)
        overrides = dict(self.overrides)
        for d in dates:
            overrides[d] = 0
        merged = tuple(sorted(set(self.dynamic_holidays) | set(dates)))
        return replace(self, overrides=overrides, dynamic_holidays=merged)

    def to_record(self, include_id: bool = True) -> dict:
        record = {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "tribe": self.tribe,
            "contract_type": self.contract_type.value,
            "tjm": self.tjm,
            "country": self.country.value,
            "ratio_change": self.ratio_change,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "overrides": dict(self.overrides),
            "dynamic_holidays": list(self.dynamic_holidays),
        }
        if include_id:
            record["id"] = self.id
        return record

    @classmethod
    def from_record(cls, record: dict) -> "Resource":
        return cls(
            first_name=record.get("first_name", ""),
            last_name=record.get("last_name", ""),
            contract_type=ContractType(record.get("contract_type", ContractType.INTERNAL.value)),
            tjm=float(record.get("tjm", 0)),
            country=Country(record.get("country", Country.FR.value)),
            ratio_change=float(record.get("ratio_change", 0)),
            start_date=record.get("start_date") or "",
            end_date=record.get("end_date") or "",
            overrides=dict(record.get("overrides") or {}),
            dynamic_holidays=tuple(record.get("dynamic_holidays") or ()),
            tribe=record.get("tribe"),
            id=record.get("id", ""),
        )


@dataclass(frozen=True)
class CalendarTemplate:
    """Reusable preset of leaves and holidays, copied into new resources."""
    name: str
    country: Country
    is_default: bool = False
    overrides: Dict[str, float] = field(default_factory=dict)
    dynamic_holidays: Tuple[str, ...] = ()
    id: str = ""

    def with_changes(self, **changes) -> "CalendarTemplate":
        return replace(self, **changes)
