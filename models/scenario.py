from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class ScenarioStatus(str, Enum):
    DRAFT = "DRAFT"
    MASTER = "MASTER"
    ARCHIVED = "ARCHIVED"

    @property
    def is_editable(self) -> bool:
        """Only drafts accept edits; MASTER and ARCHIVED are read-only."""
        return self is ScenarioStatus.DRAFT


class EnvelopeType(str, Enum):
    RUN = "RUN"
    CHANGE = "CHANGE"


@dataclass(frozen=True)
class BudgetEnvelope:
    id: str
    name: str
    type: EnvelopeType
    amount: float

    def with_changes(self, **changes) -> "BudgetEnvelope":
        return replace(self, **changes)


@dataclass(frozen=True)
class Scenario:
    """Versioned unit of work. Resources live in their own store collection."""
    name: str
    status: ScenarioStatus = ScenarioStatus.DRAFT
    owner_id: Optional[str] = None
    parent_id: Optional[str] = None
    envelopes: Tuple[BudgetEnvelope, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    id: str = ""

    @property
    def is_editable(self) -> bool:
        return self.status.is_editable

    def with_changes(self, **changes) -> "Scenario":
        return replace(self, **changes)


def order_versions(scenarios: Iterable[Scenario]) -> List[Scenario]:
    """Drafts first, then most recently updated first."""
    return sorted(
        scenarios,
        key=lambda s: (s.status is not ScenarioStatus.DRAFT, -s.updated_at.timestamp()),
    )


def new_draft_name(now: datetime, prefix: str = "DRAFT-") -> str:
    return f"{prefix}{now.strftime('%Y%m%d%H%M')}"
