"""Domain exceptions raised by the planning engine."""

from typing import List, Optional


class PlanningError(Exception):
    """Base class for planner errors."""


class ValidationError(PlanningError, ValueError):
    """Input rejected before any write was attempted."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid input")


class ScenarioLockedError(PlanningError):
    """Edit attempted on a scenario that is not a DRAFT."""

    def __init__(self, scenario_id: str, status):
        self.scenario_id = scenario_id
        self.status = status
        super().__init__(
            f"Scenario {scenario_id} is {getattr(status, 'value', status)} and cannot be modified"
        )


class ScenarioNotFoundError(PlanningError, LookupError):
    pass


class PublishError(PlanningError):
    """The atomic publish batch failed; no scenario changed status."""


class ReplicationError(PlanningError):
    """Copying a resource collection failed; the target received no resource."""

    def __init__(self, message: str, source_id: str, target_id: Optional[str]):
        self.source_id = source_id
        self.target_id = target_id
        super().__init__(message)
