"""Persistence boundary: the operations the planner needs from a document store.

Store calls are coroutines; subscriptions are registered synchronously and
return a callable that releases them.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from engine.errors import PlanningError
from engine.replication import copy_resources
from models.resource import CalendarTemplate, Country, Resource
from models.scenario import Scenario

Unsubscribe = Callable[[], None]
ErrorCallback = Callable[[Exception], None]


class StoreError(PlanningError):
    """A read or write failed in the persistence layer."""


class ScenarioStore(ABC):

    # --- Scenarios ---

    @abstractmethod
    def subscribe_scenarios(
        self,
        owner_id: str,
        on_update: Callable[[List[Scenario]], None],
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        ...

    @abstractmethod
    async def list_scenarios(self, owner_id: str) -> List[Scenario]:
        ...

    @abstractmethod
    async def get_scenario(self, scenario_id: str) -> Optional[Scenario]:
        ...

    @abstractmethod
    async def create_scenario(self, scenario: Scenario) -> str:
        ...

    @abstractmethod
    async def update_scenario(self, scenario_id: str, **changes) -> None:
        ...

    @abstractmethod
    async def delete_scenario(self, scenario_id: str) -> None:
        """Delete the scenario and its resource collection."""

    @abstractmethod
    async def publish_scenario_atomic(
        self,
        draft_id: str,
        owner_id: str,
        draft: Scenario,
        current_masters: Sequence[Scenario],
    ) -> str:
        """Archive the masters, promote the draft and create its successor in one batch.

        Returns the id of the new draft. Either every change is committed or none is.
        """

    # --- Resources ---

    @abstractmethod
    def subscribe_resources(
        self,
        scenario_id: str,
        on_update: Callable[[List[Resource]], None],
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        ...

    @abstractmethod
    async def get_resources_once(self, scenario_id: str) -> List[Resource]:
        ...

    @abstractmethod
    async def get_resource(self, scenario_id: str, resource_id: str) -> Optional[Resource]:
        ...

    @abstractmethod
    async def add_resource(self, scenario_id: str, resource: Resource) -> str:
        """Store a resource under a freshly assigned id and return that id."""

    @abstractmethod
    async def add_resources_batch(self, scenario_id: str, resources: Sequence[Resource]) -> List[str]:
        """Add several resources in one all-or-nothing commit."""

    @abstractmethod
    async def update_resource(self, scenario_id: str, resource_id: str, **changes) -> None:
        ...

    @abstractmethod
    async def delete_resource(self, scenario_id: str, resource_id: str) -> None:
        ...

    async def copy_resources_atomic(self, source_scenario_id: str, target_scenario_id: str) -> List[str]:
        return await copy_resources(self, source_scenario_id, target_scenario_id)

    # --- Calendar templates ---

    @abstractmethod
    async def list_templates(self, country: Optional[Country] = None) -> List[CalendarTemplate]:
        ...

    @abstractmethod
    async def get_template(self, template_id: str) -> Optional[CalendarTemplate]:
        ...

    @abstractmethod
    async def create_template(self, template: CalendarTemplate) -> str:
        ...

    @abstractmethod
    async def update_template(self, template_id: str, **changes) -> None:
        ...

    @abstractmethod
    async def delete_template(self, template_id: str) -> None:
        ...
