"""Process-local implementation of the scenario store.

Backs the Streamlit app and the tests. Writes are staged on a copy and swapped
in under a lock, so a batch either lands completely or not at all, and every
committed write is pushed to the matching subscribers.
"""

import itertools
import logging
import threading
import uuid
from dataclasses import fields
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from data.store import ErrorCallback, ScenarioStore, StoreError, Unsubscribe
from engine.versioning import plan_publish
from models.resource import CalendarTemplate, ContractType, Country, Resource
from models.scenario import Scenario, ScenarioStatus, order_versions

logger = logging.getLogger(__name__)

_SCENARIO_FIELDS = {f.name for f in fields(Scenario)} - {"id"}
_RESOURCE_FIELDS = {f.name for f in fields(Resource)} - {"id"}
_TEMPLATE_FIELDS = {f.name for f in fields(CalendarTemplate)} - {"id"}


def _check_fields(changes: dict, allowed: set, kind: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise StoreError(f"Unknown {kind} field(s): {', '.join(sorted(unknown))}")


def _normalize_resource_changes(changes: dict) -> dict:
    normalized = dict(changes)
    if "overrides" in normalized:
        normalized["overrides"] = dict(normalized["overrides"] or {})
    if "dynamic_holidays" in normalized:
        normalized["dynamic_holidays"] = tuple(normalized["dynamic_holidays"] or ())
    if "contract_type" in normalized:
        normalized["contract_type"] = ContractType(normalized["contract_type"])
    if "country" in normalized:
        normalized["country"] = Country(normalized["country"])
    return normalized


class InMemoryScenarioStore(ScenarioStore):

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._lock = threading.RLock()
        self._clock = clock
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)
        self._scenarios: Dict[str, Scenario] = {}
        self._resources: Dict[str, Dict[str, Resource]] = {}
        self._templates: Dict[str, CalendarTemplate] = {}
        self._sub_ids = itertools.count()
        self._scenario_subs: Dict[int, Tuple[str, Callable, ErrorCallback]] = {}
        self._resource_subs: Dict[int, Tuple[str, Callable, ErrorCallback]] = {}

    # --- Subscriptions ---

    def subscribe_scenarios(self, owner_id, on_update, on_error) -> Unsubscribe:
        with self._lock:
            sub_id = next(self._sub_ids)
            self._scenario_subs[sub_id] = (owner_id, on_update, on_error)
            snapshot = self._owner_snapshot(owner_id)
        self._deliver(self._scenario_subs, sub_id, on_update, on_error, snapshot)
        return self._releaser(self._scenario_subs, sub_id)

    def subscribe_resources(self, scenario_id, on_update, on_error) -> Unsubscribe:
        with self._lock:
            sub_id = next(self._sub_ids)
            self._resource_subs[sub_id] = (scenario_id, on_update, on_error)
            snapshot = list(self._resources.get(scenario_id, {}).values())
        self._deliver(self._resource_subs, sub_id, on_update, on_error, snapshot)
        return self._releaser(self._resource_subs, sub_id)

    @staticmethod
    def _releaser(registry: dict, sub_id: int) -> Unsubscribe:
        def unsubscribe() -> None:
            registry.pop(sub_id, None)
        return unsubscribe

    def _owner_snapshot(self, owner_id: str) -> List[Scenario]:
        return order_versions(s for s in self._scenarios.values() if s.owner_id == owner_id)

    def _deliver(self, registry: dict, sub_id: int, on_update, on_error, snapshot) -> None:
        try:
            on_update(snapshot)
        except Exception as exc:
            logger.error("Subscriber %s raised, dropping it: %s", sub_id, exc)
            registry.pop(sub_id, None)
            on_error(exc)

    def _notify(self, owner_ids=(), scenario_ids=(), deleted_ids=()) -> None:
        """Push fresh snapshots after a commit; called outside the lock."""
        deliveries = []
        with self._lock:
            for sub_id, (owner_id, on_update, on_error) in list(self._scenario_subs.items()):
                if owner_id in owner_ids:
                    deliveries.append(
                        (self._scenario_subs, sub_id, on_update, on_error, self._owner_snapshot(owner_id))
                    )
            for sub_id, (scenario_id, on_update, on_error) in list(self._resource_subs.items()):
                if scenario_id in deleted_ids:
                    self._resource_subs.pop(sub_id, None)
                    deliveries.append((None, sub_id, None, on_error, StoreError(
                        f"Scenario {scenario_id} was deleted"
                    )))
                elif scenario_id in scenario_ids:
                    snapshot = list(self._resources.get(scenario_id, {}).values())
                    deliveries.append((self._resource_subs, sub_id, on_update, on_error, snapshot))

        for registry, sub_id, on_update, on_error, payload in deliveries:
            if registry is None:
                on_error(payload)
            else:
                self._deliver(registry, sub_id, on_update, on_error, payload)

    # --- Scenarios ---

    async def list_scenarios(self, owner_id: str) -> List[Scenario]:
        with self._lock:
            return self._owner_snapshot(owner_id)

    async def get_scenario(self, scenario_id: str) -> Optional[Scenario]:
        with self._lock:
            return self._scenarios.get(scenario_id)

    async def create_scenario(self, scenario: Scenario) -> str:
        with self._lock:
            scenario_id = self._new_id()
            self._scenarios[scenario_id] = scenario.with_changes(
                id=scenario_id, envelopes=tuple(scenario.envelopes), updated_at=self._clock()
            )
            self._resources[scenario_id] = {}
        self._notify(owner_ids={scenario.owner_id})
        return scenario_id

    async def update_scenario(self, scenario_id: str, **changes) -> None:
        _check_fields(changes, _SCENARIO_FIELDS, "scenario")
        if "status" in changes:
            changes["status"] = ScenarioStatus(changes["status"])
        if "envelopes" in changes:
            changes["envelopes"] = tuple(changes["envelopes"])
        changes.setdefault("updated_at", self._clock())

        with self._lock:
            current = self._scenarios.get(scenario_id)
            if current is None:
                raise StoreError(f"Scenario {scenario_id} does not exist")
            updated = current.with_changes(**changes)
            self._scenarios[scenario_id] = updated
        self._notify(owner_ids={current.owner_id, updated.owner_id})

    async def delete_scenario(self, scenario_id: str) -> None:
        with self._lock:
            removed = self._scenarios.pop(scenario_id, None)
            self._resources.pop(scenario_id, None)
        if removed is not None:
            logger.info("Deleted scenario %s", scenario_id)
            self._notify(owner_ids={removed.owner_id}, deleted_ids={scenario_id})

    async def publish_scenario_atomic(
        self,
        draft_id: str,
        owner_id: str,
        draft: Scenario,
        current_masters: Sequence[Scenario],
    ) -> str:
        """Apply the publish plan as one batch.

        The caller's ``draft`` snapshot provides the envelopes handed to the
        new draft; the stored status is what the guard checks.
        """
        with self._lock:
            stored = self._scenarios.get(draft_id)
            if stored is None:
                raise StoreError(f"Scenario {draft_id} does not exist")

            now = self._clock()
            plan = plan_publish(
                draft.with_changes(id=draft_id, status=stored.status), owner_id, current_masters, now
            )

            staged = dict(self._scenarios)
            for master_id in plan.archive_ids:
                if master_id not in staged:
                    raise StoreError(f"Scenario {master_id} does not exist")
                staged[master_id] = staged[master_id].with_changes(
                    status=ScenarioStatus.ARCHIVED, updated_at=now
                )
            staged[plan.promote_id] = stored.with_changes(status=ScenarioStatus.MASTER, updated_at=now)
            new_id = self._new_id()
            staged[new_id] = plan.new_draft.with_changes(id=new_id)

            self._scenarios = staged
            self._resources[new_id] = {}
            owners = {staged[sid].owner_id for sid in plan.archive_ids + (draft_id, new_id)}
        self._notify(owner_ids=owners)
        return new_id

    # --- Resources ---

    async def get_resources_once(self, scenario_id: str) -> List[Resource]:
        with self._lock:
            return list(self._resources.get(scenario_id, {}).values())

    async def get_resource(self, scenario_id: str, resource_id: str) -> Optional[Resource]:
        with self._lock:
            return self._resources.get(scenario_id, {}).get(resource_id)

    async def add_resource(self, scenario_id: str, resource: Resource) -> str:
        ids = await self.add_resources_batch(scenario_id, [resource])
        return ids[0]

    async def add_resources_batch(self, scenario_id: str, resources: Sequence[Resource]) -> List[str]:
        with self._lock:
            if scenario_id not in self._scenarios:
                raise StoreError(f"Scenario {scenario_id} does not exist")
            staged = dict(self._resources[scenario_id])
            new_ids = []
            for resource in resources:
                if not isinstance(resource, Resource):
                    raise StoreError(f"Cannot store {type(resource).__name__} as a resource")
                resource_id = self._new_id()
                staged[resource_id] = resource.with_changes(
                    id=resource_id,
                    overrides=dict(resource.overrides),
                    dynamic_holidays=tuple(resource.dynamic_holidays),
                )
                new_ids.append(resource_id)
            if new_ids:
                self._resources[scenario_id] = staged
        if new_ids:
            self._notify(scenario_ids={scenario_id})
        return new_ids

    async def update_resource(self, scenario_id: str, resource_id: str, **changes) -> None:
        _check_fields(changes, _RESOURCE_FIELDS, "resource")
        changes = _normalize_resource_changes(changes)
        with self._lock:
            collection = self._resources.get(scenario_id, {})
            current = collection.get(resource_id)
            if current is None:
                raise StoreError(f"Resource {resource_id} does not exist in {scenario_id}")
            collection[resource_id] = current.with_changes(**changes)
        self._notify(scenario_ids={scenario_id})

    async def delete_resource(self, scenario_id: str, resource_id: str) -> None:
        with self._lock:
            removed = self._resources.get(scenario_id, {}).pop(resource_id, None)
        if removed is not None:
            self._notify(scenario_ids={scenario_id})

    # --- Calendar templates ---

    async def list_templates(self, country: Optional[Country] = None) -> List[CalendarTemplate]:
        with self._lock:
            templates = list(self._templates.values())
        if country is not None:
            templates = [t for t in templates if t.country == country]
        return sorted(templates, key=lambda t: (t.country.value, t.name))

    async def get_template(self, template_id: str) -> Optional[CalendarTemplate]:
        with self._lock:
            return self._templates.get(template_id)

    async def create_template(self, template: CalendarTemplate) -> str:
        with self._lock:
            template_id = self._new_id()
            self._templates[template_id] = template.with_changes(
                id=template_id,
                overrides=dict(template.overrides),
                dynamic_holidays=tuple(template.dynamic_holidays),
            )
        return template_id

    async def update_template(self, template_id: str, **changes) -> None:
        _check_fields(changes, _TEMPLATE_FIELDS, "template")
        with self._lock:
            current = self._templates.get(template_id)
            if current is None:
                raise StoreError(f"Calendar template {template_id} does not exist")
            self._templates[template_id] = current.with_changes(**changes)

    async def delete_template(self, template_id: str) -> None:
        with self._lock:
            self._templates.pop(template_id, None)
