"""Scenario lifecycle: DRAFT -> MASTER -> ARCHIVED, forking, publishing and the edit guard."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from config.defaults import DRAFT_NAME_PREFIX, INITIAL_DRAFT_NAME
from data.validator import (
    ValidationResult, validate_date_range, validate_envelope, validate_holiday_dates,
    validate_override_value, validate_resource,
)
from engine.calendar_rules import DateLike, iter_days, to_iso
from engine.calendar_templates import seed_resource
from engine.errors import (
    PublishError, ReplicationError, ScenarioLockedError, ScenarioNotFoundError, ValidationError,
)
from models.resource import CalendarTemplate, ContractType, Country, Resource
from models.scenario import (
    BudgetEnvelope, EnvelopeType, Scenario, ScenarioStatus, new_draft_name, order_versions,
)

logger = logging.getLogger(__name__)


def ensure_editable(scenario: Scenario) -> None:
    """The one place where the read-only rule for MASTER/ARCHIVED is enforced."""
    if not scenario.status.is_editable:
        logger.warning(
            "Rejected edit on %s scenario %s", scenario.status.value, scenario.id
        )
        raise ScenarioLockedError(scenario.id, scenario.status)


def pick_active_scenario(versions: Iterable[Scenario]) -> Optional[Scenario]:
    """Most recent draft, else the master, else whatever comes first."""
    ordered = order_versions(versions)
    if not ordered:
        return None
    for status in (ScenarioStatus.DRAFT, ScenarioStatus.MASTER):
        for scenario in ordered:
            if scenario.status is status:
                return scenario
    return ordered[0]


@dataclass(frozen=True)
class PublishPlan:
    """Scenario-document writes of a publish, applied by the store as one batch."""
    archive_ids: Tuple[str, ...]
    promote_id: str
    new_draft: Scenario


def plan_publish(
    draft: Scenario,
    owner_id: str,
    current_masters: Sequence[Scenario],
    now: datetime,
) -> PublishPlan:
    ensure_editable(draft)
    archive_ids = tuple(m.id for m in current_masters if m.id != draft.id)
    new_draft = Scenario(
        name=new_draft_name(now, DRAFT_NAME_PREFIX),
        status=ScenarioStatus.DRAFT,
        owner_id=owner_id,
        parent_id=draft.id,
        envelopes=tuple(draft.envelopes),
        created_at=now,
        updated_at=now,
    )
    return PublishPlan(archive_ids=archive_ids, promote_id=draft.id, new_draft=new_draft)


@dataclass(frozen=True)
class VersionResult:
    """Outcome of a fork or publish.

    The scenario step and the resource copy succeed or fail separately; a
    failed copy is reported in ``replication_error`` while the new draft stays.
    """
    scenario_id: str
    name: str
    resources_copied: int = 0
    replication_error: Optional[ReplicationError] = None

    @property
    def complete(self) -> bool:
        return self.replication_error is None


def _raise_if_invalid(result: ValidationResult) -> None:
    if not result.is_valid:
        raise ValidationError(result.errors)


def _coerce_enum(enum_cls, value, label: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError([f"{label}: unknown value {value!r}."]) from None


def _iso_or_reject(day: DateLike, label: str) -> str:
    try:
        return to_iso(day)
    except (TypeError, ValueError):
        raise ValidationError([f"{label}: '{day}' is not a YYYY-MM-DD date."]) from None


class ScenarioManager:
    """Owner-scoped view of the scenario store.

    Keeps the owner's version list current through a store subscription,
    tracks which scenario is active, and routes every edit through
    ``ensure_editable`` against a fresh read of the scenario.
    """

    def __init__(self, store, owner_id: str, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.owner_id = owner_id
        self.active_scenario_id: Optional[str] = None
        self.versions: List[Scenario] = []
        self.last_error: Optional[Exception] = None
        self._clock = clock
        self._unsubscribe = None

    # --- Subscription ---

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe_scenarios(
                self.owner_id, self._on_versions, self._on_error
            )

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_versions(self, scenarios: List[Scenario]) -> None:
        self.versions = list(scenarios)
        self.last_error = None

    def _on_error(self, exc: Exception) -> None:
        logger.error("Scenario subscription for %s failed: %s", self.owner_id, exc)
        self.last_error = exc
        self._unsubscribe = None

    def auto_select(self) -> Optional[str]:
        if self.active_scenario_id and self.get_version(self.active_scenario_id):
            return self.active_scenario_id
        picked = pick_active_scenario(self.versions)
        self.active_scenario_id = picked.id if picked else None
        return self.active_scenario_id

    def get_version(self, scenario_id: str) -> Optional[Scenario]:
        return next((v for v in self.versions if v.id == scenario_id), None)

    @property
    def active_scenario(self) -> Optional[Scenario]:
        if not self.active_scenario_id:
            return None
        return self.get_version(self.active_scenario_id)

    # --- Lifecycle ---

    async def initialize_project(self) -> str:
        """Create the first empty draft, unless the owner already has scenarios."""
        existing = await self.store.list_scenarios(self.owner_id)
        if existing:
            picked = pick_active_scenario(existing)
            self.active_scenario_id = picked.id
            return picked.id

        now = self._clock()
        scenario_id = await self.store.create_scenario(Scenario(
            name=INITIAL_DRAFT_NAME,
            status=ScenarioStatus.DRAFT,
            owner_id=self.owner_id,
            created_at=now,
            updated_at=now,
        ))
        logger.info("Initialized project for %s with draft %s", self.owner_id, scenario_id)
        self.active_scenario_id = scenario_id
        return scenario_id

    async def reset_all(self) -> str:
        """Delete every scenario of the owner, then start again from an empty draft."""
        for scenario in await self.store.list_scenarios(self.owner_id):
            await self.store.delete_scenario(scenario.id)
        logger.warning("Deleted all scenarios of %s", self.owner_id)
        self.active_scenario_id = None
        return await self.initialize_project()

    def restore(self, scenario_id: str) -> Scenario:
        """Bring any version into view; only drafts will accept edits."""
        scenario = self.get_version(scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")
        self.active_scenario_id = scenario_id
        return scenario

    async def fork(self, source_id: str, name: str) -> VersionResult:
        """New draft copying the source's envelopes and resources; the source is untouched."""
        if not name or not name.strip():
            raise ValidationError(["Snapshot name is required."])
        source = await self._require_scenario(source_id)

        now = self._clock()
        new_id = await self.store.create_scenario(Scenario(
            name=name.strip(),
            status=ScenarioStatus.DRAFT,
            owner_id=self.owner_id,
            parent_id=source.id,
            envelopes=tuple(source.envelopes),
            created_at=now,
            updated_at=now,
        ))
        self.active_scenario_id = new_id
        logger.info("Forked %s into draft %s (%s)", source.id, new_id, name.strip())

        copied, error = await self._copy_resources(source.id, new_id)
        return VersionResult(new_id, name.strip(), copied, error)

    async def publish(self, draft_id: str) -> VersionResult:
        """Promote a draft to MASTER, archive the previous masters, open a new draft.

        The status changes and the new draft are one atomic batch. Copying the
        published resources into the new draft follows as a separate step whose
        failure does not undo the promotion.
        """
        draft = await self._require_scenario(draft_id)
        ensure_editable(draft)

        owner_id = draft.owner_id or self.owner_id
        masters = [
            s for s in await self.store.list_scenarios(owner_id)
            if s.status is ScenarioStatus.MASTER
        ]

        try:
            new_id = await self.store.publish_scenario_atomic(draft.id, owner_id, draft, masters)
        except ScenarioLockedError:
            raise
        except Exception as exc:
            logger.error("Publish of %s failed: %s", draft.id, exc)
            raise PublishError(f"Publishing {draft.name} failed: {exc}") from exc

        self.active_scenario_id = new_id
        new_draft = await self.store.get_scenario(new_id)
        logger.info(
            "Published %s as MASTER (archived %d), new draft %s",
            draft.id, len(masters), new_id,
        )

        copied, error = await self._copy_resources(draft.id, new_id)
        return VersionResult(new_id, new_draft.name if new_draft else "", copied, error)

    async def _copy_resources(self, source_id: str, target_id: str):
        try:
            new_ids = await self.store.copy_resources_atomic(source_id, target_id)
        except ReplicationError as exc:
            return 0, exc
        return len(new_ids), None

    # --- Guarded edits: envelopes ---

    async def add_envelope(self, scenario_id: str, envelope: BudgetEnvelope) -> str:
        envelope = envelope.with_changes(
            id=envelope.id or uuid.uuid4().hex,
            type=_coerce_enum(EnvelopeType, envelope.type, "Envelope type"),
        )
        _raise_if_invalid(validate_envelope(envelope))

        scenario = await self._editable_scenario(scenario_id)
        if any(e.id == envelope.id for e in scenario.envelopes):
            raise ValidationError([f"Envelope {envelope.id} already exists."])
        await self.store.update_scenario(scenario.id, envelopes=scenario.envelopes + (envelope,))
        return envelope.id

    async def update_envelope(self, scenario_id: str, envelope_id: str, **changes) -> None:
        changes.pop("id", None)
        if "type" in changes:
            changes["type"] = _coerce_enum(EnvelopeType, changes["type"], "Envelope type")

        scenario = await self._editable_scenario(scenario_id)
        current = next((e for e in scenario.envelopes if e.id == envelope_id), None)
        if current is None:
            raise ScenarioNotFoundError(f"Envelope {envelope_id} not found in {scenario_id}")
        updated = current.with_changes(**changes)
        _raise_if_invalid(validate_envelope(updated))

        envelopes = tuple(updated if e.id == envelope_id else e for e in scenario.envelopes)
        await self.store.update_scenario(scenario.id, envelopes=envelopes)

    async def delete_envelope(self, scenario_id: str, envelope_id: str) -> None:
        scenario = await self._editable_scenario(scenario_id)
        envelopes = tuple(e for e in scenario.envelopes if e.id != envelope_id)
        await self.store.update_scenario(scenario.id, envelopes=envelopes)

    # --- Guarded edits: resources ---

    async def add_resource(
        self,
        scenario_id: str,
        resource: Resource,
        template: Optional[CalendarTemplate] = None,
    ) -> str:
        if template is not None:
            resource = seed_resource(resource, template)
        _raise_if_invalid(validate_resource(resource))

        scenario = await self._editable_scenario(scenario_id)
        return await self.store.add_resource(scenario.id, resource)

    async def update_resource(self, scenario_id: str, resource_id: str, **changes) -> None:
        changes.pop("id", None)
        if "contract_type" in changes:
            changes["contract_type"] = _coerce_enum(ContractType, changes["contract_type"], "Contract type")
        if "country" in changes:
            changes["country"] = _coerce_enum(Country, changes["country"], "Country")

        scenario = await self._editable_scenario(scenario_id)
        current = await self._require_resource(scenario.id, resource_id)
        _raise_if_invalid(validate_resource(current.with_changes(**changes)))
        await self.store.update_resource(scenario.id, resource_id, **changes)

    async def delete_resource(self, scenario_id: str, resource_id: str) -> None:
        scenario = await self._editable_scenario(scenario_id)
        await self.store.delete_resource(scenario.id, resource_id)

    async def update_override(
        self,
        scenario_id: str,
        resource_id: str,
        day: DateLike,
        value: Optional[float],
    ) -> None:
        """Set one day's presence, or clear it back to the default with ``None``."""
        _raise_if_invalid(validate_override_value(value))
        iso = _iso_or_reject(day, "Override date")

        scenario = await self._editable_scenario(scenario_id)
        current = await self._require_resource(scenario.id, resource_id)
        updated = current.with_override(iso, value)
        await self.store.update_resource(scenario.id, resource_id, overrides=updated.overrides)

    async def bulk_update_overrides(
        self,
        scenario_id: str,
        resource_id: str,
        start: DateLike,
        end: DateLike,
        value: Optional[float],
    ) -> int:
        """Apply one value (or clear) over an inclusive date range; returns the day count."""
        _raise_if_invalid(validate_override_value(value))
        start_iso = _iso_or_reject(start, "Range start")
        end_iso = _iso_or_reject(end, "Range end")
        _raise_if_invalid(validate_date_range(start_iso, end_iso, "Bulk edit"))

        scenario = await self._editable_scenario(scenario_id)
        current = await self._require_resource(scenario.id, resource_id)
        days = [d.isoformat() for d in iter_days(start_iso, end_iso)]
        updated = current.with_overrides(days, value)
        await self.store.update_resource(scenario.id, resource_id, overrides=updated.overrides)
        return len(days)

    async def apply_holidays(self, scenario_id: str, resource_id: str, holidays: Iterable[str]) -> None:
        """Record imported holidays: days off, remembered as holidays for display."""
        dates = list(holidays)
        _raise_if_invalid(validate_holiday_dates(dates))

        scenario = await self._editable_scenario(scenario_id)
        current = await self._require_resource(scenario.id, resource_id)
        updated = current.with_holidays(dates)
        await self.store.update_resource(
            scenario.id,
            resource_id,
            overrides=updated.overrides,
            dynamic_holidays=updated.dynamic_holidays,
        )

    # --- Reads ---

    async def _require_scenario(self, scenario_id: str) -> Scenario:
        scenario = await self.store.get_scenario(scenario_id)
        if scenario is None:
            raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")
        return scenario

    async def _editable_scenario(self, scenario_id: str) -> Scenario:
        scenario = await self._require_scenario(scenario_id)
        ensure_editable(scenario)
        return scenario

    async def _require_resource(self, scenario_id: str, resource_id: str) -> Resource:
        resource = await self.store.get_resource(scenario_id, resource_id)
        if resource is None:
            raise ScenarioNotFoundError(f"Resource {resource_id} not found in {scenario_id}")
        return resource
