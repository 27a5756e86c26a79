"""Tests for the scenario lifecycle: guard, fork, publish and restore."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import itertools
from datetime import datetime, timedelta

import pytest

from data.memory_store import InMemoryScenarioStore
from data.store import StoreError
from engine.errors import PublishError, ScenarioLockedError, ScenarioNotFoundError, ValidationError
from engine.versioning import ScenarioManager, pick_active_scenario, plan_publish
from models.resource import CalendarTemplate, ContractType, Country, Resource
from models.scenario import BudgetEnvelope, EnvelopeType, Scenario, ScenarioStatus

OWNER = "owner@example.com"


def make_clock(start=datetime(2025, 3, 1, 9, 0)):
    ticks = itertools.count()
    return lambda: start + timedelta(minutes=next(ticks))


def make_resource(first="Ada", tjm=500, overrides=None):
    return Resource(
        first_name=first,
        last_name="Lovelace",
        contract_type=ContractType.INTERNAL,
        tjm=tjm,
        country=Country.FR,
        ratio_change=30,
        start_date="",
        end_date="",
        overrides=overrides or {},
    )


def make_manager(store_cls=InMemoryScenarioStore):
    clock = make_clock()
    store = store_cls(clock=clock)
    manager = ScenarioManager(store, OWNER, clock=clock)
    manager.attach()
    return store, manager


def make_project(resources=1):
    store, manager = make_manager()
    draft_id = asyncio.run(manager.initialize_project())
    for i in range(resources):
        asyncio.run(manager.add_resource(draft_id, make_resource(first=f"R{i}")))
    return store, manager, draft_id


def statuses(store):
    return {s.id: s.status for s in asyncio.run(store.list_scenarios(OWNER))}


class FailingBatchStore(InMemoryScenarioStore):
    """Resource batches start failing once ``fail_batches`` is set."""

    fail_batches = False

    async def add_resources_batch(self, scenario_id, resources):
        if self.fail_batches:
            raise StoreError("batch rejected")
        return await super().add_resources_batch(scenario_id, resources)


class FailingPublishStore(InMemoryScenarioStore):
    async def publish_scenario_atomic(self, draft_id, owner_id, draft, current_masters):
        raise StoreError("commit rejected")


class RecordingCopyStore(InMemoryScenarioStore):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.copies = []

    async def copy_resources_atomic(self, source_scenario_id, target_scenario_id):
        self.copies.append((source_scenario_id, target_scenario_id))
        return await super().copy_resources_atomic(source_scenario_id, target_scenario_id)


class TestInitialize:
    def test_creates_initial_draft(self):
        store, manager = make_manager()
        draft_id = asyncio.run(manager.initialize_project())

        draft = asyncio.run(store.get_scenario(draft_id))
        assert draft.name == "Draft Initial"
        assert draft.status is ScenarioStatus.DRAFT
        assert draft.owner_id == OWNER
        assert manager.active_scenario_id == draft_id
        assert [v.id for v in manager.versions] == [draft_id]

    def test_is_idempotent(self):
        store, manager = make_manager()
        first = asyncio.run(manager.initialize_project())
        second = asyncio.run(manager.initialize_project())
        assert first == second
        assert len(asyncio.run(store.list_scenarios(OWNER))) == 1

    def test_reset_all_starts_over(self):
        store, manager, draft_id = make_project(resources=2)
        asyncio.run(manager.publish(draft_id))

        new_id = asyncio.run(manager.reset_all())

        scenarios = asyncio.run(store.list_scenarios(OWNER))
        assert [s.id for s in scenarios] == [new_id]
        assert scenarios[0].name == "Draft Initial"
        assert asyncio.run(store.get_resources_once(draft_id)) == []


class TestEditGuard:
    def test_master_rejects_every_edit(self):
        store, manager, draft_id = make_project()
        asyncio.run(manager.publish(draft_id))
        resource = asyncio.run(store.get_resources_once(draft_id))[0]
        envelope = BudgetEnvelope(id="", name="Run", type=EnvelopeType.RUN, amount=10)

        edits = [
            manager.update_override(draft_id, resource.id, "2025-01-06", 0),
            manager.bulk_update_overrides(draft_id, resource.id, "2025-01-06", "2025-01-10", 0),
            manager.apply_holidays(draft_id, resource.id, ["2025-01-06"]),
            manager.update_resource(draft_id, resource.id, tjm=1),
            manager.delete_resource(draft_id, resource.id),
            manager.add_resource(draft_id, make_resource()),
            manager.add_envelope(draft_id, envelope),
        ]
        for edit in edits:
            with pytest.raises(ScenarioLockedError):
                asyncio.run(edit)

        assert asyncio.run(store.get_resources_once(draft_id)) == [resource]
        assert asyncio.run(store.get_scenario(draft_id)).envelopes == ()

    def test_guard_reads_fresh_status(self):
        store, manager, draft_id = make_project()
        # Status changes behind the manager's back
        asyncio.run(store.update_scenario(draft_id, status=ScenarioStatus.ARCHIVED))
        resource = asyncio.run(store.get_resources_once(draft_id))[0]

        with pytest.raises(ScenarioLockedError) as exc_info:
            asyncio.run(manager.update_override(draft_id, resource.id, "2025-01-06", 0))
        assert exc_info.value.status is ScenarioStatus.ARCHIVED

    def test_publish_of_non_draft_rejected(self):
        store, manager, draft_id = make_project()
        asyncio.run(manager.publish(draft_id))
        with pytest.raises(ScenarioLockedError):
            asyncio.run(manager.publish(draft_id))


class TestPublish:
    def test_promotes_draft_and_opens_new_one(self):
        store, manager, draft_id = make_project(resources=2)

        result = asyncio.run(manager.publish(draft_id))

        new_draft = asyncio.run(store.get_scenario(result.scenario_id))
        assert statuses(store)[draft_id] is ScenarioStatus.MASTER
        assert new_draft.status is ScenarioStatus.DRAFT
        assert new_draft.parent_id == draft_id
        assert new_draft.name.startswith("DRAFT-")
        assert len(new_draft.name) == len("DRAFT-") + 12
        assert result.resources_copied == 2
        assert result.complete
        assert manager.active_scenario_id == result.scenario_id

    def test_at_most_one_master(self):
        store, manager, first_id = make_project()
        second_id = asyncio.run(manager.publish(first_id)).scenario_id
        third_id = asyncio.run(manager.publish(second_id)).scenario_id

        current = statuses(store)
        assert current[first_id] is ScenarioStatus.ARCHIVED
        assert current[second_id] is ScenarioStatus.MASTER
        assert current[third_id] is ScenarioStatus.DRAFT
        assert list(current.values()).count(ScenarioStatus.MASTER) == 1

    def test_envelopes_carried_to_new_draft(self):
        store, manager, draft_id = make_project(resources=0)
        envelope = BudgetEnvelope(id="run", name="Run", type=EnvelopeType.RUN, amount=1000)
        asyncio.run(manager.add_envelope(draft_id, envelope))

        result = asyncio.run(manager.publish(draft_id))
        new_draft = asyncio.run(store.get_scenario(result.scenario_id))
        assert new_draft.envelopes == (envelope,)

    def test_zero_resources(self):
        store, manager, draft_id = make_project(resources=0)
        result = asyncio.run(manager.publish(draft_id))
        assert result.resources_copied == 0
        assert result.complete

    def test_failed_copy_keeps_promotion(self):
        store, manager = make_manager(FailingBatchStore)
        draft_id = asyncio.run(manager.initialize_project())
        asyncio.run(manager.add_resource(draft_id, make_resource()))
        store.fail_batches = True

        result = asyncio.run(manager.publish(draft_id))

        assert not result.complete
        assert result.replication_error.target_id == result.scenario_id
        assert statuses(store)[draft_id] is ScenarioStatus.MASTER
        assert asyncio.run(store.get_resources_once(result.scenario_id)) == []

    def test_failed_commit_changes_nothing(self):
        store, manager = make_manager(FailingPublishStore)
        draft_id = asyncio.run(manager.initialize_project())

        with pytest.raises(PublishError):
            asyncio.run(manager.publish(draft_id))

        assert statuses(store) == {draft_id: ScenarioStatus.DRAFT}
        assert manager.active_scenario_id == draft_id

    def test_archives_every_existing_master(self):
        store, manager, draft_id = make_project()
        old_masters = [
            asyncio.run(store.create_scenario(
                Scenario(name=f"Master {i}", status=ScenarioStatus.MASTER, owner_id=OWNER)
            ))
            for i in range(2)
        ]

        result = asyncio.run(manager.publish(draft_id))

        current = statuses(store)
        assert [current[m] for m in old_masters] == [ScenarioStatus.ARCHIVED] * 2
        assert current[draft_id] is ScenarioStatus.MASTER
        assert list(current.values()).count(ScenarioStatus.MASTER) == 1
        children = [
            s for s in asyncio.run(store.list_scenarios(OWNER))
            if s.status is ScenarioStatus.DRAFT and s.parent_id == draft_id
        ]
        assert [s.id for s in children] == [result.scenario_id]

    def test_copy_goes_through_store(self):
        store, manager = make_manager(RecordingCopyStore)
        draft_id = asyncio.run(manager.initialize_project())
        asyncio.run(manager.add_resource(draft_id, make_resource()))

        result = asyncio.run(manager.publish(draft_id))

        assert store.copies == [(draft_id, result.scenario_id)]
        assert result.resources_copied == 1


class TestPlanPublish:
    def test_archives_other_masters_only(self):
        now = datetime(2025, 6, 1, 14, 5)
        draft = Scenario(name="d", id="d1")
        masters = [Scenario(name="m", status=ScenarioStatus.MASTER, id="m1"),
                   Scenario(name="x", status=ScenarioStatus.MASTER, id="d1")]

        plan = plan_publish(draft, OWNER, masters, now)

        assert plan.archive_ids == ("m1",)
        assert plan.promote_id == "d1"
        assert plan.new_draft.name == "DRAFT-202506011405"
        assert plan.new_draft.parent_id == "d1"

    def test_no_master_yet(self):
        plan = plan_publish(Scenario(name="d", id="d1"), OWNER, [], datetime(2025, 1, 1))
        assert plan.archive_ids == ()

    def test_rejects_master(self):
        with pytest.raises(ScenarioLockedError):
            plan_publish(Scenario(name="m", status=ScenarioStatus.MASTER, id="m1"), OWNER, [],
                         datetime(2025, 1, 1))


class TestFork:
    def test_fork_copies_everything_and_leaves_source_alone(self):
        store, manager, draft_id = make_project(resources=3)
        asyncio.run(manager.add_envelope(
            draft_id, BudgetEnvelope(id="c", name="Change", type=EnvelopeType.CHANGE, amount=50)
        ))
        asyncio.run(manager.publish(draft_id))

        result = asyncio.run(manager.fork(draft_id, "  What-if  "))

        fork = asyncio.run(store.get_scenario(result.scenario_id))
        assert fork.name == "What-if"
        assert fork.status is ScenarioStatus.DRAFT
        assert fork.parent_id == draft_id
        assert len(fork.envelopes) == 1
        assert result.resources_copied == 3
        assert statuses(store)[draft_id] is ScenarioStatus.MASTER

    def test_fork_edits_do_not_leak_into_source(self):
        store, manager, draft_id = make_project(resources=1)
        result = asyncio.run(manager.fork(draft_id, "copy"))
        copy = asyncio.run(store.get_resources_once(result.scenario_id))[0]

        asyncio.run(manager.update_override(result.scenario_id, copy.id, "2025-01-06", 0))

        original = asyncio.run(store.get_resources_once(draft_id))[0]
        assert original.overrides == {}

    def test_fork_requires_name(self):
        store, manager, draft_id = make_project()
        with pytest.raises(ValidationError):
            asyncio.run(manager.fork(draft_id, "   "))

    def test_fork_unknown_source(self):
        store, manager, _ = make_project()
        with pytest.raises(ScenarioNotFoundError):
            asyncio.run(manager.fork("missing", "copy"))


class TestSelection:
    def test_restore_any_version(self):
        store, manager, draft_id = make_project()
        new_id = asyncio.run(manager.publish(draft_id)).scenario_id

        restored = manager.restore(draft_id)

        assert restored.status is ScenarioStatus.MASTER
        assert manager.active_scenario_id == draft_id
        manager.restore(new_id)
        assert manager.active_scenario.is_editable

    def test_restore_unknown(self):
        store, manager, _ = make_project()
        with pytest.raises(ScenarioNotFoundError):
            manager.restore("missing")

    def test_pick_prefers_latest_draft_then_master(self):
        t0 = datetime(2025, 1, 1)
        archived = Scenario(name="a", status=ScenarioStatus.ARCHIVED, updated_at=t0, id="a")
        master = Scenario(name="m", status=ScenarioStatus.MASTER, updated_at=t0, id="m")
        old_draft = Scenario(name="d1", updated_at=t0, id="d1")
        new_draft = Scenario(name="d2", updated_at=t0 + timedelta(days=1), id="d2")

        assert pick_active_scenario([archived, master, old_draft, new_draft]).id == "d2"
        assert pick_active_scenario([archived, master]).id == "m"
        assert pick_active_scenario([archived]).id == "a"
        assert pick_active_scenario([]) is None

    def test_auto_select_keeps_valid_choice(self):
        store, manager, draft_id = make_project()
        new_id = asyncio.run(manager.publish(draft_id)).scenario_id
        manager.restore(draft_id)
        assert manager.auto_select() == draft_id
        manager.active_scenario_id = "gone"
        assert manager.auto_select() == new_id


class TestResourceEdits:
    def test_override_set_and_clear(self):
        store, manager, draft_id = make_project()
        resource = asyncio.run(store.get_resources_once(draft_id))[0]

        asyncio.run(manager.update_override(draft_id, resource.id, "2025-01-06", 0.5))
        assert asyncio.run(store.get_resource(draft_id, resource.id)).overrides == {"2025-01-06": 0.5}

        asyncio.run(manager.update_override(draft_id, resource.id, "2025-01-06", None))
        assert asyncio.run(store.get_resource(draft_id, resource.id)).overrides == {}

    def test_invalid_override_value(self):
        store, manager, draft_id = make_project()
        resource = asyncio.run(store.get_resources_once(draft_id))[0]
        with pytest.raises(ValidationError):
            asyncio.run(manager.update_override(draft_id, resource.id, "2025-01-06", 0.75))
        with pytest.raises(ValidationError):
            asyncio.run(manager.update_override(draft_id, resource.id, "06/01/2025", 1))

    def test_bulk_update_over_range(self):
        store, manager, draft_id = make_project()
        resource = asyncio.run(store.get_resources_once(draft_id))[0]

        count = asyncio.run(manager.bulk_update_overrides(draft_id, resource.id, "2025-01-06", "2025-01-12", 0))

        updated = asyncio.run(store.get_resource(draft_id, resource.id))
        assert count == 7
        assert len(updated.overrides) == 7
        assert set(updated.overrides.values()) == {0}

        asyncio.run(manager.bulk_update_overrides(draft_id, resource.id, "2025-01-06", "2025-01-08", None))
        assert sorted(asyncio.run(store.get_resource(draft_id, resource.id)).overrides) == [
            "2025-01-09", "2025-01-10", "2025-01-11", "2025-01-12",
        ]

    def test_bulk_update_reversed_range(self):
        store, manager, draft_id = make_project()
        resource = asyncio.run(store.get_resources_once(draft_id))[0]
        with pytest.raises(ValidationError):
            asyncio.run(manager.bulk_update_overrides(draft_id, resource.id, "2025-01-10", "2025-01-06", 0))

    def test_apply_holidays(self):
        store, manager, draft_id = make_project()
        resource = asyncio.run(store.get_resources_once(draft_id))[0]

        asyncio.run(manager.apply_holidays(draft_id, resource.id, ["2025-04-21", "2025-05-08"]))

        updated = asyncio.run(store.get_resource(draft_id, resource.id))
        assert updated.overrides == {"2025-04-21": 0, "2025-05-08": 0}
        assert updated.dynamic_holidays == ("2025-04-21", "2025-05-08")

    def test_update_resource_validates_merged_record(self):
        store, manager, draft_id = make_project()
        resource = asyncio.run(store.get_resources_once(draft_id))[0]

        with pytest.raises(ValidationError):
            asyncio.run(manager.update_resource(draft_id, resource.id, ratio_change=150))

        asyncio.run(manager.update_resource(draft_id, resource.id, country="PT", tjm=650))
        updated = asyncio.run(store.get_resource(draft_id, resource.id))
        assert updated.country is Country.PT
        assert updated.tjm == 650

    def test_update_every_detail_field(self):
        store, manager, draft_id = make_project()
        resource = asyncio.run(store.get_resources_once(draft_id))[0]

        asyncio.run(manager.update_resource(
            draft_id, resource.id,
            first_name="Grace", last_name="Hopper", tribe="Compilers",
            contract_type="EXTERNAL", country="CO", tjm=700, ratio_change=60,
            start_date="2025-02-01", end_date="2025-11-30",
        ))

        updated = asyncio.run(store.get_resource(draft_id, resource.id))
        assert updated.full_name == "Grace Hopper"
        assert updated.tribe == "Compilers"
        assert updated.contract_type is ContractType.EXTERNAL
        assert updated.country is Country.CO
        assert (updated.start_date, updated.end_date) == ("2025-02-01", "2025-11-30")

    def test_update_rejects_blank_name_and_unknown_contract(self):
        store, manager, draft_id = make_project()
        resource = asyncio.run(store.get_resources_once(draft_id))[0]

        with pytest.raises(ValidationError):
            asyncio.run(manager.update_resource(draft_id, resource.id, first_name="", last_name=" "))
        with pytest.raises(ValidationError):
            asyncio.run(manager.update_resource(draft_id, resource.id, contract_type="FREELANCE"))
        assert asyncio.run(store.get_resource(draft_id, resource.id)) == resource

    def test_add_resource_seeded_from_template(self):
        store, manager, draft_id = make_project(resources=0)
        template = CalendarTemplate(
            name="FR 2025", country=Country.FR,
            overrides={"2025-08-15": 0}, dynamic_holidays=("2025-08-15",),
        )
        resource_id = asyncio.run(manager.add_resource(draft_id, make_resource(), template))

        stored = asyncio.run(store.get_resource(draft_id, resource_id))
        assert stored.overrides == {"2025-08-15": 0}
        assert stored.dynamic_holidays == ("2025-08-15",)

    def test_missing_resource(self):
        store, manager, draft_id = make_project()
        with pytest.raises(ScenarioNotFoundError):
            asyncio.run(manager.update_override(draft_id, "missing", "2025-01-06", 1))


class TestEnvelopes:
    def test_add_update_delete(self):
        store, manager, draft_id = make_project(resources=0)
        envelope_id = asyncio.run(manager.add_envelope(
            draft_id, BudgetEnvelope(id="", name="Run", type="RUN", amount=100)
        ))
        scenario = asyncio.run(store.get_scenario(draft_id))
        assert scenario.envelopes[0].id == envelope_id
        assert scenario.envelopes[0].type is EnvelopeType.RUN

        asyncio.run(manager.update_envelope(draft_id, envelope_id, amount=250))
        assert asyncio.run(store.get_scenario(draft_id)).envelopes[0].amount == 250

        asyncio.run(manager.delete_envelope(draft_id, envelope_id))
        assert asyncio.run(store.get_scenario(draft_id)).envelopes == ()

    def test_duplicate_id_rejected(self):
        store, manager, draft_id = make_project(resources=0)
        envelope = BudgetEnvelope(id="run", name="Run", type=EnvelopeType.RUN, amount=100)
        asyncio.run(manager.add_envelope(draft_id, envelope))
        with pytest.raises(ValidationError):
            asyncio.run(manager.add_envelope(draft_id, envelope))

    def test_negative_amount_rejected(self):
        store, manager, draft_id = make_project(resources=0)
        with pytest.raises(ValidationError):
            asyncio.run(manager.add_envelope(
                draft_id, BudgetEnvelope(id="", name="Run", type=EnvelopeType.RUN, amount=-1)
            ))
