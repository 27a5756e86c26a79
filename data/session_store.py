"""Typed wrapper around st.session_state for the planner's per-session objects."""

import asyncio
import logging
from datetime import date
from typing import List, Optional

import streamlit as st

from config.defaults import DEFAULT_OWNER_ID
from data.memory_store import InMemoryScenarioStore
from engine.calendar_templates import CalendarTemplateService
from engine.errors import PlanningError, ScenarioLockedError, ValidationError
from engine.stats_cache import StatsCache
from engine.versioning import ScenarioManager
from models.resource import Resource

logger = logging.getLogger(__name__)


class ResourceFeed:
    """Latest resource snapshot pushed by the store for the active scenario."""

    def __init__(self):
        self.scenario_id: Optional[str] = None
        self.resources: List[Resource] = []
        self.error: Optional[Exception] = None
        self._unsubscribe = None

    def follow(self, store, scenario_id: Optional[str]) -> None:
        if scenario_id == self.scenario_id and self._unsubscribe is not None:
            return
        self.release()
        self.scenario_id = scenario_id
        self.resources = []
        self.error = None
        if scenario_id:
            self._unsubscribe = store.subscribe_resources(scenario_id, self._on_update, self._on_error)

    def release(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_update(self, resources: List[Resource]) -> None:
        self.resources = list(resources)
        self.error = None

    def _on_error(self, exc: Exception) -> None:
        logger.error("Resource feed for %s failed: %s", self.scenario_id, exc)
        self.error = exc
        self.resources = []
        self._unsubscribe = None


def run(coro):
    """Drive a store/manager coroutine from the synchronous Streamlit script."""
    return asyncio.run(coro)


def initialize_session_state():
    """Create the store, manager and caches once per browser session."""
    if "store" not in st.session_state:
        store = InMemoryScenarioStore()
        manager = ScenarioManager(store, DEFAULT_OWNER_ID)
        manager.attach()
        st.session_state["store"] = store
        st.session_state["manager"] = manager
        st.session_state["templates"] = CalendarTemplateService(store)
        st.session_state["stats_cache"] = StatsCache()
        st.session_state["resource_feed"] = ResourceFeed()
        st.session_state["year"] = date.today().year
        run(manager.initialize_project())
        logger.info("Session initialized for %s", DEFAULT_OWNER_ID)

    manager = get_manager()
    manager.auto_select()
    get_resource_feed().follow(get_store(), manager.active_scenario_id)


# --- Getters ---

def get_store() -> InMemoryScenarioStore:
    return st.session_state["store"]


def get_manager() -> ScenarioManager:
    return st.session_state["manager"]


def get_template_service() -> CalendarTemplateService:
    return st.session_state["templates"]


def get_stats_cache() -> StatsCache:
    return st.session_state["stats_cache"]


def get_resource_feed() -> ResourceFeed:
    return st.session_state["resource_feed"]


def get_resources() -> List[Resource]:
    return get_resource_feed().resources


def get_year() -> int:
    return st.session_state.get("year", date.today().year)


# --- Setters ---

def set_year(year: int):
    st.session_state["year"] = int(year)


def set_active_scenario_id(scenario_id: str):
    """Switch the viewed version and re-point the resource feed at it."""
    manager = get_manager()
    manager.restore(scenario_id)
    get_resource_feed().follow(get_store(), scenario_id)


def apply_edit(coro, action: str = "Edit") -> bool:
    """Run a guarded edit and report failures in place; True when it went through."""
    try:
        run(coro)
    except ScenarioLockedError as exc:
        st.warning(str(exc))
    except ValidationError as exc:
        for message in exc.errors:
            st.error(message)
    except PlanningError as exc:
        logger.error("%s failed: %s", action, exc)
        st.error(f"{action} failed: {exc}")
    else:
        return True
    return False
