"""Global sidebar controls for version and year selection."""

import streamlit as st
from dataclasses import dataclass
from datetime import date
from typing import Optional

from data.session_store import get_manager, get_year, set_active_scenario_id, set_year
from models.scenario import Scenario, ScenarioStatus

STATUS_BADGES = {
    ScenarioStatus.DRAFT: "🟢 DRAFT",
    ScenarioStatus.MASTER: "🔵 MASTER",
    ScenarioStatus.ARCHIVED: "⚪ ARCHIVED",
}


@dataclass
class SidebarState:
    scenario: Optional[Scenario]
    year: int

    @property
    def editable(self) -> bool:
        return self.scenario is not None and self.scenario.is_editable


def _on_version_selected():
    set_active_scenario_id(st.session_state["sidebar_scenario"])


def render_sidebar() -> SidebarState:
    """Render the global sidebar controls and return current state."""
    manager = get_manager()
    with st.sidebar:
        st.title("Presence & Budget Planner")
        st.caption(f"Owner: {manager.owner_id}")
        st.divider()

        if manager.last_error is not None:
            st.error(f"Version list unavailable: {manager.last_error}")

        versions = manager.versions
        version_ids = [v.id for v in versions]
        labels = {v.id: f"{v.name} ({v.status.value})" for v in versions}

        if version_ids:
            # Fork/publish/restore move the active version outside this widget
            if manager.active_scenario_id in version_ids:
                st.session_state["sidebar_scenario"] = manager.active_scenario_id
            st.selectbox(
                "Active Version",
                options=version_ids,
                format_func=lambda x: labels.get(x, x),
                key="sidebar_scenario",
                on_change=_on_version_selected,
            )

        this_year = date.today().year
        years = list(range(this_year - 2, this_year + 3))
        year = st.selectbox(
            "Year",
            options=years,
            index=years.index(get_year()) if get_year() in years else 2,
            key="sidebar_year",
        )
        if year != get_year():
            set_year(year)

        st.divider()

        active = manager.active_scenario
        if active:
            st.markdown(f"**Status:** {STATUS_BADGES[active.status]}")
            st.caption(f"Updated: {active.updated_at:%Y-%m-%d %H:%M}")
            if active.parent_id:
                parent = manager.get_version(active.parent_id)
                st.caption(f"Parent: {parent.name if parent else active.parent_id}")
            if not active.is_editable:
                st.warning("Read-only version. Fork it or switch to a draft to edit.")

    return SidebarState(scenario=manager.active_scenario, year=year)
