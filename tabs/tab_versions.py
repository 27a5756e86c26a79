"""Tab 4: Versions. Fork, publish, restore and reset the owner's scenarios."""

import streamlit as st
import pandas as pd

from data.sample_data import seed_demo
from data.session_store import apply_edit, get_manager, run, set_active_scenario_id
from engine.errors import PlanningError, ScenarioLockedError


def _report(result, action: str):
    """Tell the user how a fork/publish went, including a failed resource copy."""
    if result.complete:
        st.success(f"{action}: '{result.name}' created with {result.resources_copied} resources.")
    else:
        st.warning(
            f"{action}: '{result.name}' was created but its resources could not be copied "
            f"({result.replication_error}). It is the active version now; "
            "fork the source again to retry."
        )


def render(sidebar_state):
    """Render the Versions tab."""
    st.header("Versions")

    manager = get_manager()
    versions = manager.versions
    names = {v.id: v.name for v in versions}

    rows = [{
        "Name": v.name,
        "Status": v.status.value,
        "Parent": names.get(v.parent_id, v.parent_id or ""),
        "Envelopes": len(v.envelopes),
        "Updated": f"{v.updated_at:%Y-%m-%d %H:%M}",
        "Active": "●" if v.id == manager.active_scenario_id else "",
    } for v in versions]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    scenario = sidebar_state.scenario
    if not scenario:
        st.info("No version yet.")
        if st.button("Initialize project", type="primary"):
            apply_edit(manager.initialize_project(), "Initialize")
            st.rerun()
        return

    st.divider()

    # --- Restore ---
    st.subheader("Restore")
    restore_id = st.selectbox(
        "Open version",
        options=[v.id for v in versions],
        format_func=lambda x: f"{names[x]} ({manager.get_version(x).status.value})",
        key="versions_restore",
    )
    if st.button("Open", key="btn_restore"):
        set_active_scenario_id(restore_id)
        st.rerun()

    st.divider()

    col1, col2 = st.columns(2)

    # --- Fork ---
    with col1:
        st.subheader("Snapshot")
        st.caption(f"New draft copied from '{scenario.name}'. Works from any status.")
        snapshot_name = st.text_input("Snapshot name", key="versions_fork_name")
        if st.button("Create snapshot", key="btn_fork"):
            try:
                result = run(manager.fork(scenario.id, snapshot_name))
            except PlanningError as exc:
                st.error(str(exc))
            else:
                set_active_scenario_id(result.scenario_id)
                _report(result, "Snapshot")

    # --- Publish ---
    with col2:
        st.subheader("Publish")
        st.caption("Promote this draft to MASTER, archive the current master and open a new draft.")
        if st.button("Publish", type="primary", key="btn_publish", disabled=not sidebar_state.editable):
            try:
                result = run(manager.publish(scenario.id))
            except ScenarioLockedError as exc:
                st.warning(str(exc))
            except PlanningError as exc:
                st.error(str(exc))
            else:
                set_active_scenario_id(result.scenario_id)
                _report(result, "Publish")

    st.divider()

    # --- Demo data / reset ---
    st.subheader("Project")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Load demo team", key="btn_demo", disabled=not sidebar_state.editable):
            if apply_edit(seed_demo(manager, scenario.id, sidebar_state.year), "Demo data"):
                st.rerun()
    with col2:
        confirm = st.checkbox("I understand every version will be deleted", key="versions_reset_confirm")
        if st.button("Reset all data", key="btn_reset", disabled=not confirm):
            if apply_edit(manager.reset_all(), "Reset"):
                set_active_scenario_id(manager.active_scenario_id)
                st.rerun()
