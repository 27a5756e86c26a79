"""Tab 2: Budget envelopes of the active version."""

import streamlit as st

from components.metrics_cards import format_amount
from components.tables import envelopes_df, render_styled_table
from data.session_store import apply_edit, get_manager
from engine.budget import envelope_totals
from models.scenario import BudgetEnvelope, EnvelopeType


def render(sidebar_state):
    """Render the Budget tab."""
    st.header("Budget Envelopes")

    scenario = sidebar_state.scenario
    if not scenario:
        st.info("No version yet. Create one in the Versions tab.")
        return

    locked = not sidebar_state.editable
    manager = get_manager()

    run_total, change_total = envelope_totals(scenario.envelopes)
    col1, col2 = st.columns(2)
    col1.metric("RUN envelopes", format_amount(run_total))
    col2.metric("CHANGE envelopes", format_amount(change_total))

    if scenario.envelopes:
        render_styled_table(envelopes_df(scenario.envelopes))
    else:
        st.info("No envelope defined for this version.")

    st.divider()

    # --- Add envelope ---
    st.subheader("Add Envelope")
    with st.form("add_envelope", clear_on_submit=True):
        col1, col2, col3 = st.columns([3, 1, 2])
        name = col1.text_input("Name", disabled=locked)
        env_type = col2.selectbox("Type", [t.value for t in EnvelopeType], disabled=locked)
        amount = col3.number_input("Amount", min_value=0.0, step=1000.0, disabled=locked)
        submitted = st.form_submit_button("Add", disabled=locked)

    if submitted:
        envelope = BudgetEnvelope(id="", name=name, type=EnvelopeType(env_type), amount=amount)
        if apply_edit(manager.add_envelope(scenario.id, envelope)):
            st.success(f"Envelope '{name}' added.")
            st.rerun()

    # --- Edit / delete ---
    if scenario.envelopes:
        st.subheader("Edit Envelope")
        by_id = {e.id: e for e in scenario.envelopes}
        selected_id = st.selectbox(
            "Envelope",
            options=list(by_id),
            format_func=lambda x: by_id[x].name,
            key="budget_envelope_select",
        )
        selected = by_id[selected_id]

        col1, col2, col3 = st.columns([3, 2, 1])
        new_name = col1.text_input("Name", value=selected.name, key=f"env_name_{selected_id}", disabled=locked)
        new_amount = col2.number_input(
            "Amount", min_value=0.0, value=float(selected.amount), step=1000.0,
            key=f"env_amount_{selected_id}", disabled=locked,
        )
        with col3:
            st.write("")
            save = st.button("Save", key="btn_env_save", disabled=locked)
            delete = st.button("Delete", key="btn_env_delete", disabled=locked)

        if save and apply_edit(manager.update_envelope(scenario.id, selected_id, name=new_name, amount=new_amount)):
            st.rerun()
        if delete and apply_edit(manager.delete_envelope(scenario.id, selected_id)):
            st.rerun()
