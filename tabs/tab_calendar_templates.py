"""Tab 5: Calendar templates used to seed new resources."""

from datetime import date

import streamlit as st
import pandas as pd

from data.holiday_api import HolidayImportError, fetch_public_holidays
from data.session_store import apply_edit, get_template_service, run
from engine.explainer import presence_choices, presence_from_label, presence_label
from models.resource import CalendarTemplate, Country


def render(sidebar_state):
    """Render the Calendar Templates tab."""
    st.header("Calendar Templates")
    st.caption(
        "Templates are copied into a resource when it is created. "
        "Templates are shared across versions."
    )

    service = get_template_service()
    templates = run(service.list_templates())

    if templates:
        st.dataframe(pd.DataFrame([{
            "Name": t.name,
            "Country": t.country.value,
            "Default": "✓" if t.is_default else "",
            "Overrides": len(t.overrides),
            "Holidays": len(t.dynamic_holidays),
        } for t in templates]), use_container_width=True, hide_index=True)
    else:
        st.info("No calendar template yet.")

    st.divider()

    # --- Create ---
    st.subheader("New Template")
    with st.form("add_template", clear_on_submit=True):
        col1, col2, col3 = st.columns([3, 1, 1])
        name = col1.text_input("Name")
        country = col2.selectbox("Country", [c.value for c in Country])
        is_default = col3.checkbox("Default")
        with_holidays = st.checkbox(f"Include public holidays of {sidebar_state.year}")
        submitted = st.form_submit_button("Create")

    if submitted:
        holidays = []
        if with_holidays:
            try:
                holidays = fetch_public_holidays(country, sidebar_state.year)
            except HolidayImportError as exc:
                st.error(str(exc))
                return
        template = CalendarTemplate(
            name=name.strip(),
            country=Country(country),
            is_default=is_default,
            overrides={d: 0 for d in holidays},
            dynamic_holidays=tuple(holidays),
        )
        if apply_edit(service.create_template(template), "Create template"):
            st.rerun()

    if not templates:
        return

    # --- Default / delete ---
    st.subheader("Manage")
    by_id = {t.id: t for t in templates}
    selected_id = st.selectbox(
        "Template",
        options=list(by_id),
        format_func=lambda x: f"{by_id[x].name} ({by_id[x].country.value})",
        key="template_select",
    )
    col1, col2 = st.columns(2)
    if col1.button("Make default", key="btn_template_default", disabled=by_id[selected_id].is_default):
        if apply_edit(service.update_template(selected_id, is_default=True), "Update template"):
            st.rerun()
    if col2.button("Delete", key="btn_template_delete"):
        if apply_edit(service.delete_template(selected_id), "Delete template"):
            st.rerun()

    # --- Day overrides ---
    selected = by_id[selected_id]
    st.subheader("Days Off and Presence")
    col1, col2, col3 = st.columns([2, 2, 1])
    day = col1.date_input("Date", value=date(sidebar_state.year, 1, 1), key=f"tpl_day_{selected_id}")
    choice = col2.selectbox("Presence", presence_choices(), key=f"tpl_val_{selected_id}")
    with col3:
        st.write("")
        if st.button("Apply", key=f"tpl_apply_{selected_id}"):
            if apply_edit(service.set_override(selected_id, day, presence_from_label(choice)), "Template day"):
                st.rerun()

    if selected.overrides:
        st.dataframe(pd.DataFrame(
            [(d, presence_label(v)) for d, v in sorted(selected.overrides.items())],
            columns=["Date", "Presence"],
        ), use_container_width=True, hide_index=True)
