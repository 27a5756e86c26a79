"""Tab 3: Resources, their day-by-day presence and yearly cost."""

import calendar
from datetime import date

import pandas as pd
import streamlit as st

from components.charts import monthly_presence_bar
from components.tables import monthly_df, render_styled_table, resources_df
from config.defaults import DEFAULT_RATIO_CHANGE, MONTH_LABELS, RATIO_MAX, RATIO_MIN
from data.holiday_api import HolidayImportError, fetch_public_holidays
from data.session_store import (
    apply_edit, get_manager, get_resource_feed, get_stats_cache, get_template_service, run,
)
from engine.calendar_rules import iter_days, resolve_day
from engine.calendar_templates import default_template
from engine.explainer import day_style, explain_day, presence_choices, presence_from_label, presence_label
from models.resource import ContractType, Country, Resource

VALUE_CHOICES = presence_choices()


def render(sidebar_state):
    """Render the Resources tab."""
    st.header("Resources")

    scenario = sidebar_state.scenario
    if not scenario:
        st.info("No version yet. Create one in the Versions tab.")
        return

    feed = get_resource_feed()
    if feed.error is not None:
        st.error(f"Resources could not be loaded: {feed.error}")
        return

    year = sidebar_state.year
    locked = not sidebar_state.editable
    resources = feed.resources

    if resources:
        df = resources_df(resources, year, get_stats_cache())
        render_styled_table(df.drop(columns=["ID"]), title=f"Team in {year}")
        st.caption(f"{df['Days'].sum():g} days, {df['Cost'].sum():,.0f} total cost")
    else:
        st.info("No resources in this version yet.")

    st.divider()
    _render_add_form(scenario, locked)

    if not resources:
        return

    st.divider()
    by_id = {r.id: r for r in resources}
    selected_id = st.selectbox(
        "Resource",
        options=list(by_id),
        format_func=lambda x: by_id[x].full_name,
        key="resource_select",
    )
    resource = by_id[selected_id]

    details, presence, calendar_tab = st.tabs(["Details", "Presence", "Calendar"])
    with details:
        _render_details(scenario, resource, locked)
    with presence:
        _render_presence_edits(scenario, resource, year, locked)
    with calendar_tab:
        _render_calendar(resource, year)


def _render_add_form(scenario, locked: bool):
    st.subheader("Add Resource")
    templates = run(get_template_service().list_templates())
    template_labels = {t.id: f"{t.name} ({t.country.value})" for t in templates}

    # Outside the form so the template choice follows the country
    country = st.selectbox("Country", [c.value for c in Country], key="add_country", disabled=locked)
    default = default_template(templates, country)
    template_options = [""] + list(template_labels)

    with st.form("add_resource", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        first_name = col1.text_input("First name", disabled=locked)
        last_name = col2.text_input("Last name", disabled=locked)
        tribe = col3.text_input("Tribe", disabled=locked)

        col1, col2, col3 = st.columns(3)
        contract = col1.selectbox("Contract", [c.value for c in ContractType], disabled=locked)
        tjm = col2.number_input("TJM", min_value=0.0, step=50.0, disabled=locked)
        ratio = col3.slider(
            "Change %", min_value=RATIO_MIN, max_value=RATIO_MAX,
            value=DEFAULT_RATIO_CHANGE, step=5, disabled=locked,
        )

        col1, col2, col3 = st.columns(3)
        start = col1.date_input("Start", value=None, disabled=locked)
        end = col2.date_input("End", value=None, disabled=locked)
        template_id = col3.selectbox(
            "Calendar template",
            options=template_options,
            index=template_options.index(default.id) if default else 0,
            format_func=lambda x: template_labels.get(x, "None"),
            key=f"add_template_{country}",
            disabled=locked,
        )
        submitted = st.form_submit_button("Add", disabled=locked)

    if submitted:
        resource = Resource(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            tribe=tribe.strip() or None,
            contract_type=ContractType(contract),
            tjm=tjm,
            country=Country(country),
            ratio_change=ratio,
            start_date=start.isoformat() if start else "",
            end_date=end.isoformat() if end else "",
        )
        template = next((t for t in templates if t.id == template_id), None)
        if apply_edit(get_manager().add_resource(scenario.id, resource, template), "Add resource"):
            st.success(f"{resource.full_name} added.")
            st.rerun()


def _render_details(scenario, resource: Resource, locked: bool):
    key = resource.id
    contracts = [c.value for c in ContractType]
    countries = [c.value for c in Country]

    col1, col2, col3 = st.columns(3)
    first_name = col1.text_input("First name", value=resource.first_name, key=f"first_{key}", disabled=locked)
    last_name = col2.text_input("Last name", value=resource.last_name, key=f"last_{key}", disabled=locked)
    tribe = col3.text_input("Tribe", value=resource.tribe or "", key=f"tribe_{key}", disabled=locked)

    col1, col2, col3, col4 = st.columns(4)
    contract = col1.selectbox("Contract", contracts, index=contracts.index(resource.contract_type.value),
                              key=f"contract_{key}", disabled=locked)
    country = col2.selectbox("Country", countries, index=countries.index(resource.country.value),
                             key=f"country_{key}", disabled=locked)
    tjm = col3.number_input("TJM", min_value=0.0, value=float(resource.tjm), step=50.0,
                            key=f"tjm_{key}", disabled=locked)
    ratio = col4.slider("Change %", RATIO_MIN, RATIO_MAX, int(resource.ratio_change), 5,
                        key=f"ratio_{key}", disabled=locked)

    col1, col2 = st.columns(2)
    start = col1.text_input("Start (YYYY-MM-DD)", value=resource.start_date, key=f"start_{key}",
                            disabled=locked)
    end = col2.text_input("End (YYYY-MM-DD)", value=resource.end_date, key=f"end_{key}", disabled=locked)

    col1, col2 = st.columns(2)
    if col1.button("Save", key=f"save_{key}", disabled=locked):
        changes = dict(
            first_name=first_name.strip(), last_name=last_name.strip(), tribe=tribe.strip() or None,
            contract_type=contract, country=country, tjm=tjm, ratio_change=ratio,
            start_date=start.strip(), end_date=end.strip(),
        )
        if apply_edit(get_manager().update_resource(scenario.id, resource.id, **changes), "Update resource"):
            st.rerun()
    if col2.button("Delete", key=f"delete_{key}", disabled=locked):
        if apply_edit(get_manager().delete_resource(scenario.id, resource.id), "Delete resource"):
            st.rerun()


def _render_presence_edits(scenario, resource: Resource, year: int, locked: bool):
    manager = get_manager()
    key = resource.id

    st.markdown("**Single day**")
    col1, col2, col3 = st.columns([2, 2, 1])
    day = col1.date_input("Date", value=date(year, 1, 1), key=f"ovr_day_{key}", disabled=locked)
    choice = col2.selectbox("Presence", VALUE_CHOICES, key=f"ovr_val_{key}", disabled=locked)
    with col3:
        st.write("")
        if st.button("Apply", key=f"ovr_apply_{key}", disabled=locked):
            if apply_edit(manager.update_override(scenario.id, resource.id, day, presence_from_label(choice)),
                          "Override"):
                st.rerun()

    st.markdown("**Date range**")
    col1, col2, col3, col4 = st.columns([2, 2, 2, 1])
    start = col1.date_input("From", value=date(year, 1, 1), key=f"bulk_start_{key}", disabled=locked)
    end = col2.date_input("To", value=date(year, 1, 1), key=f"bulk_end_{key}", disabled=locked)
    bulk_choice = col3.selectbox("Presence", VALUE_CHOICES, key=f"bulk_val_{key}", disabled=locked)
    with col4:
        st.write("")
        if st.button("Apply", key=f"bulk_apply_{key}", disabled=locked):
            coro = manager.bulk_update_overrides(
                scenario.id, resource.id, start, end, presence_from_label(bulk_choice)
            )
            if apply_edit(coro, "Bulk edit"):
                st.rerun()

    st.markdown("**Public holidays**")
    st.caption(f"Import {resource.country.value} public holidays for {year} as days off.")
    if st.button("Import holidays", key=f"holidays_{key}", disabled=locked):
        try:
            dates = fetch_public_holidays(resource.country, year)
        except HolidayImportError as exc:
            st.error(str(exc))
        else:
            if apply_edit(manager.apply_holidays(scenario.id, resource.id, dates), "Holiday import"):
                st.success(f"{len(dates)} holidays imported.")
                st.rerun()

    if resource.overrides:
        with st.expander(f"{len(resource.overrides)} overrides"):
            st.dataframe(
                pd.DataFrame(sorted(resource.overrides.items()), columns=["Date", "Value"]),
                use_container_width=True, hide_index=True,
            )


def _render_calendar(resource: Resource, year: int):
    monthly = monthly_df(resource, year)
    st.plotly_chart(monthly_presence_bar(monthly), use_container_width=True)
    with st.expander("Monthly totals"):
        st.dataframe(monthly, use_container_width=True, hide_index=True)

    month = st.selectbox(
        "Month", options=list(range(1, 13)), format_func=lambda m: MONTH_LABELS[m - 1],
        key=f"cal_month_{resource.id}",
    )
    last_day = calendar.monthrange(year, month)[1]
    rows = []
    for day in iter_days(date(year, month, 1), date(year, month, last_day)):
        status = resolve_day(day, resource)
        rows.append({
            "Date": day.isoformat(),
            "Day": day.strftime("%a"),
            "Presence": presence_label(status.value),
            "Kind": day_style(status),
        })
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    inspect = st.date_input("Explain a day", value=date(year, month, 1), key=f"cal_inspect_{resource.id}")
    for step in explain_day(inspect.isoformat(), resolve_day(inspect, resource)):
        st.markdown(f"- {step}")
