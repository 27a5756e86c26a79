"""Tab 1: Dashboard. Budget against forecast for the active version."""

import streamlit as st
import pandas as pd

from components.charts import budget_vs_forecast_bar, consumption_donut, tribe_cost_bar
from components.metrics_cards import budget_alerts, budget_metrics, render_alert_card, render_metric_row
from components.tables import render_delta_table, resources_df
from data.session_store import get_resource_feed, get_stats_cache
from engine.budget import budget_summary


def render(sidebar_state):
    """Render the Dashboard tab."""
    st.header("Dashboard")

    scenario = sidebar_state.scenario
    if not scenario:
        st.info("No version yet. Create one in the Versions tab.")
        return

    feed = get_resource_feed()
    if feed.error is not None:
        st.error(f"Resources could not be loaded: {feed.error}")
        return

    year = sidebar_state.year
    cache = get_stats_cache()
    summary = budget_summary(scenario.envelopes, feed.resources, year, cache)

    st.caption(f"{scenario.name} | {scenario.status.value} | {year}")
    render_metric_row(budget_metrics(summary))

    for message, level in budget_alerts(summary):
        render_alert_card(message, level)

    st.divider()

    col1, col2 = st.columns([3, 2])
    with col1:
        st.plotly_chart(budget_vs_forecast_bar(summary), use_container_width=True)
    with col2:
        st.plotly_chart(
            consumption_donut(summary.forecast_total, summary.budget_total),
            use_container_width=True,
        )

    st.subheader("Budget by Type")
    render_delta_table(_summary_rows(summary))

    if feed.resources:
        st.divider()
        st.plotly_chart(tribe_cost_bar(resources_df(feed.resources, year, cache)), use_container_width=True)
    else:
        st.info("No resources in this version. Add some in the Resources tab.")


def _summary_rows(summary) -> pd.DataFrame:
    return pd.DataFrame([
        {"Type": "RUN", "Budget": summary.budget_run, "Forecast": summary.forecast_run,
         "Remaining": summary.delta_run, "Consumed %": round(summary.pct_run, 1)},
        {"Type": "CHANGE", "Budget": summary.budget_change, "Forecast": summary.forecast_change,
         "Remaining": summary.delta_change, "Consumed %": round(summary.pct_change, 1)},
        {"Type": "TOTAL", "Budget": summary.budget_total, "Forecast": summary.forecast_total,
         "Remaining": summary.delta_total, "Consumed %": round(summary.pct_total, 1)},
    ])
