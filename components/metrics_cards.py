"""Reusable KPI metric card widgets."""

import streamlit as st

from config.defaults import BUDGET_WARNING_PCT, CURRENCY_SYMBOL
from models.stats import BudgetSummary


def format_amount(value: float) -> str:
    return f"{value:,.0f} {CURRENCY_SYMBOL}"


def render_metric_row(metrics: list[dict]):
    """Render a row of metric cards.

    Each metric dict should have: label, value, and optionally delta, delta_color.
    """
    cols = st.columns(len(metrics))
    for col, m in zip(cols, metrics):
        with col:
            st.metric(
                label=m["label"],
                value=m["value"],
                delta=m.get("delta"),
                delta_color=m.get("delta_color", "normal"),
            )


def budget_metrics(summary: BudgetSummary) -> list[dict]:
    """Metric dicts for the budget KPI row: total, forecast, remaining per type."""
    def remaining(delta):
        return {"delta": format_amount(delta), "delta_color": "normal" if delta >= 0 else "inverse"}

    return [
        {"label": "Total Budget", "value": format_amount(summary.budget_total)},
        {"label": "Forecast", "value": format_amount(summary.forecast_total),
         "delta": f"{summary.pct_total:.1f}% consumed", "delta_color": "off"},
        {"label": "Remaining RUN", "value": format_amount(summary.delta_run), **remaining(summary.delta_run)},
        {"label": "Remaining CHANGE", "value": format_amount(summary.delta_change),
         **remaining(summary.delta_change)},
    ]


def budget_alerts(summary: BudgetSummary) -> list[tuple]:
    """(message, level) pairs for envelopes that are over or near their budget."""
    alerts = []
    for label, pct, delta, budget in (
        ("RUN", summary.pct_run, summary.delta_run, summary.budget_run),
        ("CHANGE", summary.pct_change, summary.delta_change, summary.budget_change),
    ):
        if budget <= 0:
            continue
        if delta < 0:
            alerts.append((f"{label} forecast exceeds budget by {format_amount(-delta)}", "error"))
        elif pct >= BUDGET_WARNING_PCT:
            alerts.append((f"{label} forecast at {pct:.0f}% of budget", "warning"))
    return alerts


def render_alert_card(message: str, level: str = "warning"):
    """Render an alert card with appropriate styling."""
    if level == "error":
        st.error(message, icon="🔴")
    elif level == "warning":
        st.warning(message, icon="🟡")
    else:
        st.info(message, icon="🔵")
