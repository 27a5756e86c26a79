"""Plotly chart builders for the Presence & Budget Planner."""

import plotly.express as px
import plotly.graph_objects as go
import pandas as pd

from config.defaults import CURRENCY_SYMBOL
from models.stats import BudgetSummary


def budget_vs_forecast_bar(summary: BudgetSummary, title: str = "Budget vs Forecast") -> go.Figure:
    """Grouped bars of budget and forecast for RUN and CHANGE."""
    df = pd.DataFrame([
        {"Type": "RUN", "Budget": summary.budget_run, "Forecast": summary.forecast_run},
        {"Type": "CHANGE", "Budget": summary.budget_change, "Forecast": summary.forecast_change},
    ])
    fig = px.bar(
        df, x="Type", y=["Budget", "Forecast"],
        barmode="group",
        labels={"value": f"Amount ({CURRENCY_SYMBOL})", "variable": ""},
        title=title,
        color_discrete_map={"Budget": "#4A90D9", "Forecast": "#E8734A"},
    )
    fig.update_layout(legend_title_text="", height=400)
    return fig


def consumption_donut(forecast: float, budget: float, title: str = "Budget Consumption") -> go.Figure:
    """Donut of forecast against the remaining budget; overspend shows as its own slice."""
    if forecast <= budget:
        labels, values = ["Forecast", "Remaining"], [forecast, budget - forecast]
        colors = ["#E8734A", "#4A90D9"]
    else:
        labels, values = ["Budget", "Overspend"], [budget, forecast - budget]
        colors = ["#E8734A", "#CC0000"]

    pct = forecast / budget * 100 if budget > 0 else 0
    fig = go.Figure(data=[go.Pie(
        labels=labels,
        values=values,
        hole=0.6,
        marker_colors=colors,
        textinfo="percent+label",
    )])
    fig.update_layout(
        title=title,
        height=350,
        showlegend=True,
        annotations=[dict(text=f"{pct:.0f}%", x=0.5, y=0.5, font_size=16, showarrow=False)],
    )
    return fig


def monthly_presence_bar(monthly: pd.DataFrame, title: str = "Presence per Month") -> go.Figure:
    """Days present per month, with the month's cost in the hover."""
    fig = px.bar(
        monthly, x="Month", y="Days",
        title=title,
        hover_data={"Cost": ":,.0f"},
        color_discrete_sequence=["#4A90D9"],
    )
    fig.update_layout(height=350, xaxis_type="category")
    fig.update_traces(texttemplate="%{y:g}", textposition="auto")
    return fig


def tribe_cost_bar(resources_df: pd.DataFrame) -> go.Figure:
    """Stacked RUN/CHANGE forecast per tribe."""
    grouped = resources_df.groupby("Tribe", dropna=False)[["RUN Cost", "CHANGE Cost"]].sum().reset_index()
    grouped["Tribe"] = grouped["Tribe"].fillna("(none)")
    fig = go.Figure()
    for col, color in (("RUN Cost", "#4A90D9"), ("CHANGE Cost", "#E8734A")):
        fig.add_trace(go.Bar(name=col.split()[0], x=grouped["Tribe"], y=grouped[col], marker_color=color))
    fig.update_layout(
        barmode="stack",
        title="Forecast by Tribe",
        xaxis_title="Tribe",
        yaxis_title=f"Cost ({CURRENCY_SYMBOL})",
        height=400,
    )
    return fig
