"""DataFrame builders and styled table display helpers."""

import streamlit as st
import pandas as pd
from typing import List, Optional

from config.defaults import MONTH_LABELS
from engine.aggregator import monthly_breakdown
from engine.stats_cache import StatsCache
from models.resource import Resource
from models.scenario import BudgetEnvelope


def resources_df(resources: List[Resource], year: int, cache: StatsCache) -> pd.DataFrame:
    """One row per resource with its cached yearly days and RUN/CHANGE cost."""
    rows = []
    for r in resources:
        stats = cache.subscribe(r, year)
        rows.append({
            "ID": r.id,
            "Name": r.full_name,
            "Tribe": r.tribe,
            "Contract": r.contract_type.value,
            "Country": r.country.value,
            "TJM": r.tjm,
            "Change %": r.ratio_change,
            "Start": r.start_date,
            "End": r.end_date,
            "Days": stats.days,
            "Cost": stats.cost,
            "RUN Cost": stats.cost * r.run_share,
            "CHANGE Cost": stats.cost * r.change_share,
        })
    columns = ["ID", "Name", "Tribe", "Contract", "Country", "TJM", "Change %",
               "Start", "End", "Days", "Cost", "RUN Cost", "CHANGE Cost"]
    return pd.DataFrame(rows, columns=columns)


def monthly_df(resource: Resource, year: int) -> pd.DataFrame:
    months = monthly_breakdown(resource, year)
    return pd.DataFrame({
        "Month": MONTH_LABELS,
        "Days": [m.days for m in months],
        "Cost": [m.cost for m in months],
    })


def envelopes_df(envelopes: List[BudgetEnvelope]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"ID": e.id, "Name": e.name, "Type": e.type.value, "Amount": e.amount} for e in envelopes],
        columns=["ID", "Name", "Type", "Amount"],
    )


def render_styled_table(
    df: pd.DataFrame,
    title: Optional[str] = None,
    height: Optional[int] = None,
    use_container_width: bool = True,
):
    """Render a styled, non-editable dataframe."""
    if title:
        st.subheader(title)
    st.dataframe(df, height=height, use_container_width=use_container_width, hide_index=True)


def render_delta_table(df: pd.DataFrame, delta_column: str = "Remaining"):
    """Render a table with positive/negative highlighting on the delta column."""
    def color_delta(val):
        try:
            v = float(val)
            if v > 0:
                return "color: #155724; font-weight: bold"
            elif v < 0:
                return "color: #cc0000; font-weight: bold"
        except (ValueError, TypeError):
            pass
        return ""

    if delta_column in df.columns:
        styled = df.style.map(color_delta, subset=[delta_column])
        st.dataframe(styled, use_container_width=True, hide_index=True)
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)
