"""Presence & Budget Planner: Streamlit entry point."""

import streamlit as st
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config.logging_config import setup_logging
from components.sidebar import render_sidebar
from data.session_store import initialize_session_state
from tabs import (
    tab_dashboard,
    tab_budget,
    tab_resources,
    tab_versions,
    tab_calendar_templates,
)


def main():
    st.set_page_config(
        page_title="Presence & Budget Planner",
        page_icon="📅",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    setup_logging()
    initialize_session_state()
    sidebar_state = render_sidebar()

    tab1, tab2, tab3, tab4, tab5 = st.tabs([
        "📊 Dashboard",
        "💶 Budget",
        "👥 Resources",
        "🗂️ Versions",
        "📅 Calendar Templates",
    ])

    with tab1:
        tab_dashboard.render(sidebar_state)
    with tab2:
        tab_budget.render(sidebar_state)
    with tab3:
        tab_resources.render(sidebar_state)
    with tab4:
        tab_versions.render(sidebar_state)
    with tab5:
        tab_calendar_templates.render(sidebar_state)


if __name__ == "__main__":
    main()
