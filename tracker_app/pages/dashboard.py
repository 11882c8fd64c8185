"""Dashboard page: summary cards, charts, and team lead statistics.

The body runs inside a fragment that reruns on a fixed interval, so changes
written by another session (or another process sharing the snapshot) show up
without a manual refresh.
"""

from __future__ import annotations

import logging

import pandas as pd
import streamlit as st

from tracker_app.app import activate_view, poll_view, register_page
from tracker_app.core.config import POLL_INTERVAL_SECONDS
from tracker_app.core.errors import StoreError
from tracker_app.features.controller import ViewController
from tracker_app.features.dashboard import DashboardContext
from tracker_app.visual import charts
from tracker_app.visual.column_metadata import apply_column_metadata

logger = logging.getLogger(__name__)


def _render_chart(title: str, chart) -> None:
    st.subheader(title)
    if chart is None:
        st.info("No issues to chart yet.")
        return
    st.altair_chart(chart, use_container_width=True)


def _team_lead_table(ctx: DashboardContext) -> pd.DataFrame:
    table = ctx.team_lead_breakdown.copy()
    # Show each lead once, on its first project row
    table.loc[table["team_lead"].duplicated(), "team_lead"] = ""
    totals = pd.DataFrame([{"team_lead": "Total", "project": "", **ctx.totals}])
    return pd.concat([table, totals], ignore_index=True)


def render_dashboard(ctx: DashboardContext) -> None:
    cards = st.columns(3)
    cards[0].metric("Total Issues", ctx.totals.get("total", 0))
    cards[1].metric("Pending Issues", ctx.totals.get("pending", 0))
    cards[2].metric("Closed Issues", ctx.totals.get("closed", 0))

    left, right = st.columns(2)
    with left:
        _render_chart("Project-wise Issue Count", charts.project_status_bar(ctx.project_counts))
        _render_chart("Issue Status Distribution", charts.status_pie(ctx.status_counts))
    with right:
        _render_chart("Issues by Project", charts.issues_by_project_bar(ctx.issues_by_project))
        _render_chart("Issue Trend Over Time", charts.issue_trend_line(ctx.trend))
        st.subheader("Team Lead Statistics")
        table = _team_lead_table(ctx)
        cols = ["team_lead", "project", "pending", "closed", "total"]
        st.dataframe(table[cols], hide_index=True, column_config=apply_column_metadata(cols))


@st.fragment(run_every=POLL_INTERVAL_SECONDS)
def _live_dashboard(controller: ViewController) -> None:
    poll_view(controller)
    render_dashboard(controller.dashboard())


@register_page("Dashboard")
def dashboard_page():
    st.title("Dashboard")
    try:
        controller = activate_view("dashboard_view")
    except StoreError as exc:
        logger.error("Failed to load issues: %s", exc)
        st.error(f"Failed to load issues: {exc}")
        st.button("Retry")
        return
    _live_dashboard(controller)
