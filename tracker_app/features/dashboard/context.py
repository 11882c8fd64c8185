"""Pure helpers to build the dashboard context (no Streamlit)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import pandas as pd

from tracker_app.analytics import aggregations as agg
from tracker_app.core.config import TEAM_LEAD_PROJECTS


@dataclass(slots=True)
class DashboardContext:
    project_counts: pd.DataFrame
    status_counts: pd.DataFrame
    issues_by_project: pd.DataFrame
    trend: pd.DataFrame
    team_lead_breakdown: pd.DataFrame
    team_lead_rollup: pd.DataFrame
    # Summary cards sum over the configured team lead projects only
    totals: dict[str, int] = field(default_factory=dict)


def build_dashboard_context(
    df: pd.DataFrame,
    assignments: Mapping[str, Sequence[str]] = TEAM_LEAD_PROJECTS,
) -> DashboardContext:
    rollup = agg.team_lead_rollup(df, assignments)
    return DashboardContext(
        project_counts=agg.project_counts(df),
        status_counts=agg.status_counts(df),
        issues_by_project=agg.issues_by_project(df),
        trend=agg.daily_trend(df),
        team_lead_breakdown=agg.team_lead_breakdown(df, assignments),
        team_lead_rollup=rollup,
        totals=agg.rollup_totals(rollup),
    )
