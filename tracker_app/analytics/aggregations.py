"""Issue aggregations for the dashboard charts and team lead statistics.

Every aggregation is a single groupby pass over the issue frame.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd

from tracker_app.analytics.filters import parse_dates
from tracker_app.core.config import STATUS_DISPLAY_ORDER, TEAM_LEAD_PROJECTS
from tracker_app.core.status import is_closed, normalize_status

PROJECT_COLUMNS = ["name", "total", "pending", "closed"]
BREAKDOWN_COLUMNS = ["team_lead", "project", "pending", "closed", "total"]
ROLLUP_COLUMNS = ["team_lead", "projects", "pending", "closed", "total"]


def _with_closed_flag(df: pd.DataFrame) -> pd.DataFrame:
    out = df[["project", "status"]].copy()
    out["project"] = out["project"].fillna("").astype(str)
    out["closed"] = out["status"].map(is_closed).astype(int)
    return out


def project_counts(df: pd.DataFrame) -> pd.DataFrame:
    """Per project ``total``, ``pending`` (not closed) and ``closed`` counts.

    Projects appear in order of first occurrence; ``total == pending + closed``
    holds for every row.
    """
    if df.empty:
        return pd.DataFrame(columns=PROJECT_COLUMNS)
    out = _with_closed_flag(df)
    agg = (
        out.groupby("project", sort=False)
        .agg(total=("closed", "size"), closed=("closed", "sum"))
        .reset_index()
        .rename(columns={"project": "name"})
    )
    agg["pending"] = agg["total"] - agg["closed"]
    return agg[PROJECT_COLUMNS].astype({"total": int, "pending": int, "closed": int})


def project_count_map(df: pd.DataFrame) -> dict[str, dict[str, int]]:
    counts = project_counts(df)
    return {
        row.name: {"total": int(row.total), "pending": int(row.pending), "closed": int(row.closed)}
        for row in counts.itertuples(index=False)
    }


def issues_by_project(df: pd.DataFrame) -> pd.DataFrame:
    counts = project_counts(df)
    return counts[["name", "total"]].rename(columns={"total": "issues"})


def status_counts(df: pd.DataFrame, statuses: Sequence[str] = STATUS_DISPLAY_ORDER) -> pd.DataFrame:
    """Counts for the canonical statuses (zero-filled), in display order."""
    if df.empty:
        counts = pd.Series(dtype=int)
    else:
        counts = df["status"].map(normalize_status).value_counts()
    return pd.DataFrame(
        {"name": list(statuses), "value": [int(counts.get(status, 0)) for status in statuses]}
    )


def team_lead_breakdown(
    df: pd.DataFrame,
    assignments: Mapping[str, Sequence[str]] = TEAM_LEAD_PROJECTS,
) -> pd.DataFrame:
    """One row per configured (team lead, project) with that project's counts."""
    counts = project_count_map(df)
    rows = []
    for lead, projects in assignments.items():
        for project in projects:
            stats = counts.get(project, {})
            rows.append(
                {
                    "team_lead": lead,
                    "project": project,
                    "pending": stats.get("pending", 0),
                    "closed": stats.get("closed", 0),
                    "total": stats.get("total", 0),
                }
            )
    return pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)


def team_lead_rollup(
    df: pd.DataFrame,
    assignments: Mapping[str, Sequence[str]] = TEAM_LEAD_PROJECTS,
) -> pd.DataFrame:
    """Per team lead sums of pending/closed/total over the lead's projects."""
    breakdown = team_lead_breakdown(df, assignments)
    rows = []
    for lead, projects in assignments.items():
        mine = breakdown[breakdown["team_lead"] == lead]
        rows.append(
            {
                "team_lead": lead,
                "projects": list(projects),
                "pending": int(mine["pending"].sum()),
                "closed": int(mine["closed"].sum()),
                "total": int(mine["total"].sum()),
            }
        )
    return pd.DataFrame(rows, columns=ROLLUP_COLUMNS)


def rollup_totals(rollup: pd.DataFrame) -> dict[str, int]:
    if rollup.empty:
        return {"pending": 0, "closed": 0, "total": 0}
    return {col: int(rollup[col].sum()) for col in ("pending", "closed", "total")}


def daily_trend(df: pd.DataFrame) -> pd.DataFrame:
    """Issues per calendar day, ascending by date; unparseable dates are dropped."""
    if df.empty:
        return pd.DataFrame(columns=["date", "count"])
    dates = parse_dates(df["date"]).dropna()
    if dates.empty:
        return pd.DataFrame(columns=["date", "count"])
    agg = dates.groupby(dates).size().rename("count").rename_axis("date").reset_index()
    agg["count"] = agg["count"].astype(int)
    return agg.sort_values("date", kind="stable").reset_index(drop=True)
