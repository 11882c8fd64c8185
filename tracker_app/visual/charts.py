"""Chart builders (Altair) for the dashboard."""

from __future__ import annotations

import altair as alt
import pandas as pd

PALETTE = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8", "#82CA9D"]
CHART_HEIGHT = 300


def project_status_bar(project_counts: pd.DataFrame):
    """Grouped pending/closed bars per project."""
    if project_counts.empty:
        return None
    long = project_counts.melt(
        id_vars=["name"],
        value_vars=["pending", "closed"],
        var_name="state",
        value_name="count",
    )
    return (
        alt.Chart(long)
        .mark_bar()
        .encode(
            x=alt.X("name:N", title="Project"),
            xOffset=alt.XOffset("state:N"),
            y=alt.Y("count:Q", title="Issues"),
            color=alt.Color("state:N", title="", scale=alt.Scale(range=PALETTE[:2])),
            tooltip=[
                alt.Tooltip("name:N", title="Project"),
                alt.Tooltip("state:N", title="State"),
                alt.Tooltip("count:Q", title="Issues"),
            ],
        )
        .properties(height=CHART_HEIGHT)
    )


def status_pie(status_counts: pd.DataFrame):
    if status_counts.empty or int(status_counts["value"].sum()) == 0:
        return None
    data = status_counts.assign(
        percent=status_counts["value"] / status_counts["value"].sum(),
    )
    return (
        alt.Chart(data)
        .mark_arc(outerRadius=110)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color(
                "name:N",
                title="Status",
                sort=list(status_counts["name"]),
                scale=alt.Scale(range=PALETTE),
            ),
            tooltip=[
                alt.Tooltip("name:N", title="Status"),
                alt.Tooltip("value:Q", title="Issues"),
                alt.Tooltip("percent:Q", title="Share", format=".0%"),
            ],
        )
        .properties(height=CHART_HEIGHT)
    )


def issues_by_project_bar(issues_by_project: pd.DataFrame):
    if issues_by_project.empty:
        return None
    return (
        alt.Chart(issues_by_project)
        .mark_bar(color=PALETTE[0])
        .encode(
            x=alt.X("name:N", title="Project", sort=None),
            y=alt.Y("issues:Q", title="Issues"),
            tooltip=[alt.Tooltip("name:N", title="Project"), alt.Tooltip("issues:Q", title="Issues")],
        )
        .properties(height=CHART_HEIGHT)
    )


def issue_trend_line(trend: pd.DataFrame):
    """Issues per day; one point per day that has issues."""
    if trend.empty:
        return None
    base = alt.Chart(trend).encode(
        x=alt.X("date:T", title="Date"),
        y=alt.Y("count:Q", title="Issues"),
    )
    line = base.mark_line(color=PALETTE[0])
    points = base.mark_circle(color=PALETTE[0], size=60).encode(
        tooltip=[alt.Tooltip("date:T", title="Date"), alt.Tooltip("count:Q", title="Issues")]
    )
    return (line + points).properties(height=CHART_HEIGHT)
