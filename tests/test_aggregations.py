import pandas as pd

from tracker_app.analytics.aggregations import (
    daily_trend,
    issues_by_project,
    project_counts,
    rollup_totals,
    status_counts,
    team_lead_breakdown,
    team_lead_rollup,
)
from tracker_app.core.mappers import issues_to_dataframe
from tracker_app.core.models import IssueModel


def _sample_df():
    rows = [
        (1, "Trade", "open", "2024-03-01"),
        (2, "Trade", "Closed", "2024-03-01"),
        (3, "Water", "in-progress", "2024-03-02"),
        (4, "Water", "closed", "2024-03-04"),
        (5, "Panvel Tax", "Open", "2024-03-02"),
        (6, "Outside", "closed", "bad"),
    ]
    return issues_to_dataframe(
        [IssueModel(id=i, project=p, status=s, date=d) for i, p, s, d in rows]
    )


def test_project_counts_totals_add_up():
    out = project_counts(_sample_df())
    assert out["name"].tolist() == ["Trade", "Water", "Panvel Tax", "Outside"]
    assert (out["total"] == out["pending"] + out["closed"]).all()
    trade = out.set_index("name").loc["Trade"]
    assert (trade["total"], trade["pending"], trade["closed"]) == (2, 1, 1)


def test_issues_by_project():
    out = issues_by_project(_sample_df())
    assert dict(zip(out["name"], out["issues"], strict=True)) == {
        "Trade": 2,
        "Water": 2,
        "Panvel Tax": 1,
        "Outside": 1,
    }


def test_status_counts_canonical_order_zero_filled():
    out = status_counts(_sample_df())
    assert out["name"].tolist() == ["Open", "In Progress", "Closed"]
    assert out["value"].tolist() == [2, 1, 3]
    empty = status_counts(pd.DataFrame())
    assert empty["value"].tolist() == [0, 0, 0]


def test_team_lead_breakdown_covers_configured_projects():
    out = team_lead_breakdown(_sample_df())
    assert out["project"].tolist() == ["Panvel Tax", "Trade", "Water", "Baramati Tax"]
    baramati = out.set_index("project").loc["Baramati Tax"]
    assert (baramati["pending"], baramati["closed"], baramati["total"]) == (0, 0, 0)


def test_team_lead_rollup_sums_lead_projects():
    rollup = team_lead_rollup(_sample_df())
    lead = rollup.set_index("team_lead").loc["Abhilash Mahamuni"]
    assert lead["projects"] == ["Trade", "Water"]
    assert (lead["pending"], lead["closed"], lead["total"]) == (2, 2, 4)
    # "Outside" is not owned by any lead and stays out of the totals
    assert rollup_totals(rollup) == {"pending": 3, "closed": 2, "total": 5}


def test_custom_assignments():
    rollup = team_lead_rollup(_sample_df(), {"Someone": ("Outside",)})
    assert rollup_totals(rollup) == {"pending": 0, "closed": 1, "total": 1}


def test_daily_trend_ascending_and_skips_bad_dates():
    trend = daily_trend(_sample_df())
    assert [d.strftime("%Y-%m-%d") for d in trend["date"]] == ["2024-03-01", "2024-03-02", "2024-03-04"]
    assert trend["count"].tolist() == [2, 2, 1]
    assert daily_trend(pd.DataFrame()).empty


def test_trade_water_scenario():
    df = issues_to_dataframe(
        [
            IssueModel(id=1, status="Open", project="Trade"),
            IssueModel(id=2, status="Closed", project="Trade"),
            IssueModel(id=3, status="Open", project="Water"),
        ]
    )
    counts = {row.name: (row.total, row.pending, row.closed) for row in project_counts(df).itertuples()}
    assert counts == {"Trade": (2, 1, 1), "Water": (1, 1, 0)}
