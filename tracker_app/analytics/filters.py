"""DataFrame filters for the issue and user tables."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from typing import Any

import pandas as pd

from tracker_app.core.models import to_field_name
from tracker_app.core.status import priority_key, status_key

ALL = "all"

# Criteria fields that must equal the record value exactly
EXACT_MATCH_FIELDS: tuple[str, ...] = (
    "category",
    "team_lead",
    "project",
    "assigned_to",
    "reported_by",
)


@dataclass(slots=True)
class FilterCriteria:
    """Per-field constraints; ``"all"`` (or empty) leaves a field unconstrained."""

    search: str = ""
    status: str = ALL
    priority: str = ALL
    category: str = ALL
    team_lead: str = ALL
    project: str = ALL
    assigned_to: str = ALL
    reported_by: str = ALL
    from_date: str = ""
    to_date: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FilterCriteria:
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = key if key in known else to_field_name(key)
            if name in known:
                values[name] = "" if value is None else str(value)
        return cls(**values)

    def is_unconstrained(self) -> bool:
        if self.search and self.search.strip():
            return False
        return not any(is_active(getattr(self, f.name)) for f in fields(self) if f.name != "search")


def is_active(value: Any) -> bool:
    if value is None:
        return False
    text = str(value).strip()
    return bool(text) and text.lower() != ALL


def parse_dates(values: pd.Series) -> pd.Series:
    """Calendar dates (time of day dropped); unparseable values become NaT."""
    text = values.fillna("").astype(str).str.strip().str.slice(0, 10)
    return pd.to_datetime(text, format="%Y-%m-%d", errors="coerce")


def _parse_bound(value: str) -> pd.Timestamp | None:
    if not is_active(value):
        return None
    ts = pd.to_datetime(str(value).strip()[:10], format="%Y-%m-%d", errors="coerce")
    return None if pd.isna(ts) else ts


def filter_issues(df: pd.DataFrame, criteria: FilterCriteria | None = None) -> pd.DataFrame:
    """Rows satisfying every active constraint, in their original order.

    Parameters
    ----------
    df : pd.DataFrame
        Issue frame as produced by ``issues_to_dataframe``.
    criteria : FilterCriteria or None
        ``None`` or an unconstrained criteria returns every row.

    Returns
    -------
    pd.DataFrame
        Filtered copy. Rows whose ``date`` cannot be parsed are excluded as
        soon as a date bound is active.
    """
    if df.empty or criteria is None or criteria.is_unconstrained():
        return df.copy()
    mask = pd.Series(True, index=df.index)

    if criteria.search and criteria.search.strip():
        needle = criteria.search.strip().lower()
        haystack = df["description"].fillna("").astype(str).str.lower()
        mask &= haystack.str.contains(needle, regex=False)
    if is_active(criteria.status):
        mask &= df["status"].map(status_key) == status_key(criteria.status)
    if is_active(criteria.priority):
        mask &= df["priority"].map(priority_key) == priority_key(criteria.priority)
    for name in EXACT_MATCH_FIELDS:
        value = getattr(criteria, name)
        if is_active(value):
            mask &= df[name].fillna("").astype(str) == str(value)

    lower = _parse_bound(criteria.from_date)
    upper = _parse_bound(criteria.to_date)
    if lower is not None or upper is not None:
        dates = parse_dates(df["date"])
        if lower is not None:
            mask &= dates >= lower
        if upper is not None:
            mask &= dates <= upper
    return df[mask].copy()


def filter_users(df: pd.DataFrame, search: str = "") -> pd.DataFrame:
    """Case-insensitive substring search over user name, email and role."""
    if df.empty or not search or not search.strip():
        return df.copy()
    needle = search.strip().lower()
    mask = pd.Series(False, index=df.index)
    for col in ("name", "email", "role"):
        mask |= df[col].fillna("").astype(str).str.lower().str.contains(needle, regex=False)
    return df[mask].copy()


def option_values(df: pd.DataFrame, column: str, defaults: Iterable[str] = ()) -> list[str]:
    """Select-box choices: configured defaults first, then values seen in data."""
    options = [str(v) for v in defaults]
    if not df.empty and column in df.columns:
        for value in df[column].dropna().astype(str):
            if value and value not in options:
                options.append(value)
    return options
