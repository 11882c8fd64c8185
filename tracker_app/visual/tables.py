"""Reusable table helpers for Streamlit rendering."""

from __future__ import annotations

import pandas as pd

from tracker_app.core.column_config import get_columns
from tracker_app.core.config import PRIORITY_BADGES, STATUS_BADGES
from tracker_app.core.status import normalize_status, priority_key
from tracker_app.visual.column_metadata import apply_column_metadata


def status_badge(value: str | None) -> str:
    text = str(value or "")
    marker = STATUS_BADGES.get(normalize_status(text).lower())
    return f"{marker} {text}" if marker and text else text


def priority_badge(value: str | None) -> str:
    text = str(value or "")
    marker = PRIORITY_BADGES.get(priority_key(text))
    return f"{marker} {text}" if marker and text else text


def prepare_issue_table(
    df: pd.DataFrame,
    *,
    extra_columns: list[str] | None = None,
) -> tuple[pd.DataFrame, list[str], dict[str, object]]:
    """Display copy of an issue frame plus its column list and column_config.

    Row order is preserved; status and priority gain a badge marker.
    """
    if df.empty:
        return df, [], {}
    table = df.copy()
    table["status"] = table["status"].map(status_badge)
    table["priority"] = table["priority"].map(priority_badge)
    if "comments" in table.columns:
        table["comment_count"] = table["comments"].apply(lambda c: len(c) if isinstance(c, list) else 0)

    display_cols = [col for col in get_columns("issues") if col in table.columns]
    for col in extra_columns or []:
        if col in table.columns and col not in display_cols:
            display_cols.append(col)
    if not display_cols:
        display_cols = [col for col in table.columns if col != "comments"]
    return table, display_cols, apply_column_metadata(display_cols)


def prepare_user_table(df: pd.DataFrame) -> tuple[pd.DataFrame, list[str], dict[str, object]]:
    if df.empty:
        return df, [], {}
    display_cols = [col for col in get_columns("users") if col in df.columns]
    return df.copy(), display_cols, apply_column_metadata(display_cols)


def sort_indicator(column: str, key: str, direction: str) -> str:
    """Header label suffix marking the active sort column."""
    if column != key:
        return ""
    return " ▲" if direction == "asc" else " ▼"
