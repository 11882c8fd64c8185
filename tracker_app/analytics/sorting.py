"""Table sorting with an explicit stability contract.

Rows with equal sort keys always keep their relative input order, in both
directions, so sorting an already sorted frame again with the same key and
direction leaves it unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from tracker_app.analytics.filters import parse_dates
from tracker_app.core.models import to_field_name
from tracker_app.core.status import normalize_status

ASC = "asc"
DESC = "desc"

DATE_COLUMNS = frozenset({"date", "resolution_date"})
LIST_COLUMNS = frozenset({"attachments", "comments"})


@dataclass(frozen=True, slots=True)
class SortState:
    key: str = "id"
    direction: str = ASC


def next_sort_state(state: SortState, key: str) -> SortState:
    """Header click: toggle direction on the same key, reset to ascending otherwise."""
    if state.key == key:
        return SortState(key, DESC if state.direction == ASC else ASC)
    return SortState(key, ASC)


def _sort_key(column: str, values: pd.Series) -> pd.Series:
    if column in DATE_COLUMNS:
        return parse_dates(values)
    if column in LIST_COLUMNS:
        return values.apply(lambda v: len(v) if isinstance(v, (list, tuple)) else 0)
    if column == "status":
        return values.map(lambda v: normalize_status(v).casefold())
    if pd.api.types.is_numeric_dtype(values):
        return values
    return values.fillna("").astype(str).str.casefold()


def sort_records(df: pd.DataFrame, key: str, direction: str = ASC) -> pd.DataFrame:
    """Return ``df`` ordered by ``key``.

    Text compares case-insensitively, date columns as calendar dates
    (unparseable dates last), list columns by their length.

    Raises
    ------
    KeyError
        If ``key`` is not a column of ``df``.
    ValueError
        If ``direction`` is neither ``"asc"`` nor ``"desc"``.
    """
    column = key if key in df.columns else to_field_name(key)
    if column not in df.columns:
        raise KeyError(f"Cannot sort by unknown field {key!r}")
    if direction not in (ASC, DESC):
        raise ValueError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")
    if df.empty:
        return df.copy()
    return df.sort_values(
        by=column,
        ascending=direction == ASC,
        kind="stable",
        na_position="last",
        key=lambda values: _sort_key(column, values),
    )
