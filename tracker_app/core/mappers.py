"""Mapping record models into DataFrames for the filter/sort/aggregate pipeline."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, fields

import pandas as pd

from .models import IssueModel, UserModel


def _frame(records: Iterable, model: type) -> pd.DataFrame:
    columns = [f.name for f in fields(model)]
    rows = []
    for record in records:
        row = asdict(record)
        # asdict turns tuples into tuples of dicts; keep plain lists for display
        for name in model.LIST_FIELDS:
            row[name] = list(row[name])
        rows.append(row)
    df = pd.DataFrame(rows, columns=columns)
    if df.empty:
        return df
    df["id"] = df["id"].astype(int)
    return df


def issues_to_dataframe(issues: Iterable[IssueModel]) -> pd.DataFrame:
    """One row per issue in collection order, one column per issue field.

    ``comments`` holds a list of comment dicts (``id``, ``author``,
    ``content``, ``created_at``) and ``attachments`` a list of file names.
    """
    return _frame(issues, IssueModel)


def users_to_dataframe(users: Iterable[UserModel]) -> pd.DataFrame:
    return _frame(users, UserModel)
