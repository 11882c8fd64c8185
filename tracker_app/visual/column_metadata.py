"""Central column metadata and helpers for table rendering."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import streamlit as st

# Mapping of raw column keys to (label, help text, format key)
# format key: "int" -> integer, "date" -> calendar date, "list" -> list column, None -> text column
COLUMN_METADATA: dict[str, tuple[str, str, str | None]] = {
    # Issue fields
    "id": ("ID", "Issue number, assigned on creation and never reused.", "int"),
    "date": ("Date", "Date the issue was reported.", None),
    "project": ("Project", "Project the issue belongs to.", None),
    "team_lead": ("Lead", "Team lead responsible for the project.", None),
    "status": ("Status", "Current workflow status.", None),
    "description": ("Description", "What went wrong or what is requested.", None),
    "example": ("Example", "Example reference (record, receipt, URL) reproducing the issue.", None),
    "reported_by": ("Reported By", "Person who reported the issue.", None),
    "priority": ("Priority", "Priority assigned to the issue.", None),
    "assigned_to": ("Assigned To", "Developer currently working on the issue.", None),
    "category": ("Category", "Bug, task or enhancement.", None),
    "resolution_date": ("Resolution Date", "Date the issue was resolved, if any.", None),
    "dev_note": ("Notes", "Developer notes.", None),
    "attachments": ("Attachments", "Names of files attached to the issue.", "list"),
    "comment_count": ("Comments", "Number of comments on the issue.", "int"),
    # User fields
    "name": ("Name", "User login name.", None),
    "email": ("Email", "Contact email address.", None),
    "role": ("Role", "Access role.", None),
    # Dashboard tables
    "pending": ("Pending", "Issues not yet closed.", "int"),
    "closed": ("Closed", "Issues with status closed.", "int"),
    "total": ("Total", "All issues.", "int"),
}


def apply_column_metadata(
    columns: Iterable[str],
    existing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a column_config dictionary with human labels and hover help."""

    config: dict[str, Any] = dict(existing or {})
    for col in columns:
        if col in config:
            continue
        meta = COLUMN_METADATA.get(col)
        if not meta:
            continue
        label, help_text, fmt = meta
        if fmt == "int":
            config[col] = st.column_config.NumberColumn(label, help=help_text, format="%d")
        elif fmt == "list":
            config[col] = st.column_config.ListColumn(label, help=help_text)
        else:
            config[col] = st.column_config.Column(label, help=help_text)
    return config
