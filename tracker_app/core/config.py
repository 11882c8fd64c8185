"""Central configuration, constants, option lists, and storage settings."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

# =============================================================================
# General Settings
# =============================================================================
TIMEZONE = "Asia/Kolkata"
APP_TITLE = "Task Manager"

# =============================================================================
# Storage Settings
# =============================================================================
BACKEND_LOCAL = "local"
BACKEND_REMOTE = "remote"
BACKENDS: Sequence[str] = (BACKEND_LOCAL, BACKEND_REMOTE)

# Snapshot keys (local) and resource names (remote) for each collection
ISSUES_KEY = "issues"
USERS_KEY = "users"

DEFAULT_DATA_DIR = Path.home() / ".tracker_app"
DEFAULT_API_URL = "http://localhost:8000/api"
DEFAULT_REQUEST_TIMEOUT = 10.0  # seconds

# Interval between polling ticks on pages that watch the store for changes
POLL_INTERVAL_SECONDS: float = 5.0

# =============================================================================
# Workflow Status Configuration
# =============================================================================
STATUS_OPEN = "Open"
STATUS_IN_PROGRESS = "In Progress"
STATUS_CLOSED = "Closed"

# Canonical display order for status columns/charts
STATUS_DISPLAY_ORDER: Sequence[str] = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_CLOSED)

# Values written by the edit and create dialogs
STATUS_OPTIONS: Sequence[str] = ("open", "in-progress", "closed")

# Map various status strings to canonical display names
# Keys should be lowercase for case-insensitive matching
STATUS_ALIASES: dict[str, str] = {
    "open": STATUS_OPEN,
    "new": STATUS_OPEN,
    "in progress": STATUS_IN_PROGRESS,
    "in-progress": STATUS_IN_PROGRESS,
    "inprogress": STATUS_IN_PROGRESS,
    "in_progress": STATUS_IN_PROGRESS,
    "closed": STATUS_CLOSED,
}

# =============================================================================
# Priority Configuration
# =============================================================================
PRIORITY_OPTIONS: Sequence[str] = ("low", "medium", "high")

# Badge variants per priority/status (lowercase keys)
PRIORITY_BADGES: dict[str, str] = {"high": "🔴", "medium": "🟠", "low": "🟢"}
STATUS_BADGES: dict[str, str] = {"open": "🔵", "in progress": "🟡", "closed": "⚪"}

# =============================================================================
# Option Lists (dialog selects and filter choices)
# =============================================================================
PROJECT_OPTIONS: Sequence[str] = ("Panvel Tax", "Trade", "Water", "Baramati Tax")
TEAM_LEADS: Sequence[str] = ("Pravin Chavan", "Abhilash Mahamuni", "Shubham.P")
ASSIGNED_TO_OPTIONS: Sequence[str] = ("Pratiksha", "Shivani", "Shubham", "Pravin.C")
CATEGORY_OPTIONS: Sequence[str] = ("Bug", "Task", "Enhancement")
REPORTED_BY_OPTIONS: Sequence[str] = (
    "rohan.y",
    "mrunal.w",
    "tejas.r",
    "anurag.g",
    "rushikesh.p",
    "milind",
)

# Static team lead -> owned projects table used by the roll-up
TEAM_LEAD_PROJECTS: dict[str, tuple[str, ...]] = {
    "Pravin Chavan": ("Panvel Tax",),
    "Abhilash Mahamuni": ("Trade", "Water"),
    "Shubham.P": ("Baramati Tax",),
}

# Seed rows for an empty user collection
DEFAULT_USERS: Sequence[dict[str, Any]] = (
    {"id": 1, "name": "sahil.s", "email": "test@example.com", "role": "Admin"},
    {"id": 2, "name": "test.w", "email": "scipl@example.com", "role": "User"},
    {"id": 3, "name": "sahil.test", "email": "dummy@example.com", "role": "Manager"},
)

# =============================================================================
# Authentication (mock gate)
# =============================================================================
DEFAULT_COMMENT_AUTHOR = "Current User"
DEMO_CREDENTIALS: dict[str, str] = {"admin": "admin"}

# =============================================================================
# Table Columns
# =============================================================================
ISSUE_FIELDS: Sequence[str] = (
    "id",
    "description",
    "status",
    "priority",
    "category",
    "teamLead",
    "assignedTo",
    "reportedBy",
    "project",
    "date",
    "resolutionDate",
    "devNote",
    "example",
    "attachments",
    "comments",
)

DISPLAY_ORDER_ISSUES: Sequence[str] = (
    "id",
    "date",
    "project",
    "teamLead",
    "status",
    "description",
    "example",
    "reportedBy",
    "priority",
    "assignedTo",
    "category",
)

DISPLAY_ORDER_USERS: Sequence[str] = ("id", "name", "email", "role")


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000
    download_encoding: str = "utf-8"
    export_file_name: str = "issues.xlsx"


SETTINGS = AppSettings()


@dataclass(slots=True)
class StorageSettings:
    backend: str = BACKEND_LOCAL
    data_dir: Path = DEFAULT_DATA_DIR
    api_url: str = DEFAULT_API_URL
    api_token: str | None = None
    timeout: float = DEFAULT_REQUEST_TIMEOUT


def load_storage_settings(
    secrets: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> StorageSettings:
    """Resolve backing-store settings.

    Lookup order for every key is a ``[storage]`` secrets section, top-level
    secrets, the ``TRACKER_*`` environment variables, then the defaults above.

    Parameters
    ----------
    secrets : Mapping or None
        Typically ``st.secrets``.
    environ : Mapping or None
        Defaults to ``os.environ``.

    Returns
    -------
    StorageSettings
    """
    if secrets is None:
        secrets = {}
    environ = os.environ if environ is None else environ
    section = secrets.get("storage", {}) or {}

    def _lookup(name: str) -> Any:
        env_name = f"TRACKER_{name}"
        for source in (section, secrets):
            value = source.get(env_name) or source.get(name.lower())
            if value:
                return value
        return environ.get(env_name) or None

    backend = str(_lookup("BACKEND") or BACKEND_LOCAL).strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown storage backend {backend!r}; expected one of {', '.join(BACKENDS)}")
    data_dir = _lookup("DATA_DIR")
    timeout = _lookup("TIMEOUT")
    return StorageSettings(
        backend=backend,
        data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        api_url=str(_lookup("API_URL") or DEFAULT_API_URL).rstrip("/"),
        api_token=_lookup("API_TOKEN"),
        timeout=float(timeout) if timeout else DEFAULT_REQUEST_TIMEOUT,
    )
