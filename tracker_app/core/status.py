"""Status and priority normalization utilities.

Status and priority values are stored exactly as written by the user; every
comparison goes through these helpers so that ``"Open"``, ``"open"`` and
``" OPEN "`` are treated alike, and ``"in-progress"`` matches
``"In Progress"``.
"""

from __future__ import annotations

from .config import STATUS_ALIASES, STATUS_CLOSED


def normalize_status(value: str | None) -> str:
    """Map a raw status to its canonical display name.

    Unknown statuses are returned stripped, with their original casing, so
    they still show up (as themselves) in breakdowns.

    Examples
    --------
    >>> normalize_status("in-progress")
    'In Progress'
    >>> normalize_status("CLOSED")
    'Closed'
    """
    if not value:
        return ""
    text = str(value).strip()
    return STATUS_ALIASES.get(text.lower(), text)


def status_key(value: str | None) -> str:
    """Lowercase comparison key for a status."""
    return normalize_status(value).lower()


def is_closed(value: str | None) -> bool:
    return status_key(value) == STATUS_CLOSED.lower()


def priority_key(value: str | None) -> str:
    if not value:
        return ""
    return str(value).strip().lower()

