"""Load and expose table column sets from YAML (with fallbacks)."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from .config import DISPLAY_ORDER_ISSUES, DISPLAY_ORDER_USERS, ISSUE_FIELDS
from .models import to_field_name

logger = logging.getLogger(__name__)

_CACHE: dict[str, list[str]] | None = None


def _fallback() -> dict[str, list[str]]:
    return {
        "issues": [to_field_name(c) for c in DISPLAY_ORDER_ISSUES],
        "export": [to_field_name(c) for c in ISSUE_FIELDS],
        "users": list(DISPLAY_ORDER_USERS),
    }


def load_column_sets(base_path: str | Path | None = None, *, refresh: bool = False) -> dict[str, list[str]]:
    global _CACHE
    if _CACHE is not None and not refresh:
        return _CACHE
    base = Path(base_path or Path(__file__).resolve().parent.parent)
    yaml_path = base / "columns.yaml"
    sets = _fallback()
    if yaml_path.exists():
        try:
            data = yaml.safe_load(yaml_path.read_text()) or {}
        except yaml.YAMLError as exc:
            logger.warning("Ignoring unreadable %s: %s", yaml_path, exc)
            data = {}
        for name, columns in (data.get("sets") or {}).items():
            if columns:
                # YAML may use wire names (teamLead); tables use attribute names
                sets[name] = [to_field_name(str(c)) for c in columns]
    _CACHE = sets
    return _CACHE


def get_columns(set_name: str) -> list[str]:
    sets = load_column_sets()
    return sets.get(set_name, [])
