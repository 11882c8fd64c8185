"""Domain data models for issues, comments, and users.

Records are frozen dataclasses: a field change produces a new record through
:func:`patch_record`, so readers never observe a half-updated value. Attribute
names are snake_case; the persisted/JSON form uses the camelCase keys of the
wire format (``teamLead``, ``resolutionDate``, ...).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from typing import Any, ClassVar, TypeVar

import pytz

from .config import TIMEZONE
from .errors import UnknownFieldError

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_wire_name(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_field_name(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def today_iso() -> str:
    """Today's date (configured timezone) as ``YYYY-MM-DD``."""
    return datetime.now(pytz.timezone(TIMEZONE)).date().isoformat()


def now_iso() -> str:
    return datetime.now(pytz.UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


@dataclass(slots=True, frozen=True)
class CommentModel:
    id: int
    author: str
    content: str
    created_at: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CommentModel:
        return cls(
            id=int(data["id"]),
            author=_as_text(data.get("author")),
            content=_as_text(data.get("content")),
            created_at=_as_text(data.get("createdAt", data.get("created_at"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author,
            "content": self.content,
            "createdAt": self.created_at,
        }


@dataclass(slots=True, frozen=True)
class IssueModel:
    KIND: ClassVar[str] = "Issue"
    LIST_FIELDS: ClassVar[frozenset[str]] = frozenset({"attachments", "comments"})
    DATE_FIELDS: ClassVar[frozenset[str]] = frozenset({"date", "resolution_date"})

    id: int = 0
    description: str = ""
    status: str = ""
    priority: str = ""
    category: str = ""
    team_lead: str = ""
    assigned_to: str = ""
    reported_by: str = ""
    project: str = ""
    date: str = field(default_factory=today_iso)
    resolution_date: str = ""
    dev_note: str = ""
    example: str = ""
    attachments: tuple[str, ...] = ()
    comments: tuple[CommentModel, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IssueModel:
        values = _known_values(cls, data)
        values["attachments"] = tuple(_as_text(a) for a in values.get("attachments") or ())
        values["comments"] = tuple(_as_comment(c) for c in values.get("comments") or ())
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        out = _wire_dict(self)
        out["attachments"] = list(self.attachments)
        out["comments"] = [c.to_dict() for c in self.comments]
        return out


@dataclass(slots=True, frozen=True)
class UserModel:
    KIND: ClassVar[str] = "User"
    LIST_FIELDS: ClassVar[frozenset[str]] = frozenset()
    DATE_FIELDS: ClassVar[frozenset[str]] = frozenset()

    id: int = 0
    name: str = ""
    email: str = ""
    role: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UserModel:
        return cls(**_known_values(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return _wire_dict(self)


Record = IssueModel | UserModel
RecordT = TypeVar("RecordT", IssueModel, UserModel)


def _as_comment(value: Any) -> CommentModel:
    if isinstance(value, CommentModel):
        return value
    return CommentModel.from_dict(value)


def _known_values(cls: type, data: Mapping[str, Any]) -> dict[str, Any]:
    """Pick declared fields out of a wire (camelCase) or snake_case mapping."""
    values: dict[str, Any] = {}
    for f in fields(cls):
        wire = to_wire_name(f.name)
        if wire in data:
            raw = data[wire]
        elif f.name in data:
            raw = data[f.name]
        else:
            continue
        if f.name == "id":
            values["id"] = int(raw)
        elif f.name in cls.LIST_FIELDS:
            values[f.name] = raw
        else:
            values[f.name] = _as_text(raw)
    return values


def _wire_dict(record: Any) -> dict[str, Any]:
    return {to_wire_name(f.name): getattr(record, f.name) for f in fields(record)}


def field_names(cls: type) -> list[str]:
    return [f.name for f in fields(cls)]


def resolve_field(cls: type, name: str) -> str:
    """Map a wire or attribute field name onto the declared attribute name.

    Raises
    ------
    UnknownFieldError
        If ``name`` is not a declared field of ``cls``.
    """
    declared = field_names(cls)
    candidate = name if name in declared else to_field_name(name)
    if candidate not in declared:
        raise UnknownFieldError(f"{cls.KIND} has no field {name!r}")
    return candidate


def patch_record(record: RecordT, field_name: str, value: Any) -> RecordT:
    """Return a copy of ``record`` with one field replaced.

    The value is coerced to the field's declared shape: list fields become
    tuples (comments from dicts), date fields accept ``date`` objects, every
    other field is stored as text. ``id`` cannot be patched.
    """
    cls = type(record)
    name = resolve_field(cls, field_name)
    if name == "id":
        raise UnknownFieldError(f"{cls.KIND} id is immutable")
    if name == "comments":
        coerced: Any = tuple(_as_comment(c) for c in value or ())
    elif name in cls.LIST_FIELDS:
        coerced = tuple(_as_text(v) for v in value or ())
    else:
        coerced = _as_text(value)
    return replace(record, **{name: coerced})
