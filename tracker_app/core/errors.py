"""Error kinds raised by the record store and its backing stores."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every record store failure shown to the user."""


class FetchError(StoreError):
    """Load/save failure: transport error, timeout, or non-2xx response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(StoreError, KeyError):
    """Mutation targeting a record id that is not in the collection."""

    def __init__(self, kind: str, record_id: int):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class ParseError(StoreError, ValueError):
    """Persisted snapshot exists but cannot be decoded."""


class UnknownFieldError(StoreError, ValueError):
    """Field patch naming a field the record type does not declare."""
