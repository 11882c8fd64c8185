"""Record stores: the in-memory collection mirrored to a backing store.

A store owns its records, applies every mutation as a whole-record
replacement, persists it through the backing store first and only then
updates the in-memory collection, and finally broadcasts a change to its
subscribers. A store that sees the backing store's version move under it
reloads before writing, so new ids are allocated against everything already
persisted. Failures from the backing store propagate unchanged; the store
never retries.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import replace
from typing import Any, Generic

from .backends import BackingStore
from .config import DEFAULT_COMMENT_AUTHOR, DEFAULT_USERS
from .errors import NotFoundError, ParseError, StoreError
from .events import ChangeFeed
from .models import CommentModel, IssueModel, RecordT, UserModel, now_iso, patch_record

logger = logging.getLogger(__name__)

AuthorProvider = Callable[[], str | None]

# Version marker that never matches the backing store, forcing the next sync to reload
_STALE = object()


class RecordStore(Generic[RecordT]):
    def __init__(self, backend: BackingStore, model: type[RecordT]):
        self.backend = backend
        self.model = model
        self._records: list[RecordT] = []
        # Highest id ever issued or seen; ids are never handed out twice
        self._high_water = 0
        self._version: Hashable = None
        self._feed = ChangeFeed()
        self.loaded = False

    # ------------------ Read Access ------------------
    @property
    def records(self) -> tuple[RecordT, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, record_id: int) -> RecordT:
        return self._records[self._index(record_id)]

    def find(self, record_id: int) -> RecordT | None:
        try:
            return self.get(record_id)
        except NotFoundError:
            return None

    def next_id(self) -> int:
        return max(max((r.id for r in self._records), default=0), self._high_water, 0) + 1

    # ------------------ Change Feed ------------------
    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register ``listener``; returns the matching unsubscribe callable."""
        return self._feed.subscribe(listener)

    def _changed(self) -> None:
        self._feed.publish()

    # ------------------ Loading ------------------
    def load(self) -> list[RecordT]:
        rows = self.backend.load()
        try:
            records = [self.model.from_dict(row) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"Malformed {self.model.KIND.lower()} record in {self.backend.key}: {exc}") from exc
        self._records = records
        self._high_water = max(self._high_water, max((r.id for r in records), default=0))
        self._version = self.backend.version()
        self.loaded = True
        logger.debug("Loaded %d %s records", len(records), self.model.KIND.lower())
        self._changed()
        return list(records)

    def sync(self) -> bool:
        """Reload if the backing store changed underneath us.

        Returns True when a reload (and therefore a broadcast) happened.
        """
        if self.loaded and self.backend.version() == self._version:
            return False
        self.load()
        return True

    # ------------------ Mutations ------------------
    def create(self, draft: RecordT | Mapping[str, Any]) -> RecordT:
        if isinstance(draft, Mapping):
            draft = self.model.from_dict({k: v for k, v in draft.items() if k != "id"})
        self._catch_up()
        record = replace(draft, id=self.next_id())
        stored = self.model.from_dict(self.backend.create(record.to_dict()))
        self._high_water = max(self._high_water, record.id, stored.id)
        self._records.append(stored)
        self._after_write()
        logger.debug("Created %s %s", self.model.KIND.lower(), stored.id)
        return stored

    def update(self, record_id: int, field: str, value: Any) -> RecordT:
        self._catch_up()
        idx = self._index(record_id)
        patched = patch_record(self._records[idx], field, value)
        return self._store_at(idx, patched)

    def delete(self, record_id: int) -> None:
        self._catch_up()
        try:
            idx = self._index(record_id)
        except NotFoundError:
            logger.debug("Delete of absent %s %s ignored", self.model.KIND.lower(), record_id)
            return
        self.backend.delete(record_id)
        del self._records[idx]
        self._after_write()

    def replace_all(self, records: Iterable[RecordT | Mapping[str, Any]]) -> None:
        items = [r if isinstance(r, self.model) else self.model.from_dict(r) for r in records]
        ids = [r.id for r in items]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate {self.model.KIND.lower()} ids in bulk replace")
        self.backend.save([r.to_dict() for r in items])
        self._records = items
        self._high_water = max(self._high_water, max(ids, default=0))
        self._after_write()

    # ------------------ Internal Helpers ------------------
    def _index(self, record_id: int) -> int:
        for idx, record in enumerate(self._records):
            if record.id == record_id:
                return idx
        raise NotFoundError(self.model.KIND, record_id)

    def _store_at(self, idx: int, record: RecordT) -> RecordT:
        stored = self.model.from_dict(self.backend.update(record.to_dict()))
        self._records[idx] = stored
        self._after_write()
        return stored

    def _catch_up(self) -> None:
        """Reload before a write when another writer changed the backing store.

        Ids are allocated from the in-memory collection, so it must include
        every record already persisted.
        """
        if self.loaded and self.backend.version() != self._version:
            logger.info("%s store changed elsewhere; reloading before write", self.model.KIND)
            self.load()

    def _after_write(self) -> None:
        # The write already landed; an unreadable version only forces the next sync to reload
        try:
            self._version = self.backend.version()
        except StoreError as exc:
            logger.warning("Could not read %s version after write: %s", self.backend.key, exc)
            self._version = _STALE
        self._changed()


class IssueStore(RecordStore[IssueModel]):
    def __init__(self, backend: BackingStore, author: AuthorProvider | None = None):
        super().__init__(backend, IssueModel)
        self.author = author

    def add_comment(self, issue_id: int, content: str, author: str | None = None) -> CommentModel:
        """Append a comment with the next sequential id to an issue."""
        if not content or not content.strip():
            raise ValueError("Comment content must not be empty")
        self._catch_up()
        idx = self._index(issue_id)
        issue = self._records[idx]
        author = author or (self.author() if self.author else None) or DEFAULT_COMMENT_AUTHOR
        comment = CommentModel(
            id=max((c.id for c in issue.comments), default=0) + 1,
            author=author,
            content=content,
            created_at=now_iso(),
        )
        stored = CommentModel.from_dict(self.backend.add_comment(issue_id, comment.to_dict()))
        self._records[idx] = replace(issue, comments=(*issue.comments, stored))
        self._after_write()
        return stored

    def add_attachment(self, issue_id: int, filename: str) -> IssueModel:
        self._catch_up()
        issue = self.get(issue_id)
        return self.update(issue_id, "attachments", (*issue.attachments, filename))


class UserStore(RecordStore[UserModel]):
    def __init__(self, backend: BackingStore):
        super().__init__(backend, UserModel)

    def seed_defaults(self) -> bool:
        """Fill an empty collection with the built-in users."""
        if self._records:
            return False
        self.replace_all(DEFAULT_USERS)
        return True
