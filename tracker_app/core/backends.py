"""Backing stores: local JSON snapshot and remote REST collection.

Both adapters speak plain wire dictionaries (camelCase keys) and expose the
same contract, so the record store never knows which one is active. Failures
are raised as :mod:`tracker_app.core.errors` exceptions; nothing is retried
here.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from collections.abc import Hashable
from pathlib import Path
from typing import Any, Protocol

import requests

from .config import BACKEND_REMOTE, StorageSettings
from .errors import FetchError, NotFoundError, ParseError

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class BackingStore(Protocol):
    key: str

    def load(self) -> list[Row]: ...

    def save(self, rows: list[Row]) -> None: ...

    def create(self, row: Row) -> Row: ...

    def update(self, row: Row) -> Row: ...

    def delete(self, record_id: int) -> None: ...

    def add_comment(self, issue_id: int, comment: Row) -> Row: ...

    def version(self) -> Hashable: ...


def _same_id(row: Row, record_id: Any) -> bool:
    """Id equality tolerant of ids persisted as numeric strings."""
    try:
        return int(row.get("id")) == int(record_id)
    except (TypeError, ValueError):
        return False


def _max_id(rows: list[Row]) -> int:
    ids = []
    for row in rows:
        try:
            ids.append(int(row.get("id")))
        except (TypeError, ValueError):
            continue
    return max(ids, default=0)


def _fingerprint(rows: list[Row]) -> str:
    payload = json.dumps(rows, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode()).hexdigest()


class LocalSnapshotStore:
    """Whole collection kept as one JSON array in ``<data_dir>/<key>.json``.

    Every operation reads and writes the snapshot wholesale; writes go through
    a temporary file and ``os.replace`` so a reader never sees a torn file.
    """

    def __init__(self, data_dir: str | Path, key: str):
        self.key = key
        self.path = Path(data_dir) / f"{key}.json"

    def load(self) -> list[Row]:
        if not self.path.exists():
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FetchError(f"Failed to read {self.path}: {exc}") from exc
        if not text.strip():
            return []
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Malformed snapshot {self.path}: {exc}") from exc
        if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
            raise ParseError(f"Malformed snapshot {self.path}: expected a list of records")
        return data

    def save(self, rows: list[Row]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(rows, fh, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise FetchError(f"Failed to write {self.path}: {exc}") from exc
        logger.debug("Saved %d %s to %s", len(rows), self.key, self.path)

    def create(self, row: Row) -> Row:
        rows = self.load()
        if any(_same_id(existing, row["id"]) for existing in rows):
            # Another writer took this id since the caller last loaded
            fresh = _max_id(rows) + 1
            logger.warning("%s id %s already taken; stored as %s", self.key, row["id"], fresh)
            row = {**row, "id": fresh}
        rows.append(row)
        self.save(rows)
        return row

    def update(self, row: Row) -> Row:
        rows = self.load()
        for idx, existing in enumerate(rows):
            if _same_id(existing, row["id"]):
                rows[idx] = row
                self.save(rows)
                return row
        raise NotFoundError(self.key, row["id"])

    def delete(self, record_id: int) -> None:
        rows = self.load()
        kept = [row for row in rows if not _same_id(row, record_id)]
        if len(kept) != len(rows):
            self.save(kept)

    def add_comment(self, issue_id: int, comment: Row) -> Row:
        rows = self.load()
        for row in rows:
            if _same_id(row, issue_id):
                row["comments"] = [*(row.get("comments") or []), comment]
                self.save(rows)
                return comment
        raise NotFoundError(self.key, issue_id)

    def version(self) -> Hashable:
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size)


class RemoteStore:
    """REST collection at ``<base_url>/<resource>`` (one entity per call)."""

    def __init__(
        self,
        base_url: str,
        resource: str,
        *,
        token: str | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.key = resource
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    @property
    def collection_url(self) -> str:
        return f"{self.base_url}/{self.key}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise FetchError(f"{method} {url} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise FetchError(
                f"{method} {url} failed {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def _json(resp: requests.Response, fallback: Any = None) -> Any:
        if resp.status_code == 204 or not resp.content:
            return fallback
        try:
            return resp.json()
        except ValueError as exc:
            raise ParseError(f"Malformed JSON from {resp.url}: {exc}") from exc

    def load(self) -> list[Row]:
        data = self._json(self._request("GET", self.collection_url), fallback=[])
        if not isinstance(data, list):
            raise ParseError(f"Expected a list from {self.collection_url}, got {type(data).__name__}")
        return data

    def get(self, record_id: int) -> Row:
        try:
            resp = self._request("GET", f"{self.collection_url}/{record_id}")
        except FetchError as exc:
            if exc.status_code == 404:
                raise NotFoundError(self.key, record_id) from exc
            raise
        return self._json(resp)

    def create(self, row: Row) -> Row:
        resp = self._request("POST", self.collection_url, json=row)
        created = self._json(resp)
        # Server-assigned fields win over the client draft
        return {**row, **created} if isinstance(created, dict) else row

    def update(self, row: Row) -> Row:
        url = f"{self.collection_url}/{row['id']}"
        try:
            resp = self._request("PUT", url, json=row)
        except FetchError as exc:
            if exc.status_code == 404:
                raise NotFoundError(self.key, row["id"]) from exc
            raise
        stored = self._json(resp)
        return stored if isinstance(stored, dict) else row

    def delete(self, record_id: int) -> None:
        try:
            self._request("DELETE", f"{self.collection_url}/{record_id}")
        except FetchError as exc:
            if exc.status_code != 404:
                raise
            logger.warning("Delete of %s %s: already absent on server", self.key, record_id)

    def add_comment(self, issue_id: int, comment: Row) -> Row:
        url = f"{self.collection_url}/{issue_id}/comments"
        try:
            resp = self._request("POST", url, json=comment)
        except FetchError as exc:
            if exc.status_code == 404:
                raise NotFoundError(self.key, issue_id) from exc
            raise
        stored = self._json(resp)
        return {**comment, **stored} if isinstance(stored, dict) else comment

    def save(self, rows: list[Row]) -> None:
        """Make the server collection match ``rows`` (bulk replace)."""
        current = {int(row["id"]): row for row in self.load()}
        wanted_ids = {int(row["id"]) for row in rows}
        for record_id in current:
            if record_id not in wanted_ids:
                self.delete(record_id)
        for row in rows:
            existing = current.get(int(row["id"]))
            if existing is None:
                self.create(row)
            elif existing != row:
                self.update(row)

    def version(self) -> Hashable:
        return _fingerprint(self.load())


def build_backing_store(settings: StorageSettings, key: str) -> BackingStore:
    if settings.backend == BACKEND_REMOTE:
        return RemoteStore(settings.api_url, key, token=settings.api_token, timeout=settings.timeout)
    return LocalSnapshotStore(settings.data_dir, key)
