"""Test configuration ensuring local package import when editable install not active.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import tracker_app` works.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tracker_app.core.errors import FetchError, NotFoundError  # noqa: E402


class MemoryBackend:
    """In-process backing store.

    ``fail`` makes every write raise FetchError, ``fail_version`` does the same
    for ``version()``.
    """

    def __init__(self, rows=None, key="issues"):
        self.key = key
        self.rows = [dict(r) for r in rows or []]
        self.fail = False
        self.fail_load = 0
        self.fail_version = False
        self.writes = 0

    def _write(self):
        if self.fail:
            raise FetchError("backend unavailable", status_code=503)
        self.writes += 1

    def load(self):
        if self.fail_load:
            self.fail_load -= 1
            raise FetchError("backend unavailable", status_code=503)
        return [dict(r) for r in self.rows]

    def save(self, rows):
        self._write()
        self.rows = [dict(r) for r in rows]

    def create(self, row):
        self._write()
        self.rows.append(dict(row))
        return row

    def update(self, row):
        self._write()
        for idx, existing in enumerate(self.rows):
            if existing["id"] == row["id"]:
                self.rows[idx] = dict(row)
                return row
        raise NotFoundError(self.key, row["id"])

    def delete(self, record_id):
        self._write()
        self.rows = [r for r in self.rows if r["id"] != record_id]

    def add_comment(self, issue_id, comment):
        self._write()
        for row in self.rows:
            if row["id"] == issue_id:
                row["comments"] = [*(row.get("comments") or []), comment]
                return comment
        raise NotFoundError(self.key, issue_id)

    def version(self):
        if self.fail_version:
            raise FetchError("backend unavailable", status_code=503)
        return self.writes


@pytest.fixture
def memory_backend():
    return MemoryBackend


def sample_issue_rows():
    return [
        {
            "id": 1,
            "description": "Login page crashes",
            "status": "open",
            "priority": "high",
            "category": "Bug",
            "teamLead": "Abhilash Mahamuni",
            "assignedTo": "Shivani",
            "reportedBy": "rohan.y",
            "project": "Trade",
            "date": "2024-03-01",
            "attachments": ["trace.log"],
            "comments": [],
        },
        {
            "id": 2,
            "description": "Add export button",
            "status": "closed",
            "priority": "low",
            "category": "Enhancement",
            "teamLead": "Abhilash Mahamuni",
            "assignedTo": "Pratiksha",
            "reportedBy": "milind",
            "project": "Water",
            "date": "2024-03-05",
            "resolutionDate": "2024-03-07",
        },
        {
            "id": 3,
            "description": "Tax receipt totals wrong",
            "status": "Open",
            "priority": "Medium",
            "category": "Bug",
            "teamLead": "Pravin Chavan",
            "assignedTo": "Shivani",
            "reportedBy": "tejas.r",
            "project": "Panvel Tax",
            "date": "2024-03-10",
        },
        {
            "id": 4,
            "description": "Water bill LOGIN timeout",
            "status": "in-progress",
            "priority": "High",
            "category": "Task",
            "teamLead": "Abhilash Mahamuni",
            "assignedTo": "Shubham",
            "reportedBy": "milind",
            "project": "Water",
            "date": "not a date",
            "attachments": ["a.png", "b.png"],
        },
    ]


@pytest.fixture
def issue_rows():
    return sample_issue_rows()
