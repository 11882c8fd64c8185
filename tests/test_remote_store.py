import json

import requests

from tracker_app.core.backends import RemoteStore
from tracker_app.core.store import IssueStore

BASE = "http://api.test/issues"


def _response(status_code, payload, url):
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = url
    resp.encoding = "utf-8"
    resp._content = b"" if payload is None else json.dumps(payload).encode()
    return resp


class FakeApi:
    """In-memory REST collection standing in for a ``requests.Session``.

    The server picks its own ids (``id_offset`` above the highest it holds),
    stamps ``reportedBy`` on created issues and ``createdAt`` on comments.
    """

    def __init__(self, rows=(), id_offset=100):
        self.headers = {}
        self.rows = [dict(r) for r in rows]
        self.id_offset = id_offset
        self.calls = []

    def _position(self, record_id):
        for idx, row in enumerate(self.rows):
            if int(row["id"]) == record_id:
                return idx
        return None

    def request(self, method, url, timeout=None, **kwargs):
        body = kwargs.get("json")
        self.calls.append((method, url, body))
        parts = [p for p in url[len(BASE):].split("/") if p]
        if not parts:
            if method == "GET":
                return _response(200, self.rows, url)
            new_id = max((int(r["id"]) for r in self.rows), default=0) + self.id_offset
            created = {**body, "id": new_id, "reportedBy": "api"}
            self.rows.append(created)
            return _response(201, created, url)
        idx = self._position(int(parts[0]))
        if idx is None:
            return _response(404, None, url)
        if parts[1:] == ["comments"]:
            comment = {**body, "createdAt": "2024-03-01T09:00:00"}
            self.rows[idx]["comments"] = [*(self.rows[idx].get("comments") or []), comment]
            return _response(201, comment, url)
        if method == "PUT":
            self.rows[idx] = dict(body)
            return _response(200, self.rows[idx], url)
        if method == "DELETE":
            del self.rows[idx]
            return _response(204, None, url)
        return _response(200, self.rows[idx], url)


def _store(api):
    store = IssueStore(RemoteStore("http://api.test/", "issues", timeout=1.0, session=api))
    store.load()
    return store


def _posted_ids(api):
    return [body["id"] for method, url, body in api.calls if method == "POST" and url == BASE]


def test_create_keeps_server_assigned_id_and_fields():
    api = FakeApi([{"id": 1, "status": "open"}])
    store = _store(api)
    created = store.create({"description": "Meter reading off", "status": "open", "reportedBy": "rohan.y"})
    assert created.id == 101
    assert created.reported_by == "api"
    assert store.get(101) == created
    assert store.find(2) is None


def test_next_create_counts_from_server_id():
    api = FakeApi([{"id": 1}])
    store = _store(api)
    store.create({"description": "a"})
    second = store.create({"description": "b"})
    # the second draft is proposed above the id the server handed back
    assert _posted_ids(api) == [2, 102]
    assert second.id == 201
    assert [i.id for i in store.records] == [1, 101, 201]
    assert store.next_id() == 202


def test_add_comment_through_store():
    api = FakeApi([{"id": 1, "status": "open", "comments": []}])
    store = _store(api)
    comment = store.add_comment(1, "Checked with the field team", author="sahil.s")
    assert comment.id == 1
    assert comment.author == "sahil.s"
    assert comment.created_at == "2024-03-01T09:00:00"
    assert store.get(1).comments == (comment,)
    assert api.rows[0]["comments"][0]["content"] == "Checked with the field team"


def test_update_and_delete_reach_server():
    api = FakeApi([{"id": 1, "status": "open"}, {"id": 2, "status": "open"}])
    store = _store(api)
    store.update(1, "status", "closed")
    assert api.rows[0]["status"] == "closed"
    assert ("PUT", f"{BASE}/1") in [call[:2] for call in api.calls]
    store.delete(2)
    assert [r["id"] for r in api.rows] == [1]
    assert [i.id for i in store.records] == [1]


def test_records_added_by_other_clients_are_seen_before_create():
    api = FakeApi([{"id": 1}])
    store = _store(api)
    api.rows.append({"id": 150, "status": "open"})
    created = store.create({"description": "late"})
    assert _posted_ids(api) == [151]
    assert created.id == 250
    assert [i.id for i in store.records] == [1, 150, 250]
    assert store.sync() is False
