import json

import pytest

from tracker_app.core.backends import LocalSnapshotStore
from tracker_app.core.config import DEFAULT_COMMENT_AUTHOR
from tracker_app.core.errors import FetchError, NotFoundError, ParseError, UnknownFieldError
from tracker_app.core.models import IssueModel
from tracker_app.core.store import IssueStore, UserStore


def _local_store(tmp_path, rows, author=None):
    (tmp_path / "issues.json").write_text(json.dumps(rows))
    store = IssueStore(LocalSnapshotStore(tmp_path, "issues"), author=author)
    store.load()
    return store


def _counter(store):
    calls = []
    store.subscribe(lambda: calls.append(1))
    return calls


def test_create_assigns_next_id(tmp_path):
    store = _local_store(tmp_path, [{"id": 1}, {"id": 3}, {"id": 7}])
    created = store.create({"description": "New issue", "status": "open", "id": 99})
    assert created.id == 8
    assert [i.id for i in store.records] == [1, 3, 7, 8]
    # written through to the snapshot
    on_disk = json.loads((tmp_path / "issues.json").read_text())
    assert on_disk[-1]["id"] == 8
    assert on_disk[-1]["description"] == "New issue"


def test_create_on_empty_store_starts_at_one(tmp_path):
    store = IssueStore(LocalSnapshotStore(tmp_path, "issues"))
    store.load()
    assert store.create(IssueModel(description="first")).id == 1


def test_ids_are_never_reused(tmp_path):
    store = _local_store(tmp_path, [{"id": 1}, {"id": 3}, {"id": 7}])
    first = store.create({"description": "a"})
    store.delete(first.id)
    assert store.create({"description": "b"}).id == first.id + 1


def test_update_persists_and_broadcasts_even_when_unchanged(tmp_path):
    store = _local_store(tmp_path, [{"id": 1, "status": "closed"}])
    calls = _counter(store)
    updated = store.update(1, "status", "closed")
    assert updated.status == "closed"
    assert len(calls) == 1


def test_update_replaces_whole_record(tmp_path):
    store = _local_store(tmp_path, [{"id": 1, "status": "open", "teamLead": "Shubham.P"}])
    before = store.get(1)
    store.update(1, "teamLead", "Pravin Chavan")
    after = store.get(1)
    assert before is not after
    assert before.team_lead == "Shubham.P"
    assert after.team_lead == "Pravin Chavan"
    reloaded = IssueStore(LocalSnapshotStore(tmp_path, "issues"))
    reloaded.load()
    assert reloaded.get(1).team_lead == "Pravin Chavan"


def test_update_errors(tmp_path):
    store = _local_store(tmp_path, [{"id": 1}])
    with pytest.raises(NotFoundError):
        store.update(2, "status", "open")
    with pytest.raises(KeyError):
        store.update(2, "status", "open")
    with pytest.raises(UnknownFieldError):
        store.update(1, "colour", "red")
    with pytest.raises(UnknownFieldError):
        store.update(1, "id", 5)


def test_delete_absent_is_noop(tmp_path):
    store = _local_store(tmp_path, [{"id": 1}])
    calls = _counter(store)
    store.delete(42)
    assert len(store) == 1
    assert calls == []


def test_failed_write_leaves_collection_untouched(memory_backend, issue_rows):
    backend = memory_backend(issue_rows)
    store = IssueStore(backend)
    store.load()
    calls = _counter(store)
    backend.fail = True
    with pytest.raises(FetchError):
        store.create({"description": "x"})
    with pytest.raises(FetchError):
        store.update(1, "status", "closed")
    with pytest.raises(FetchError):
        store.delete(1)
    assert [i.id for i in store.records] == [1, 2, 3, 4]
    assert store.get(1).status == "open"
    assert calls == []


def test_add_comment_sequential_ids_and_author(tmp_path):
    store = _local_store(tmp_path, [{"id": 1, "comments": []}], author=lambda: "admin")
    first = store.add_comment(1, "Looking into it")
    second = store.add_comment(1, "Fixed", author="dev")
    assert (first.id, first.author) == (1, "admin")
    assert (second.id, second.author) == (2, "dev")
    assert first.created_at.endswith("Z")
    assert [c.content for c in store.get(1).comments] == ["Looking into it", "Fixed"]
    on_disk = json.loads((tmp_path / "issues.json").read_text())
    assert on_disk[0]["comments"][1]["createdAt"] == second.created_at


def test_add_comment_default_author_and_validation(tmp_path):
    store = _local_store(tmp_path, [{"id": 1}])
    assert store.add_comment(1, "hello").author == DEFAULT_COMMENT_AUTHOR
    with pytest.raises(ValueError):
        store.add_comment(1, "   ")
    with pytest.raises(NotFoundError):
        store.add_comment(9, "hello")


def test_add_attachment(tmp_path):
    store = _local_store(tmp_path, [{"id": 1, "attachments": ["a.txt"]}])
    assert store.add_attachment(1, "b.txt").attachments == ("a.txt", "b.txt")


def test_load_malformed_record_raises_parse_error(memory_backend):
    store = IssueStore(memory_backend([{"id": "abc"}]))
    with pytest.raises(ParseError):
        store.load()
    assert not store.loaded


def test_sync_reloads_after_external_write(tmp_path):
    store = _local_store(tmp_path, [{"id": 1}])
    assert store.sync() is False
    other = IssueStore(LocalSnapshotStore(tmp_path, "issues"))
    other.load()
    other.create({"description": "from another session"})
    calls = _counter(store)
    assert store.sync() is True
    assert len(store) == 2
    assert calls == [1]


def test_two_sessions_never_hand_out_the_same_id(tmp_path):
    first = _local_store(tmp_path, [{"id": 1}])
    second = IssueStore(LocalSnapshotStore(tmp_path, "issues"))
    second.load()
    assert second.create({"description": "from the second session"}).id == 2
    assert first.create({"description": "from the first session"}).id == 3
    on_disk = json.loads((tmp_path / "issues.json").read_text())
    assert [row["id"] for row in on_disk] == [1, 2, 3]
    assert [i.id for i in first.records] == [1, 2, 3]


def test_write_picks_up_records_from_another_session(tmp_path):
    first = _local_store(tmp_path, [{"id": 1, "status": "open"}, {"id": 5}])
    second = IssueStore(LocalSnapshotStore(tmp_path, "issues"))
    second.load()
    second.create({"description": "from the second session"})
    first.update(1, "status", "closed")
    assert [i.id for i in first.records] == [1, 5, 6]
    assert first.sync() is False
    on_disk = json.loads((tmp_path / "issues.json").read_text())
    assert [row["id"] for row in on_disk] == [1, 5, 6]
    assert on_disk[0]["status"] == "closed"


def test_unreadable_version_after_write_still_broadcasts(memory_backend, issue_rows):
    backend = memory_backend(issue_rows)
    store = IssueStore(backend)
    store.load()
    calls = _counter(store)
    write = backend.create

    def create_then_lose_version(row):
        stored = write(row)
        backend.fail_version = True
        return stored

    backend.create = create_then_lose_version
    created = store.create({"description": "written before the outage"})
    assert created.id == 5
    assert store.get(5) == created
    assert calls == [1]
    backend.fail_version = False
    assert store.sync() is True
    assert [i.id for i in store.records] == [1, 2, 3, 4, 5]


def test_replace_all_rejects_duplicate_ids(memory_backend):
    store = IssueStore(memory_backend())
    store.load()
    with pytest.raises(ValueError):
        store.replace_all([{"id": 1}, {"id": 1}])


def test_user_store_seeds_defaults(memory_backend):
    store = UserStore(memory_backend(key="users"))
    store.load()
    assert store.seed_defaults() is True
    assert [u.name for u in store.records] == ["sahil.s", "test.w", "sahil.test"]
    assert store.seed_defaults() is False
    assert store.create({"name": "new.user"}).id == 4
