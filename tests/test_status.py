from tracker_app.core.status import is_closed, normalize_status, status_key


def test_status_normalization():
    assert normalize_status(" OPEN ") == "Open"
    assert normalize_status("in_progress") == "In Progress"
    assert normalize_status("Blocked") == "Blocked"
    assert normalize_status(None) == ""
    assert status_key("In-Progress") == "in progress"


def test_is_closed():
    assert is_closed("CLOSED")
    assert not is_closed("open")
    assert not is_closed(None)
