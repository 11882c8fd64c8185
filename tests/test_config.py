from pathlib import Path

import pytest

from tracker_app.core.config import DEFAULT_API_URL, DEFAULT_DATA_DIR, load_storage_settings


def test_defaults():
    settings = load_storage_settings({}, {})
    assert settings.backend == "local"
    assert settings.data_dir == DEFAULT_DATA_DIR
    assert settings.api_url == DEFAULT_API_URL
    assert settings.api_token is None


def test_environment_overrides():
    settings = load_storage_settings(
        None,
        {
            "TRACKER_BACKEND": "Remote",
            "TRACKER_API_URL": "http://api.test/v1/",
            "TRACKER_API_TOKEN": "tok",
            "TRACKER_TIMEOUT": "2.5",
        },
    )
    assert settings.backend == "remote"
    assert settings.api_url == "http://api.test/v1"
    assert settings.api_token == "tok"
    assert settings.timeout == 2.5


def test_secrets_section_wins_over_environment(tmp_path):
    secrets = {"storage": {"data_dir": str(tmp_path)}, "TRACKER_BACKEND": "local"}
    settings = load_storage_settings(secrets, {"TRACKER_DATA_DIR": "/elsewhere", "TRACKER_BACKEND": "remote"})
    assert settings.data_dir == Path(tmp_path)
    assert settings.backend == "local"


def test_unknown_backend():
    with pytest.raises(ValueError):
        load_storage_settings({}, {"TRACKER_BACKEND": "sqlite"})
