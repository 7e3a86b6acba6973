from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo

import pytest

from statlog.config import Layout, Settings
from statlog.errors import InvalidIdError
from statlog.storage import open_storage
from statlog.utils import (
    expand_home,
    format_timestamp,
    is_valid_project_id,
    parse_timestamp,
    validate_project_id,
)

UTC = dt.timezone.utc


def test_parse_utc_form():
    assert parse_timestamp("2024-06-01T12:30:45Z") == dt.datetime(2024, 6, 1, 12, 30, 45, tzinfo=UTC)


def test_parse_legacy_form_in_configured_zone():
    parsed = parse_timestamp("2024-06-01T12:30:45", ZoneInfo("Europe/Berlin"))
    assert parsed == dt.datetime(2024, 6, 1, 10, 30, 45, tzinfo=UTC)


@pytest.mark.parametrize("text", ["", "yesterday", "2024-06-01 12:30:45Z", "2024-06-01T12:30:45+02:00", "2024-13-01T00:00:00Z"])
def test_parse_rejects_other_forms(text):
    assert parse_timestamp(text) is None


def test_format_timestamp_normalizes_to_utc():
    berlin = dt.datetime(2024, 6, 1, 12, 0, 0, tzinfo=ZoneInfo("Europe/Berlin"))
    assert format_timestamp(berlin) == "2024-06-01T10:00:00Z"
    assert format_timestamp(dt.datetime(2024, 6, 1, 12, 0, 0)) == "2024-06-01T12:00:00Z"


@pytest.mark.parametrize("value", ["proj1", "with space", "ümlaut", "dots.and-dashes_"])
def test_valid_ids(value):
    assert is_valid_project_id(value)
    assert validate_project_id(value) == value


@pytest.mark.parametrize("value", ["", "a/b", "/", "nl\n", "del\x7f", "nul\x00"])
def test_invalid_ids(value):
    assert not is_valid_project_id(value)
    with pytest.raises(InvalidIdError):
        validate_project_id(value)


def test_expand_home(monkeypatch):
    monkeypatch.setenv("HOME", "/home/tester")
    assert expand_home("$HOME/work") == "/home/tester/work"
    assert expand_home("~/work") == "/home/tester/work"
    assert expand_home("/srv/work") == "/srv/work"


def test_layout_paths(tmp_path):
    layout = Layout(tmp_path)
    assert layout.log_path("p") == tmp_path / "data" / "p.log"
    assert layout.archived_path("p") == tmp_path / "archived" / "p.log"
    assert layout.lock_file == tmp_path / "state" / "checkedin"
    assert layout.running_file == tmp_path / "state" / "running"


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("STATLOG_BASE_DIR", str(tmp_path / "base"))
    monkeypatch.setenv("STATLOG_TIMEZONE", "Europe/Berlin")
    config = Settings()
    assert config.base_dir == tmp_path / "base"
    assert config.timezone == "Europe/Berlin"

    store = open_storage(config=config)
    assert store.layout.data_dir.is_dir()
    assert store.events.local_tz == ZoneInfo("Europe/Berlin")
