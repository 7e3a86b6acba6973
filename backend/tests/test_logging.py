from __future__ import annotations

import logging

import structlog

from statlog import services
from statlog.logging import configure_defaults, get_logger, setup_logging


def test_library_use_without_setup_keeps_stdout_clean(monkeypatch, capsys, store):
    structlog.reset_defaults()
    configure_defaults()
    monkeypatch.setattr(logging.root, "handlers", [])
    monkeypatch.setattr(logging.root, "level", logging.WARNING)

    services.create_project(store, "alpha")
    services.check_in(store, "alpha")
    services.check_out(store, "alpha")
    get_logger("statlog.audit").info("event_appended", project_id="alpha")
    get_logger("statlog.audit").warning("state_write_failed", project_id="alpha")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "event_appended" not in captured.err
    assert "state_write_failed" in captured.err


def test_setup_logging_honours_level(capsys):
    setup_logging("INFO")
    get_logger("statlog.audit").info("lock_acquired", project_id="alpha")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "lock_acquired" in captured.err
