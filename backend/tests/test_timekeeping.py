from __future__ import annotations

import datetime as dt

from statlog.models import Event, EventKind
from statlog.timekeeping import compute_total_minutes, derive_status, format_duration, last_comment

T0 = dt.datetime(2024, 5, 1, 8, 0, 0, tzinfo=dt.timezone.utc)


def _at(kind: EventKind, seconds: int, payload: str = "") -> Event:
    return Event(timestamp=T0 + dt.timedelta(seconds=seconds), kind=kind, payload=payload)


def test_single_interval_truncates_to_whole_minutes():
    events = [_at(EventKind.CHECKIN, 0), _at(EventKind.CHECKOUT, 90)]
    assert compute_total_minutes(events) == 1


def test_unmatched_checkin_is_discarded():
    events = [_at(EventKind.CHECKIN, 0), _at(EventKind.CHECKIN, 600), _at(EventKind.CHECKOUT, 660)]
    assert compute_total_minutes(events) == 1


def test_trailing_checkin_counts_nothing():
    assert compute_total_minutes([_at(EventKind.CHECKIN, 0)]) == 0


def test_checkout_without_checkin_is_ignored():
    events = [_at(EventKind.CHECKOUT, 60), _at(EventKind.CHECKIN, 120), _at(EventKind.CHECKOUT, 300)]
    assert compute_total_minutes(events) == 3


def test_intervals_are_truncated_individually():
    events = [
        _at(EventKind.CHECKIN, 0),
        _at(EventKind.CHECKOUT, 119),
        _at(EventKind.CHECKIN, 200),
        _at(EventKind.CHECKOUT, 319),
    ]
    assert compute_total_minutes(events) == 2


def test_other_kinds_do_not_interrupt_a_session():
    events = [
        _at(EventKind.CREATED, 0),
        _at(EventKind.CHECKIN, 60),
        _at(EventKind.COMMENT, 120, "note"),
        _at(EventKind.FINISH, 180),
        _at(EventKind.CHECKOUT, 660),
    ]
    assert compute_total_minutes(events) == 10


def test_negative_interval_is_summed_as_is():
    events = [
        _at(EventKind.CHECKIN, 600),
        _at(EventKind.CHECKOUT, 0),
        _at(EventKind.CHECKIN, 1000),
        _at(EventKind.CHECKOUT, 1300),
    ]
    assert compute_total_minutes(events) == -10 + 5


def test_negative_partial_minute_truncates_toward_zero():
    events = [_at(EventKind.CHECKIN, 90), _at(EventKind.CHECKOUT, 0)]
    assert compute_total_minutes(events) == -1


def test_status_ignores_comments():
    events = [_at(EventKind.CREATED, 0), _at(EventKind.CHECKIN, 10), _at(EventKind.COMMENT, 20, "x")]
    assert derive_status(events) is EventKind.CHECKIN
    assert derive_status([]) is EventKind.CREATED


def test_last_comment():
    events = [_at(EventKind.COMMENT, 0, "first"), _at(EventKind.CHECKOUT, 10), _at(EventKind.COMMENT, 20, "second")]
    assert last_comment(events) == "second"
    assert last_comment([]) == ""


def test_format_duration():
    assert format_duration(0) == "0h 00m"
    assert format_duration(125) == "2h 05m"
    assert format_duration(-61) == "-1h 01m"
