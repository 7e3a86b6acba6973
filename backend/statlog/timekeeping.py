from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional

from .models import Event, EventKind


def compute_total_minutes(events: Iterable[Event]) -> int:
    """Sum the whole minutes between each check-in and the check-out closing it.

    Events are taken in log order. A check-in replaces any pending one, a
    check-out without a pending check-in is ignored and a trailing check-in
    counts nothing until it is closed. Each interval is truncated toward zero
    on its own; negative intervals are added as they are.
    """
    total = 0
    pending: Optional[dt.datetime] = None
    for event in events:
        if event.kind is EventKind.CHECKIN:
            pending = event.timestamp
        elif event.kind is EventKind.CHECKOUT and pending is not None:
            seconds = int((event.timestamp - pending).total_seconds())
            total += int(seconds / 60)
            pending = None
    return total


def last_status_event(events: Iterable[Event]) -> Optional[Event]:
    latest: Optional[Event] = None
    for event in events:
        if event.kind.is_status:
            latest = event
    return latest


def derive_status(events: Iterable[Event]) -> EventKind:
    latest = last_status_event(events)
    return latest.kind if latest else EventKind.CREATED


def last_comment(events: Iterable[Event]) -> str:
    text = ""
    for event in events:
        if event.kind is EventKind.COMMENT:
            text = event.payload
    return text


def format_duration(total_minutes: int) -> str:
    sign = "-" if total_minutes < 0 else ""
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours}h {minutes:02d}m"
