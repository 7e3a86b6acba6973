from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import (
    AlreadyExistsError,
    InvalidCommentError,
    IoFailureError,
    LockHeldByOtherError,
    NotCheckedInError,
    NotFoundError,
)
from .index import ProjectIndex, build_index, list_archived
from .logging import get_logger
from .models import Event, EventKind, StatusFilter
from .storage import Storage
from .timekeeping import compute_total_minutes, derive_status, format_duration
from .utils import now_utc, validate_project_id

logger = get_logger(__name__)

FORBIDDEN_COMMENT_CHARS = ("\t", "\n", "\r")


@dataclass(slots=True)
class ProjectView:
    """Everything a caller needs to display one open project."""

    project_id: str
    status: EventKind
    total_minutes: int
    checked_in: bool
    comments: List[Event] = field(default_factory=list)
    cursor: int = 0

    @property
    def duration(self) -> str:
        return format_duration(self.total_minutes)


@dataclass(slots=True)
class StatusView:
    lock_holder: Optional[str]
    active_project: Optional[str]


def _now() -> dt.datetime:
    return now_utc()


def _require_active(store: Storage, project_id: str) -> str:
    validate_project_id(project_id)
    if not store.events.exists(project_id):
        raise NotFoundError(project_id)
    return project_id


def _require_checked_in(store: Storage, project_id: str, message: Optional[str] = None) -> None:
    if not store.lock.is_held_by(project_id):
        logger.info("not_checked_in", project_id=project_id, holder=store.lock.read())
        raise NotCheckedInError(project_id, message)


def _record(store: Storage, project_id: str, kind: EventKind, payload: str = "") -> Event:
    event = Event(timestamp=_now(), kind=kind, payload=payload)
    store.events.append(project_id, event)
    return event


# ----------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------
def list_projects(store: Storage, status_filter: StatusFilter = StatusFilter.ALL) -> ProjectIndex:
    return build_index(store.events, status_filter)


def list_archived_projects(store: Storage) -> List[str]:
    return list_archived(store.events)


def active_project(store: Storage) -> Optional[str]:
    """Return the open project, forgetting it if its log has disappeared."""
    with store.exclusive():
        project_id = store.pointer.read()
        if project_id is None:
            return None
        if not store.events.exists(project_id):
            logger.info("stale_pointer_cleared", project_id=project_id)
            store.pointer.clear()
            return None
        return project_id


def current_status(store: Storage) -> StatusView:
    return StatusView(lock_holder=store.lock.read(), active_project=active_project(store))


def project_view(store: Storage, project_id: str) -> ProjectView:
    _require_active(store, project_id)
    events = store.events.read_all(project_id)
    comments = [event for event in events if event.kind is EventKind.COMMENT]
    return ProjectView(
        project_id=project_id,
        status=derive_status(events),
        total_minutes=compute_total_minutes(events),
        checked_in=store.lock.is_held_by(project_id),
        comments=comments,
        cursor=len(comments) - 1 if comments else 0,
    )


def open_project(store: Storage, project_id: str) -> ProjectView:
    with store.exclusive():
        view = project_view(store, project_id)
        store.pointer.set(project_id)
    return view


def close_project(store: Storage) -> None:
    store.pointer.clear()


# ----------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------
def create_project(store: Storage, project_id: str) -> Event:
    with store.exclusive():
        holder = store.lock.read()
        if holder:
            logger.info("create_refused", project_id=project_id, holder=holder)
            raise LockHeldByOtherError(holder, project_id=project_id)
        validate_project_id(project_id)
        if store.events.exists(project_id):
            raise AlreadyExistsError(project_id)
        if store.layout.archived_path(project_id).exists():
            raise AlreadyExistsError(project_id, archived=True)
        event = _record(store, project_id, EventKind.CREATED)
        store.pointer.set(project_id)
    logger.info("project_created", project_id=project_id)
    return event


def check_in(store: Storage, project_id: str) -> Event:
    with store.exclusive():
        _require_active(store, project_id)
        previous = store.lock.read()
        store.lock.acquire(project_id)
        try:
            return _record(store, project_id, EventKind.CHECKIN)
        except IoFailureError:
            if previous is None:
                store.lock.release()
            raise


def _end_session(store: Storage, project_id: str, kind: EventKind) -> Event:
    with store.exclusive():
        _require_active(store, project_id)
        _require_checked_in(store, project_id)
        event = _record(store, project_id, kind)
        store.lock.release()
        return event


def check_out(store: Storage, project_id: str) -> Event:
    return _end_session(store, project_id, EventKind.CHECKOUT)


def finish(store: Storage, project_id: str) -> Event:
    return _end_session(store, project_id, EventKind.FINISH)


def cancel(store: Storage, project_id: str) -> Event:
    return _end_session(store, project_id, EventKind.CANCEL)


LIFECYCLE_ACTIONS = {
    "checkin": check_in,
    "checkout": check_out,
    "finish": finish,
    "cancel": cancel,
}


def archive_project(store: Storage, project_id: str) -> None:
    with store.exclusive():
        source = store.layout.log_path(_require_active(store, project_id))
        target = store.layout.archived_path(project_id)
        if target.exists():
            raise AlreadyExistsError(project_id, archived=True)
        try:
            os.rename(source, target)
        except OSError as exc:
            logger.error("archive_failed", project_id=project_id, error=str(exc))
            raise IoFailureError("archive", str(source), exc, project_id=project_id) from exc
        _forget(store, project_id)
    logger.info("project_archived", project_id=project_id)


def delete_project(store: Storage, project_id: str) -> None:
    with store.exclusive():
        source = store.layout.log_path(_require_active(store, project_id))
        try:
            source.unlink()
        except OSError as exc:
            logger.error("delete_failed", project_id=project_id, error=str(exc))
            raise IoFailureError("delete", str(source), exc, project_id=project_id) from exc
        _forget(store, project_id)
    logger.info("project_deleted", project_id=project_id)


def restore_project(store: Storage, project_id: str) -> None:
    with store.exclusive():
        validate_project_id(project_id)
        source = store.layout.archived_path(project_id)
        target = store.layout.log_path(project_id)
        if not source.is_file():
            raise NotFoundError(project_id, archived=True)
        if target.exists():
            raise AlreadyExistsError(project_id)
        try:
            os.rename(source, target)
        except OSError as exc:
            logger.error("restore_failed", project_id=project_id, error=str(exc))
            raise IoFailureError("restore", str(source), exc, project_id=project_id) from exc
    logger.info("project_restored", project_id=project_id)


def _forget(store: Storage, project_id: str) -> None:
    if store.lock.read() == project_id:
        store.lock.release()
    if store.pointer.read() == project_id:
        store.pointer.clear()


# ----------------------------------------------------------------------
# Comments
# ----------------------------------------------------------------------
def add_comment(store: Storage, project_id: str, text: str) -> Optional[Event]:
    """Append a comment; returns ``None`` when the trimmed text is empty."""
    with store.exclusive():
        _require_active(store, project_id)
        _require_checked_in(store, project_id, "You must check in before commenting.")
        message = text.strip()
        if not message:
            return None
        if any(char in message for char in FORBIDDEN_COMMENT_CHARS):
            raise InvalidCommentError("Comments must not contain tabs or line breaks.", project_id=project_id)
        return _record(store, project_id, EventKind.COMMENT, message)


def list_comments(store: Storage, project_id: str) -> List[Event]:
    _require_active(store, project_id)
    return [event for event in store.events.read_all(project_id) if event.kind is EventKind.COMMENT]


def delete_comment(store: Storage, project_id: str, chosen: Event) -> bool:
    with store.exclusive():
        _require_active(store, project_id)
        _require_checked_in(store, project_id)
        return store.events.delete_event(project_id, chosen.stamp, chosen.payload)
