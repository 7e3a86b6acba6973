"""Enumeration and classification of all active projects."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .config import LOG_SUFFIX
from .errors import IoFailureError
from .eventlog import EventLog
from .logging import get_logger
from .models import Event, ProjectSummary, StatusFilter
from .timekeeping import last_comment, last_status_event
from .utils import is_valid_project_id

logger = get_logger(__name__)


@dataclass(slots=True)
class ProjectIndex:
    entries: List[ProjectSummary] = field(default_factory=list)
    visible: List[ProjectSummary] = field(default_factory=list)
    status_filter: StatusFilter = StatusFilter.ALL


def _project_ids(directory: Path) -> List[str]:
    try:
        names = sorted(entry.name for entry in directory.iterdir() if entry.is_file())
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise IoFailureError("list", str(directory), exc) from exc
    ids: List[str] = []
    for name in names:
        if not name.endswith(LOG_SUFFIX):
            continue
        project_id = name[: -len(LOG_SUFFIX)]
        if not is_valid_project_id(project_id):
            logger.debug("stray_file_ignored", name=name)
            continue
        ids.append(project_id)
    return ids


def summarize(project_id: str, events: List[Event]) -> ProjectSummary:
    summary = ProjectSummary(project_id=project_id, last_comment=last_comment(events))
    latest = last_status_event(events)
    if latest is not None:
        summary.status = latest.kind
        summary.last_timestamp = latest.timestamp
    return summary


def build_index(events: EventLog, status_filter: StatusFilter = StatusFilter.ALL) -> ProjectIndex:
    """Summarize every active log, most recently changed first."""
    entries: List[ProjectSummary] = []
    for project_id in _project_ids(events.layout.data_dir):
        try:
            project_events = events.read_all(project_id)
        except IoFailureError as exc:
            logger.warning("project_unreadable", project_id=project_id, error=exc.message)
            project_events = []
        entries.append(summarize(project_id, project_events))
    entries.sort(key=lambda entry: entry.last_timestamp, reverse=True)
    visible = [entry for entry in entries if status_filter.matches(entry.status)]
    return ProjectIndex(entries=entries, visible=visible, status_filter=status_filter)


def list_archived(events: EventLog) -> List[str]:
    return _project_ids(events.layout.archive_dir)


__all__ = ["ProjectIndex", "build_index", "list_archived", "summarize"]
