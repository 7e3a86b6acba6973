"""Data model shared by the event log, the index and the services."""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass, field
from typing import Optional

from .utils import UTC, format_timestamp

EPOCH = dt.datetime(1970, 1, 1, tzinfo=UTC)


class EventKind(str, enum.Enum):
    CREATED = "created"
    CHECKIN = "checkin"
    CHECKOUT = "checkout"
    FINISH = "finish"
    CANCEL = "cancel"
    COMMENT = "comment"

    @property
    def is_status(self) -> bool:
        return self is not EventKind.COMMENT

    @classmethod
    def from_token(cls, token: str) -> Optional["EventKind"]:
        try:
            return cls(token)
        except ValueError:
            return None


class StatusFilter(str, enum.Enum):
    ALL = "all"
    FINISHED = "finished"
    CANCELED = "canceled"
    CREATED = "created"

    def matches(self, status: EventKind) -> bool:
        if self is StatusFilter.ALL:
            return True
        wanted = {
            StatusFilter.FINISHED: EventKind.FINISH,
            StatusFilter.CANCELED: EventKind.CANCEL,
            StatusFilter.CREATED: EventKind.CREATED,
        }[self]
        return status is wanted


@dataclass(slots=True)
class Event:
    """One recorded fact of a project's log."""

    timestamp: dt.datetime
    kind: EventKind
    payload: str = ""
    raw_timestamp: Optional[str] = field(default=None, compare=False, repr=False)

    @property
    def stamp(self) -> str:
        """Timestamp text as it appears on disk."""
        if self.raw_timestamp is not None:
            return self.raw_timestamp
        return format_timestamp(self.timestamp)

    def to_line(self) -> str:
        payload = self.payload if self.kind is EventKind.COMMENT else ""
        return f"{format_timestamp(self.timestamp)}\t{self.kind.value}\t{payload}\n"


@dataclass(slots=True)
class ProjectSummary:
    """Index entry derived from one active log."""

    project_id: str
    status: EventKind = EventKind.CREATED
    last_timestamp: dt.datetime = EPOCH
    last_comment: str = ""


__all__ = ["EPOCH", "Event", "EventKind", "ProjectSummary", "StatusFilter"]
