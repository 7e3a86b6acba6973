from __future__ import annotations

import datetime as dt
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from .models import EPOCH, EventKind, StatusFilter
from .utils import format_timestamp


def _serialize_datetime(value: Optional[dt.datetime]) -> Optional[str]:
    if value is None:
        return None
    return format_timestamp(value)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    index: int = 0
    timestamp: dt.datetime
    stamp: str
    payload: str

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "timestamp": _serialize_datetime(self.timestamp),
            "stamp": self.stamp,
            "text": self.payload,
        }


class IndexEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    project_id: str
    status: EventKind
    last_timestamp: dt.datetime
    last_comment: str = ""

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {
            "id": self.project_id,
            "status": self.status.value,
            "last_timestamp": _serialize_datetime(self.last_timestamp) if self.last_timestamp != EPOCH else None,
            "last_comment": self.last_comment,
        }


class ProjectIndexResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    status_filter: StatusFilter = StatusFilter.ALL
    total: int = 0
    visible: List[IndexEntryResponse] = Field(default_factory=list)

    @classmethod
    def from_index(cls, index: Any) -> "ProjectIndexResponse":
        return cls(
            status_filter=index.status_filter,
            total=len(index.entries),
            visible=[IndexEntryResponse.model_validate(entry) for entry in index.visible],
        )


class ProjectDetailResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    project_id: str
    status: EventKind
    total_minutes: int
    duration: str
    checked_in: bool
    cursor: int = 0
    comments: List[CommentResponse] = Field(default_factory=list)

    @classmethod
    def from_view(cls, view: Any) -> "ProjectDetailResponse":
        return cls(
            project_id=view.project_id,
            status=view.status,
            total_minutes=view.total_minutes,
            duration=view.duration,
            checked_in=view.checked_in,
            cursor=view.cursor,
            comments=comment_responses(view.comments),
        )

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {
            "id": self.project_id,
            "status": self.status.value,
            "total_minutes": self.total_minutes,
            "duration": self.duration,
            "checked_in": self.checked_in,
            "cursor": self.cursor,
            "comments": [comment._serialize() for comment in self.comments],
        }


class StatusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    lock_holder: Optional[str] = None
    active_project: Optional[str] = None


class ErrorResponse(BaseModel):
    reason: str
    message: str
    project_id: Optional[str] = None


def comment_responses(events: List[Any]) -> List[CommentResponse]:
    return [
        CommentResponse(index=position, timestamp=event.timestamp, stamp=event.stamp, payload=event.payload)
        for position, event in enumerate(events)
    ]
