from __future__ import annotations

from typing import Optional


class StatlogError(Exception):
    """Base class for failures reported to callers of the core."""

    reason = "error"

    def __init__(self, message: str, *, project_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.project_id = project_id

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"reason": self.reason, "message": self.message, "project_id": self.project_id}


class InvalidIdError(StatlogError):
    reason = "invalid_id"

    def __init__(self, project_id: str) -> None:
        super().__init__(
            f"Invalid project id {project_id!r}: must be non-empty and contain no '/' or control characters",
            project_id=project_id,
        )


class LockHeldByOtherError(StatlogError):
    reason = "lock_held_by_other"

    def __init__(self, holder: str, *, project_id: Optional[str] = None) -> None:
        super().__init__(f"Already checked in to '{holder}'. Check out first.", project_id=project_id)
        self.holder = holder


class NotCheckedInError(StatlogError):
    reason = "not_checked_in"

    def __init__(self, project_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Not checked in to '{project_id}'.", project_id=project_id)


class NotFoundError(StatlogError):
    reason = "not_found"

    def __init__(self, project_id: str, *, archived: bool = False) -> None:
        where = "archived projects" if archived else "projects"
        super().__init__(f"No project '{project_id}' among {where}.", project_id=project_id)


class AlreadyExistsError(StatlogError):
    reason = "already_exists"

    def __init__(self, project_id: str, *, archived: bool = False) -> None:
        where = "the archive" if archived else "the active projects"
        super().__init__(f"Project '{project_id}' already exists in {where}.", project_id=project_id)
        self.archived = archived


class InvalidCommentError(StatlogError):
    reason = "invalid_comment"


class IoFailureError(StatlogError):
    reason = "io_failure"

    def __init__(self, action: str, path: str, exc: OSError, *, project_id: Optional[str] = None) -> None:
        detail = exc.strerror or str(exc)
        super().__init__(f"Could not {action} {path}: {detail}", project_id=project_id)
        self.path = path


__all__ = [
    "AlreadyExistsError",
    "InvalidCommentError",
    "InvalidIdError",
    "IoFailureError",
    "LockHeldByOtherError",
    "NotCheckedInError",
    "NotFoundError",
    "StatlogError",
]
