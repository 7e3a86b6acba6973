from __future__ import annotations

from pathlib import Path
from threading import RLock
from typing import Optional

from .config import Layout
from .errors import IoFailureError, LockHeldByOtherError
from .logging import get_logger

logger = get_logger(__name__)


class _StateFile:
    """One optional project id persisted as a single line."""

    def __init__(self, path: Path):
        self.path = path
        self._lock = RLock()

    def _read(self) -> Optional[str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError:
            return None
        value = text.split("\n", 1)[0].rstrip("\r")
        return value if value.strip() else None

    def _write(self, value: str) -> None:
        try:
            self.path.write_text(f"{value}\n", encoding="utf-8")
        except OSError as exc:
            logger.error("state_write_failed", path=str(self.path), error=str(exc))
            raise IoFailureError("write", str(self.path), exc, project_id=value) from exc

    def _remove(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.error("state_remove_failed", path=str(self.path), error=str(exc))
            raise IoFailureError("remove", str(self.path), exc) from exc


class CheckinLock(_StateFile):
    """Records which single project, if any, is checked in."""

    def __init__(self, layout: Layout):
        super().__init__(layout.lock_file)

    def read(self) -> Optional[str]:
        with self._lock:
            return self._read()

    def is_held_by(self, project_id: str) -> bool:
        return bool(project_id) and self.read() == project_id

    def acquire(self, project_id: str) -> None:
        with self._lock:
            holder = self._read()
            if holder and holder != project_id:
                logger.info("lock_refused", project_id=project_id, holder=holder)
                raise LockHeldByOtherError(holder, project_id=project_id)
            self._write(project_id)
        logger.info("lock_acquired", project_id=project_id)

    def release(self) -> None:
        with self._lock:
            self._remove()
        logger.info("lock_released")


class ActiveProjectPointer(_StateFile):
    """Remembers which project the interactive session has open."""

    def __init__(self, layout: Layout):
        super().__init__(layout.running_file)

    def read(self) -> Optional[str]:
        with self._lock:
            return self._read()

    def set(self, project_id: str) -> None:
        with self._lock:
            self._write(project_id)

    def clear(self) -> None:
        with self._lock:
            self._remove()
