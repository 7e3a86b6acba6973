from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Generator, Optional
from zoneinfo import ZoneInfo

from .config import Layout, Settings, settings
from .errors import IoFailureError
from .eventlog import EventLog
from .state import ActiveProjectPointer, CheckinLock


class Storage:
    """Handle on one base directory: its event logs and both state files."""

    def __init__(self, layout: Layout, local_tz: Optional[ZoneInfo] = None):
        self.layout = layout
        self.events = EventLog(layout, local_tz=local_tz)
        self.lock = CheckinLock(layout)
        self.pointer = ActiveProjectPointer(layout)
        self._mutex = RLock()

    @contextmanager
    def exclusive(self) -> Generator["Storage", None, None]:
        """Serialize a read-validate-write sequence within this process."""
        with self._mutex:
            yield self

    def __repr__(self) -> str:
        return f"Storage({self.layout!r})"


def open_storage(base_dir: Optional[Path | str] = None, config: Optional[Settings] = None) -> Storage:
    config = config or settings
    layout = Layout(base_dir if base_dir is not None else config.base_dir)
    try:
        layout.ensure()
    except OSError as exc:
        raise IoFailureError("create", str(layout.base_dir), exc) from exc
    local_tz = ZoneInfo(config.timezone) if config.timezone else None
    return Storage(layout, local_tz=local_tz)
