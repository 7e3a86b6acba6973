"""Append-only per-project event logs.

Each project owns one UTF-8 text file, ``<data_dir>/<id>.log``, holding one
event per line::

    <timestamp>\t<kind>\t<payload>\n

Reads tolerate malformed lines by skipping them. The only operation that
rewrites a log is :meth:`EventLog.delete_event`, which copies the file to a
temporary sibling and renames it over the original.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Generator, Iterator, List, Optional, TextIO, Union
from zoneinfo import ZoneInfo

from .config import Layout
from .errors import IoFailureError
from .logging import get_logger
from .models import Event, EventKind
from .utils import parse_timestamp

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class Skip:
    """A line that could not be parsed."""

    line_number: int
    reason: str


@dataclass(slots=True, frozen=True)
class ParsedLine:
    line_number: int
    event: Event


ParseOutcome = Union[ParsedLine, Skip]


def _split_line(line: str) -> List[str]:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line.split("\t")


def parse_line(line: str, line_number: int = 0, local_tz: Optional[ZoneInfo] = None) -> ParseOutcome:
    fields = _split_line(line)
    if len(fields) != 3:
        return Skip(line_number, f"expected 3 fields, got {len(fields)}")
    stamp, token, payload = fields
    kind = EventKind.from_token(token)
    if kind is None:
        return Skip(line_number, f"unknown kind {token!r}")
    timestamp = parse_timestamp(stamp, local_tz)
    if timestamp is None:
        return Skip(line_number, f"unparsable timestamp {stamp!r}")
    return ParsedLine(line_number, Event(timestamp=timestamp, kind=kind, payload=payload, raw_timestamp=stamp))


@contextmanager
def atomic_rewrite(path: Path) -> Generator[TextIO, None, None]:
    """Yield a temporary file that replaces ``path`` when the block succeeds.

    The temporary file lives in the same directory so the final rename stays on
    one filesystem. On error the temporary file is removed and ``path`` is left
    untouched.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
    try:
        if path.exists():
            os.chmod(tmp_name, path.stat().st_mode & 0o777)
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class EventLog:
    """Reads and writes the event logs of the active projects."""

    def __init__(self, layout: Layout, local_tz: Optional[ZoneInfo] = None):
        self.layout = layout
        self.local_tz = local_tz

    def path(self, project_id: str) -> Path:
        return self.layout.log_path(project_id)

    def exists(self, project_id: str) -> bool:
        return self.path(project_id).is_file()

    def append(self, project_id: str, event: Event) -> None:
        path = self.path(project_id)
        try:
            with path.open("a", encoding="utf-8", newline="") as handle:
                handle.write(event.to_line())
        except OSError as exc:
            logger.error("append_failed", project_id=project_id, path=str(path), error=str(exc))
            raise IoFailureError("append to", str(path), exc, project_id=project_id) from exc
        logger.info("event_appended", project_id=project_id, kind=event.kind.value)

    def iter_parsed(self, project_id: str) -> Iterator[ParseOutcome]:
        path = self.path(project_id)
        try:
            handle = path.open("r", encoding="utf-8", errors="replace", newline="")
        except FileNotFoundError:
            return
        except OSError as exc:
            raise IoFailureError("read", str(path), exc, project_id=project_id) from exc
        with handle:
            for number, line in enumerate(handle, start=1):
                yield parse_line(line, number, self.local_tz)

    def read_all(self, project_id: str) -> List[Event]:
        events: List[Event] = []
        for outcome in self.iter_parsed(project_id):
            if isinstance(outcome, Skip):
                logger.debug(
                    "log_line_skipped",
                    project_id=project_id,
                    line_number=outcome.line_number,
                    reason=outcome.reason,
                )
                continue
            events.append(outcome.event)
        return events

    def delete_event(self, project_id: str, target_timestamp: str, target_payload: str) -> bool:
        """Remove the first comment line matching both fields exactly.

        Every other line is copied verbatim, undecodable bytes included.
        Returns whether a line was removed; a missing log is a no-op.
        """
        path = self.path(project_id)
        try:
            source = path.open("r", encoding="utf-8", errors="surrogateescape", newline="")
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.error("delete_open_failed", project_id=project_id, path=str(path), error=str(exc))
            return False

        removed = False
        try:
            with source, atomic_rewrite(path) as target:
                for line in source:
                    if not removed and self._is_target(line, target_timestamp, target_payload):
                        removed = True
                        continue
                    target.write(line)
        except OSError as exc:
            logger.error("delete_rewrite_failed", project_id=project_id, path=str(path), error=str(exc))
            raise IoFailureError("rewrite", str(path), exc, project_id=project_id) from exc

        if removed:
            logger.info("comment_deleted", project_id=project_id, timestamp=target_timestamp)
        return removed

    @staticmethod
    def _is_target(line: str, target_timestamp: str, target_payload: str) -> bool:
        # Fields compare as iter_parsed decodes them.
        fields = _split_line(line.encode("utf-8", "surrogateescape").decode("utf-8", "replace"))
        if len(fields) != 3:
            return False
        stamp, token, payload = fields
        return token == EventKind.COMMENT.value and stamp == target_timestamp and payload == target_payload
