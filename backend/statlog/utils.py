from __future__ import annotations

import datetime as dt
import os
import unicodedata
from typing import Optional
from zoneinfo import ZoneInfo

from .errors import InvalidIdError

UTC = dt.timezone.utc

UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
LEGACY_FORMAT = "%Y-%m-%dT%H:%M:%S"


def now_utc() -> dt.datetime:
    return dt.datetime.now(UTC).replace(microsecond=0)


def format_timestamp(value: dt.datetime) -> str:
    """Render an instant in the canonical on-disk form (``YYYY-MM-DDTHH:MM:SSZ``)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(UTC_FORMAT)


def parse_timestamp(text: str, local_tz: Optional[ZoneInfo] = None) -> Optional[dt.datetime]:
    """Parse a log timestamp into an aware UTC datetime.

    Accepts the canonical UTC form and the legacy naive form written by older
    versions. Legacy values are interpreted in ``local_tz`` or, when it is not
    given, in the host's local zone. Returns ``None`` when neither form matches.
    """
    try:
        parsed = dt.datetime.strptime(text, UTC_FORMAT)
    except ValueError:
        pass
    else:
        return parsed.replace(tzinfo=UTC)

    try:
        parsed = dt.datetime.strptime(text, LEGACY_FORMAT)
    except ValueError:
        return None
    if local_tz is not None:
        return parsed.replace(tzinfo=local_tz).astimezone(UTC)
    try:
        return parsed.astimezone().astimezone(UTC)
    except (OverflowError, OSError):
        return None


def is_valid_project_id(value: str) -> bool:
    if not value:
        return False
    for char in value:
        if char == "/" or char == "\0":
            return False
        if unicodedata.category(char) == "Cc":
            return False
    return True


def validate_project_id(value: str) -> str:
    if not isinstance(value, str) or not is_valid_project_id(value):
        raise InvalidIdError(value if isinstance(value, str) else repr(value))
    return value


def expand_home(path: str) -> str:
    """Expand a leading ``~`` or ``$HOME`` the way the shell would."""
    home = os.environ.get("HOME") or os.path.expanduser("~")
    if path.startswith("$HOME"):
        return home + path[len("$HOME"):]
    if path.startswith("~"):
        return os.path.expanduser(path)
    return path
