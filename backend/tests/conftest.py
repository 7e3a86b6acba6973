from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Generator, List

import pytest

from statlog import services
from statlog.config import Layout
from statlog.logging import setup_logging
from statlog.storage import Storage


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    setup_logging("WARNING")


class FakeClock:
    def __init__(self, start: dt.datetime):
        self.current = start
        self.calls: List[dt.datetime] = []

    def advance(self, **kwargs: float) -> dt.datetime:
        self.current += dt.timedelta(**kwargs)
        return self.current

    def __call__(self) -> dt.datetime:
        self.calls.append(self.current)
        return self.current


@pytest.fixture()
def base_dir(tmp_path: Path) -> Path:
    return tmp_path / "statlog"


@pytest.fixture()
def layout(base_dir: Path) -> Layout:
    return Layout(base_dir).ensure()


@pytest.fixture()
def store(layout: Layout) -> Storage:
    return Storage(layout)


@pytest.fixture()
def clock(monkeypatch) -> Generator[FakeClock, None, None]:
    fake = FakeClock(dt.datetime(2024, 1, 1, 9, 0, 0, tzinfo=dt.timezone.utc))
    monkeypatch.setattr(services, "_now", fake)
    yield fake


@pytest.fixture()
def write_log(layout: Layout):
    def _write(project_id: str, *lines: str) -> Path:
        path = layout.log_path(project_id)
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write
