from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils import expand_home

RUNNING_FILE = "running"
LOCK_FILE = "checkedin"
LOG_SUFFIX = ".log"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="STATLOG_", case_sensitive=False, extra="ignore")
    """Application runtime configuration."""

    app_name: str = "statlog"
    base_dir: Path = Path("~/.statlog")
    timezone: Optional[str] = None
    log_level: str = "WARNING"
    log_json: bool = False

    @field_validator("base_dir", mode="before")
    @classmethod
    def _expand_base_dir(cls, value: str | Path) -> Path:
        return Path(expand_home(str(value)))

    @field_validator("timezone", mode="before")
    @classmethod
    def _blank_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class Layout:
    """Directory layout below a base directory."""

    def __init__(self, base_dir: Path | str):
        self.base_dir = Path(expand_home(os.fspath(base_dir)))
        self.data_dir = self.base_dir / "data"
        self.archive_dir = self.base_dir / "archived"
        self.state_dir = self.base_dir / "state"

    @property
    def running_file(self) -> Path:
        return self.state_dir / RUNNING_FILE

    @property
    def lock_file(self) -> Path:
        return self.state_dir / LOCK_FILE

    def log_path(self, project_id: str) -> Path:
        return self.data_dir / f"{project_id}{LOG_SUFFIX}"

    def archived_path(self, project_id: str) -> Path:
        return self.archive_dir / f"{project_id}{LOG_SUFFIX}"

    def ensure(self) -> "Layout":
        for directory in (self.data_dir, self.state_dir, self.archive_dir):
            directory.mkdir(mode=0o755, parents=True, exist_ok=True)
        return self

    def __repr__(self) -> str:
        return f"Layout(base_dir={str(self.base_dir)!r})"


settings = Settings()
