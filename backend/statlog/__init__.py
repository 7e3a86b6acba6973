"""statlog: per-project work time tracking in append-only event logs."""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["__version__"]
