"""Logging configuration using structlog."""

from __future__ import annotations

import logging
import sys

import structlog


def _shared_processors() -> list[structlog.typing.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_defaults() -> None:
    """Route structlog through the standard library until ``setup_logging`` runs.

    Without handlers the standard library only reports warnings and errors on
    stderr, so library callers that never configure logging see no INFO noise.
    """
    structlog.configure(
        processors=_shared_processors() + [structlog.dev.ConsoleRenderer(colors=False)],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def setup_logging(level: str = "WARNING", json: bool = False) -> None:
    """Configure structlog on top of the standard library logger.

    Args:
        level: Name of the minimum level to emit.
        json: If True, render JSON lines instead of console key/values.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.WARNING
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    if json:
        processors = _shared_processors() + [structlog.processors.JSONRenderer()]
    else:
        processors = _shared_processors() + [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


if not structlog.is_configured():
    configure_defaults()
