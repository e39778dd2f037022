"""Structured logging configuration.

Call `setup_logging()` once at application startup. Components take an
explicit logger handle and default to `get_logger(__name__)`.
"""

from __future__ import annotations

import sys
from typing import Any

import structlog

LOG_LEVELS = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
}


def level_from_name(name: str) -> int:
    """Map a level name (case-insensitive) to its numeric value.

    Raises:
        ValueError: If the name is not a known level.
    """
    try:
        return LOG_LEVELS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log level: {name} (expected one of: {', '.join(LOG_LEVELS)})"
        ) from None


def setup_logging(level: int | str = "warning", json_output: bool = False) -> None:
    """Configure structlog for the entire application.

    Logs go to stderr so command output on stdout stays clean.

    Args:
        level: Minimum log level, as a number or a name ("debug", "info", ...).
        json_output: If True, emit machine-readable JSON logs.
            If False, emit human-readable console logs.
    """
    if isinstance(level, str):
        level = level_from_name(level)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_output:
        shared_processors.append(structlog.processors.format_exc_info)
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Get a structlog logger bound to a component name."""
    return structlog.get_logger(name)
