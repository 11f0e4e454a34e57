"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Log lines go to stderr so stdout only carries command output.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL
from core.errors import BulkCsvConfigError


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog processors and the minimum log level.

    Args:
        level: Level name such as ``INFO`` or ``DEBUG``.

    Raises:
        BulkCsvConfigError: If the level name is unknown.
    """
    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        raise BulkCsvConfigError(
            f"Unknown log level '{level}'. Use one of DEBUG, INFO, WARNING, ERROR."
        )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def _stderr_logger_factory(*_args: Any) -> Any:
    """Create a print logger bound to the current stderr stream."""
    return structlog.PrintLogger(sys.stderr)


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)
