"""Structured logging configuration.

This module initializes structlog with a stable JSON format on stderr.
Stdout is left to CLI output so it stays machine-readable.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL

_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog bound logger with structured output.
    """
    _configure_once()
    return structlog.get_logger(name)


def configure_logging(level_name: str) -> None:
    """Configure structlog processors and the minimum level.

    Args:
        level_name: Lowercase level name such as ``info`` or ``warning``.
    """
    global _CONFIGURED
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
    _CONFIGURED = True


def _configure_once() -> None:
    if _CONFIGURED:
        return
    configure_logging(os.getenv("PACKMERGE_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().lower())


def _stderr_logger(*_args: Any) -> Any:
    # Resolve sys.stderr per call so redirected streams are honored.
    return structlog.PrintLogger(file=sys.stderr)
