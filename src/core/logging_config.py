"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Modules log named events with keyword fields instead of free text.
"""

from __future__ import annotations

from typing import Any

import structlog

_CONFIGURED = False


def configure_logging() -> None:
    """Configure structlog processors once per process.

    Rendered events are handed to stdlib logging, so handlers and levels
    are owned by the embedding application.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    configure_logging()
    return structlog.get_logger(name)
