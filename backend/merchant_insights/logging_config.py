"""Structured logging configuration using structlog.

JSON output for log aggregation in production, coloured console output
while developing.

Usage::

    from merchant_insights.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("tab_fetched", tab="revenue", metrics=9)
    # Output: {"event": "tab_fetched", "tab": "revenue", "metrics": 9, "timestamp": "...", ...}
"""

import logging
import sys
from typing import Any, Optional, TextIO

import structlog


def setup_logging(
    json_logs: bool = False, log_level: str = "INFO", stream: Optional[TextIO] = None
) -> None:
    """Configure structured logging for the application.

    Args:
        json_logs: If True, output JSON format. If False, use human-readable format.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        stream: Where log lines go (default: stdout).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        force=True,
        level=getattr(logging, log_level.upper()),
    )

    common_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=common_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name, typically __name__ of the module.

    Returns:
        Structured logger instance with bound context.
    """
    return structlog.get_logger(name)
