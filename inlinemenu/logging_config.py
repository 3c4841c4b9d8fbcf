"""structlog setup for applications embedding the menu engine."""

from __future__ import annotations

import logging
import sys

import structlog

from inlinemenu.config import settings


def configure_logging(level: int | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog and the stdlib root logger from settings.

    Explicit arguments override ``LOG_LEVEL`` / ``LOG_FORMAT``.
    """
    if level is None:
        level = settings.get_log_level()
    if json_logs is None:
        json_logs = settings.is_json_logging()

    logging.basicConfig(format='%(message)s', stream=sys.stdout, level=level)

    renderer: structlog.typing.Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
