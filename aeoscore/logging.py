"""Structured logging configuration.

The engine only emits structlog events; it never configures logging on
import. Embedding applications call setup_logging() once, or configure
structlog themselves.
"""

import logging
import sys
from typing import Any

import structlog

from aeoscore.config import get_settings

NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Configure structlog for engine events.

    Args:
        level: Level name such as "debug"; defaults to Settings.log_level
        json_output: Render one JSON object per line; defaults to True in production
    """
    settings = get_settings()

    log_level = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO
    if json_output is None:
        json_output = settings.is_production

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=not settings.is_test and sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdout belongs to the caller, results may be printed there
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=not settings.is_test,
    )

    # Provider calls are summarized by the qualitative stage's own events
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
