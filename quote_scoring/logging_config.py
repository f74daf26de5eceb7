"""
Logging setup - Quote Scoring Engine
quote_scoring/logging_config.py

Configures structlog on top of the standard logging module. The renderer
follows Settings.LOG_FORMAT ("json" for shipped logs, "console" for local runs)
and the level follows Settings.LOG_LEVEL.
"""

import logging
from typing import Optional

import structlog

from quote_scoring.config import settings


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        level: Log level name; defaults to settings.LOG_LEVEL.
        fmt: "json" or "console"; defaults to settings.LOG_FORMAT.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    fmt = fmt or settings.LOG_FORMAT
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=log_level, format="%(message)s")

    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=False,
    )
