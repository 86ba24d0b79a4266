"""structlog configuration for Rehab Analyzer."""

import logging

import structlog

from config.settings import settings


def configure_logging(level: str = None) -> None:
    """Configure structlog with ISO timestamps and console rendering.

    Args:
        level: Log level name (default from settings).
    """
    level_name = (level or settings.log_level).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
