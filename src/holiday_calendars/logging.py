"""Logging configuration for the holiday_calendars package."""

import logging
import time
from contextlib import contextmanager
from typing import Generator, Optional

import structlog


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structlog logger."""
    return structlog.get_logger(name or "holiday_calendars")


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
) -> None:
    """Configure holiday_calendars logging.

    Args:
        level: Log level ("DEBUG", "INFO", "WARNING", "ERROR")
        json_output: True for JSON output (production), False for console
    """
    numeric_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", level=numeric_level)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors = shared_processors + [structlog.processors.JSONRenderer()]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def timed_block(
    logger: structlog.BoundLogger,
    event: str,
    level: str = "debug",
    **fields,
) -> Generator[dict, None, None]:
    """Context manager for timing code blocks.

    Yields the dict of event fields, so the block can add results to the event.
    """
    start = time.perf_counter()
    try:
        yield fields
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        getattr(logger, level)(event, elapsed_ms=round(elapsed_ms, 2), **fields)
