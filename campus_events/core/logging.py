# campus_events/core/logging.py
import logging
import sys

import structlog

from campus_events.core.config import settings


def setup_logging(level: str | None = None, *, use_json: bool | None = None) -> None:
    """Configure structlog for the whole process.

    Console renderer with colors for development, JSON lines when
    ``LOG_JSON`` is enabled (CI, containers).
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    as_json = settings.LOG_JSON if use_json is None else use_json

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if as_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
