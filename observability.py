"""Observability helpers: structured logging through structlog.

Import `init_observability` and call it once, before the FastAPI app is
created.
"""
from __future__ import annotations

import logging
from typing import Optional

import structlog

from settings import Settings, get_settings

__all__ = [
    "init_observability",
]


def _setup_logging(settings: Settings) -> None:
    """Configure structlog for structured logging (JSON or console)."""

    log_format = settings.log_format.lower()
    log_level = settings.log_level.upper()

    # Define shared processors
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    # Choose renderer based on format
    if log_format == "json":
        final_processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [final_processor],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging (sqlalchemy, uvicorn) to stderr at the same level
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        root_logger.addHandler(logging.StreamHandler())
    root_logger.setLevel(log_level)

    # Silence noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def init_observability(settings: Optional[Settings] = None) -> None:
    """Setup logging. Call once at process start."""

    _setup_logging(settings or get_settings())

    structlog.get_logger(__name__).info("Observability initialized")
