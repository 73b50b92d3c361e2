"""Structured logging for the API client."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, cast

import structlog

from mckinley.config import Settings, get_settings

QUIET_LOGGERS = ("httpx", "httpcore", "PIL")


def _renderer_processors(json_logs: bool) -> list[Any]:
    if json_logs:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def setup_logging(settings: Settings | None = None, *, json_logs: bool | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        settings: Settings to read level and environment from (default: cached settings)
        json_logs: Force JSON (True) or console (False) output; by default
            development gets the console renderer and everything else JSON
    """
    settings = settings or get_settings()
    if json_logs is None:
        json_logs = not settings.is_development

    log_level = logging.DEBUG if settings.app_debug else logging.INFO

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + _renderer_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    # Request lines are already logged as api_request events
    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


@contextmanager
def call_context(endpoint: str, method: str) -> Iterator[None]:
    """Bind ``endpoint`` and ``method`` to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(endpoint=endpoint, method=method):
        yield
