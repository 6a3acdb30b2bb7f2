"""Centralised structured logging configuration."""

from __future__ import annotations

import logging
from typing import Any

import structlog


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structlog and stdlib logging for the API.

    Args:
        level (str): Root log level name, e.g. ``"INFO"``.
        json_logs (bool): Render JSON lines when True, console output otherwise.
    """

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    # Plain message format so the structlog renderer controls the entire line
    logging.basicConfig(level=level, format="%(message)s")
    logging.getLogger().setLevel(level)
    for noisy in ("uvicorn", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.configure(
        processors=[*shared_processors, renderer],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def bind_request_id(request_id: str) -> None:
    """Bind a request identifier for correlation across log lines.

    Args:
        request_id (str): Identifier of the inbound HTTP request.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger bound with the provided name.

    Args:
        name (str): Logical logger name (typically module or component).

    Returns:
        structlog.stdlib.BoundLogger: Structured logger ready for event binding.
    """
    return structlog.get_logger(name)
