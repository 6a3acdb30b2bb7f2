"""API error taxonomy and the helpers that map failures onto it."""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse

from .logging_setup import get_logger
from .models import EventCode

log = get_logger("errors")

T = TypeVar("T")


class ApiError(Exception):
    """Base class for failures that carry an HTTP status."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(ApiError):
    status_code = 400


class NotFound(ApiError):
    status_code = 404


class InternalError(ApiError):
    """Unexpected collaborator failure; the cause is chained, not exposed."""

    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)


class ExportUnavailable(ApiError):
    status_code = 501

    def __init__(self, message: str = "Site export not configured") -> None:
        super().__init__(message)


def internal_errors(
    operation: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Wrap an async operation so unexpected failures become InternalError.

    ``ApiError`` subclasses pass through untouched. Anything else is logged
    with its traceback and re-raised as ``InternalError`` chained to the
    original exception.

    Args:
        operation (str): Name recorded in the log entry.
    """

    def decorator(
        func: Callable[..., Awaitable[T]],
    ) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except ApiError:
                raise
            except Exception as exc:
                log.exception(
                    EventCode.REQUEST_FAILED.value,
                    operation=operation,
                    error=f"{type(exc).__name__}: {exc}",
                )
                raise InternalError() from exc

        return wrapper

    return decorator


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ApiError as ``{"message": ...}`` with its status code."""
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    log.log(
        level,
        "api_error",
        method=request.method,
        path=request.url.path,
        status=exc.status_code,
        message=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code, content={"message": exc.message}
    )
