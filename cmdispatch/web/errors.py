from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from http import HTTPStatus
from typing import Protocol, runtime_checkable

from fastapi import HTTPException, Request
from fastapi.responses import PlainTextResponse, Response

from cmdispatch.exceptions import ArgumentError, CommandNotFoundError, SuperCommandNotFoundError

logger = logging.getLogger(__name__)


@runtime_checkable
class ErrorHandler(Protocol):
    def handle_error(self, error: Exception, request: Request) -> Response | None: ...


@dataclass(frozen=True)
class ErrorHandlerFunc:
    func: Callable[[Exception, Request], Response | None]

    def handle_error(self, error: Exception, request: Request) -> Response | None:
        return self.func(error, request)


def as_error_handler(handler: ErrorHandler | Callable[[Exception, Request], Response | None]) -> ErrorHandler:
    if isinstance(handler, ErrorHandler):
        return handler
    if callable(handler):
        return ErrorHandlerFunc(handler)
    raise TypeError(f"not an error handler: {handler!r}")


class LogErrors:
    """Logs the error and leaves the response to the next handler."""

    def __init__(self, level: int = logging.WARNING) -> None:
        self._level = level

    def handle_error(self, error: Exception, request: Request) -> Response | None:
        logger.log(self._level, "%s %s failed: %s", request.method, request.url.path, error)
        return None


def status_for(error: Exception) -> int:
    if isinstance(error, HTTPException):
        return error.status_code
    if isinstance(error, (CommandNotFoundError, SuperCommandNotFoundError)):
        return HTTPStatus.NOT_FOUND
    if isinstance(error, ArgumentError):
        return HTTPStatus.BAD_REQUEST
    return HTTPStatus.INTERNAL_SERVER_ERROR


def default_error_handler(error: Exception, request: Request) -> Response:
    status = status_for(error)
    if isinstance(error, HTTPException):
        return PlainTextResponse(str(error.detail), status_code=status, headers=error.headers)
    if status >= 500:
        logger.error("%s %s: %s", request.method, request.url.path, error)
        return PlainTextResponse(HTTPStatus(status).phrase, status_code=status)
    return PlainTextResponse(str(error), status_code=status)


def handle_error(error: Exception, request: Request, handlers: Sequence[ErrorHandler] = ()) -> Response:
    """Run the handlers in order; the first response wins, else the default handler answers."""
    for handler in handlers:
        response = handler.handle_error(error, request)
        if response is not None:
            return response
    return default_error_handler(error, request)
