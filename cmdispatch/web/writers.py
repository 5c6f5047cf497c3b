"""Results writers turn a command's result values into an HTTP response.

A writer is handed the error of a failed call too. The writers here raise
it again so the endpoint's error handler chain produces the response.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from cmdispatch.args import Args
from cmdispatch.results import to_jsonable


@runtime_checkable
class ResultsWriter(Protocol):
    def write_results(
        self,
        args: Args,
        variables: Mapping[str, str],
        result_values: tuple,
        error: Exception | None,
        request: Request,
    ) -> Response: ...


@dataclass(frozen=True)
class ResultsWriterFunc:
    func: Callable[[Args, Mapping[str, str], tuple, Exception | None, Request], Response]

    def write_results(self, args, variables, result_values, error, request) -> Response:
        return self.func(args, variables, result_values, error, request)


def _single(result_values: tuple) -> Any:
    if len(result_values) == 1:
        return result_values[0]
    return list(result_values)


def _text(result_values: tuple) -> str:
    return "\n".join(str(v) for v in result_values)


@dataclass(frozen=True)
class JSONResultsWriter:
    """One result value is written as is, several as a JSON array."""

    status_code: int = 200

    def write_results(self, args, variables, result_values, error, request) -> Response:
        if error is not None:
            raise error
        return JSONResponse(to_jsonable(_single(result_values)), status_code=self.status_code)


@dataclass(frozen=True)
class PlaintextResultsWriter:
    def write_results(self, args, variables, result_values, error, request) -> Response:
        if error is not None:
            raise error
        return PlainTextResponse(_text(result_values))


@dataclass(frozen=True)
class HTMLResultsWriter:
    def write_results(self, args, variables, result_values, error, request) -> Response:
        if error is not None:
            raise error
        return HTMLResponse(_text(result_values))


@dataclass(frozen=True)
class ContentTypeResultsWriter:
    """Writes bytes values unchanged and everything else as text."""

    media_type: str

    def write_results(self, args, variables, result_values, error, request) -> Response:
        if error is not None:
            raise error
        body = b"".join(v if isinstance(v, bytes) else str(v).encode() for v in result_values)
        return Response(content=body, media_type=self.media_type)


RespondJSON = JSONResultsWriter()
RespondPlaintext = PlaintextResultsWriter()
RespondHTML = HTMLResultsWriter()


def respond_content_type(media_type: str) -> ContentTypeResultsWriter:
    return ContentTypeResultsWriter(media_type)
