"""Result handlers: post-processing of successful command results.

A result handler receives the command's argument schema, the coerced
argument values and the normalized result values. Handlers attached to a
command run in the order they were given.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import IO, Any, Protocol, runtime_checkable

from pydantic import TypeAdapter

from cmdispatch.args import Args

logger = logging.getLogger(__name__)

_ANY: TypeAdapter[Any] = TypeAdapter(Any)


@runtime_checkable
class ResultHandler(Protocol):
    def handle_results(self, args: Args, arg_values: tuple, result_values: tuple) -> None: ...


@dataclass(frozen=True)
class ResultHandlerFunc:
    """Adapts a plain function to the ResultHandler protocol."""

    func: Callable[[Args, tuple, tuple], None]

    def handle_results(self, args: Args, arg_values: tuple, result_values: tuple) -> None:
        self.func(args, arg_values, result_values)


def as_result_handler(handler: ResultHandler | Callable[[Args, tuple, tuple], None]) -> ResultHandler:
    if isinstance(handler, ResultHandler):
        return handler
    if callable(handler):
        return ResultHandlerFunc(handler)
    raise TypeError(f"not a result handler: {handler!r}")


def _out(file: IO[str] | None) -> IO[str]:
    # Resolved per call so redirected/captured stdout is honoured
    return file if file is not None else sys.stdout


@dataclass(frozen=True)
class PrintTo:
    """Writes every result value with ``print``, without separators or newline."""

    file: IO[str] | None = None

    def handle_results(self, args: Args, arg_values: tuple, result_values: tuple) -> None:
        out = _out(self.file)
        for value in result_values:
            print(value, end="", file=out)


@dataclass(frozen=True)
class PrintlnTo:
    """Writes every result value on its own line."""

    file: IO[str] | None = None
    prefix: str = ""

    def handle_results(self, args: Args, arg_values: tuple, result_values: tuple) -> None:
        out = _out(self.file)
        for value in result_values:
            print(f"{self.prefix}{value}", file=out)


@dataclass(frozen=True)
class PrintJSONTo:
    """Writes every result value as JSON, one document per line."""

    file: IO[str] | None = None
    indent: int | None = None

    def handle_results(self, args: Args, arg_values: tuple, result_values: tuple) -> None:
        out = _out(self.file)
        for value in result_values:
            print(json.dumps(to_jsonable(value), indent=self.indent), file=out)


@dataclass(frozen=True)
class LogResults:
    level: int = logging.INFO
    log: logging.Logger = logger

    def handle_results(self, args: Args, arg_values: tuple, result_values: tuple) -> None:
        self.log.log(self.level, "Command args %s -> %r", dict(zip(args.names(), arg_values)), result_values)


def to_jsonable(value: Any) -> Any:
    """Plain JSON data for models, sets, tuples, datetimes and the like."""
    return _ANY.dump_python(value, mode="json")


PrintToStdout = PrintTo()
PrintlnToStdout = PrintlnTo()
PrintJSONToStdout = PrintJSONTo()
