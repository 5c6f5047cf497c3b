"""FastAPI endpoints that run commands.

Every endpoint gathers string variables from the request (path params,
optionally query params or the body), calls the command with them in the
threadpool and hands the outcome to a results writer. Errors go through the
error handler chain, so a response is always produced.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from fastapi import HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from cmdispatch.args import Args, ArgSpec
from cmdispatch.binder import Result, bind
from cmdispatch.config import get_settings
from cmdispatch.context import Context
from cmdispatch.dispatcher import StringArgsDispatcher
from cmdispatch.exceptions import ArgumentError, CommandError, CommandNotFoundError
from cmdispatch.web.body import Endpoint, RequestBodyArgConverter
from cmdispatch.web.errors import ErrorHandler, as_error_handler, handle_error
from cmdispatch.web.writers import ResultsWriter

logger = logging.getLogger(__name__)

Call = Callable[[Context, dict[str, str]], Result]
VarsCollector = Callable[[Request], Awaitable[dict[str, str]]]


async def path_vars(request: Request) -> dict[str, str]:
    return {name: str(value) for name, value in request.path_params.items()}


async def path_and_query_vars(request: Request) -> dict[str, str]:
    """Path params plus query params; repeated query values are joined with ';'."""
    variables = await path_vars(request)
    for name in request.query_params.keys():
        values = request.query_params.getlist(name)
        if values and values[0]:
            variables[name] = ";".join(values)
    return variables


def path_and_body_vars(body_converter: RequestBodyArgConverter) -> VarsCollector:
    async def collect(request: Request) -> dict[str, str]:
        variables = await path_vars(request)
        name, value = await body_converter.body_to_arg(request)
        if name in variables:
            raise ArgumentError(f"argument '{name}' already set by request URL path")
        variables[name] = value
        return variables

    return collect


def make_endpoint(
    call: Call,
    args: Args,
    collect_vars: VarsCollector,
    results_writer: ResultsWriter | None = None,
    error_handlers: tuple[ErrorHandler | Callable[..., Any], ...] = (),
    catch_exceptions: bool | None = None,
) -> Endpoint:
    handlers = tuple(as_error_handler(h) for h in error_handlers)
    if catch_exceptions is None:
        catch_exceptions = get_settings().catch_exceptions

    async def endpoint(request: Request) -> Response:
        try:
            variables = await collect_vars(request)
            ctx = Context(values={"request": request})
            try:
                result = await run_in_threadpool(call, ctx, variables)
            finally:
                ctx.cancel()
            if results_writer is not None:
                return results_writer.write_results(args, variables, result.values, result.error, request)
            if result.error is not None:
                return handle_error(result.error, request, handlers)
            return Response(status_code=200)
        except (CommandError, HTTPException) as e:
            return handle_error(e, request, handlers)
        except Exception as e:
            if not catch_exceptions:
                raise
            logger.exception("Recovered from exception in %s %s", request.method, request.url.path)
            return handle_error(e, request, handlers)

    return endpoint


def _bound_call(handler: Callable[..., Any], args: Args | list[ArgSpec] | None) -> tuple[Call, Args]:
    invoker = bind(handler, args)
    return invoker.call_map, invoker.args


def command_endpoint(
    handler: Callable[..., Any],
    args: Args | list[ArgSpec] | None,
    results_writer: ResultsWriter | None = None,
    *error_handlers: ErrorHandler | Callable[..., Any],
    catch_exceptions: bool | None = None,
) -> Endpoint:
    """Endpoint taking the command arguments from the path params."""
    call, bound_args = _bound_call(handler, args)
    return make_endpoint(call, bound_args, path_vars, results_writer, error_handlers, catch_exceptions)


def command_endpoint_with_query_params(
    handler: Callable[..., Any],
    args: Args | list[ArgSpec] | None,
    results_writer: ResultsWriter | None = None,
    *error_handlers: ErrorHandler | Callable[..., Any],
    catch_exceptions: bool | None = None,
) -> Endpoint:
    """Endpoint taking the command arguments from the path and query params."""
    call, bound_args = _bound_call(handler, args)
    return make_endpoint(call, bound_args, path_and_query_vars, results_writer, error_handlers, catch_exceptions)


def command_endpoint_request_body_arg(
    body_converter: RequestBodyArgConverter,
    handler: Callable[..., Any],
    args: Args | list[ArgSpec] | None,
    results_writer: ResultsWriter | None = None,
    *error_handlers: ErrorHandler | Callable[..., Any],
    catch_exceptions: bool | None = None,
) -> Endpoint:
    """Endpoint taking one argument from the request body, the rest from the path."""
    call, bound_args = _bound_call(handler, args)
    return make_endpoint(
        call, bound_args, path_and_body_vars(body_converter), results_writer, error_handlers, catch_exceptions
    )


def dispatcher_endpoint(
    dispatcher: StringArgsDispatcher,
    command: str,
    results_writer: ResultsWriter | None = None,
    *error_handlers: ErrorHandler | Callable[..., Any],
    catch_exceptions: bool | None = None,
) -> Endpoint:
    """Endpoint running a registered command through its dispatcher, observers included."""
    cmd = dispatcher.get_command(command)
    if cmd is None:
        raise CommandNotFoundError(command)

    def call(ctx: Context, variables: Mapping[str, str]) -> Result:
        return dispatcher.dispatch_map(ctx, command, variables)

    return make_endpoint(call, cmd.args, path_and_query_vars, results_writer, error_handlers, catch_exceptions)
