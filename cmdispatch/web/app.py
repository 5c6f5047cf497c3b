"""FastAPI application exposing every command of a dispatcher.

Each command is served at ``{prefix}/{command}`` (``{prefix}/{super}/{command}``
for super dispatchers). GET takes the arguments from the query string, POST
additionally from the fields of a JSON object body.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI

from cmdispatch.config import Settings, get_settings as load_settings
from cmdispatch.dispatcher import Command, StringArgsDispatcher
from cmdispatch.logging_config import configure_logging
from cmdispatch.super_dispatcher import SuperStringArgsDispatcher
from cmdispatch.web.body import json_body_fields_as_vars
from cmdispatch.web.dependencies import get_command_index, get_settings
from cmdispatch.web.errors import ErrorHandler
from cmdispatch.web.handlers import dispatcher_endpoint
from cmdispatch.web.models import ArgInfo, CommandInfo, HealthResponse
from cmdispatch.web.writers import RespondJSON, ResultsWriter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    settings: Settings = Depends(get_settings),
    index: list[CommandInfo] = Depends(get_command_index),
) -> HealthResponse:
    return HealthResponse(status="ok", app=settings.app_name, commands=len(index))


async def list_commands(index: list[CommandInfo] = Depends(get_command_index)) -> list[CommandInfo]:
    return index


def _command_info(cmd: Command, path: str, super_command: str | None) -> CommandInfo:
    return CommandInfo(
        name=cmd.name,
        super_command=super_command,
        description=cmd.description,
        usage=cmd.usage(super_command or ""),
        path=path,
        args=[
            ArgInfo(
                name=spec.name,
                type=spec.type_name,
                description=spec.description,
                required=spec.required,
                options=list(spec.options),
            )
            for spec in cmd.args
        ],
    )


# Path template syntax and separators
_UNROUTABLE_CHARS = "{}/"


def _routable(segment: str) -> bool:
    return not any(c in segment for c in _UNROUTABLE_CHARS)


def _sub_dispatchers(
    dispatcher: StringArgsDispatcher | SuperStringArgsDispatcher,
) -> list[tuple[str | None, StringArgsDispatcher]]:
    if isinstance(dispatcher, SuperStringArgsDispatcher):
        return [(name, dispatcher.get_super_command(name)) for name in dispatcher.super_commands()]
    return [(None, dispatcher)]


def add_command_routes(
    router: APIRouter,
    dispatcher: StringArgsDispatcher | SuperStringArgsDispatcher,
    prefix: str = "/commands",
    results_writer: ResultsWriter | None = RespondJSON,
    *error_handlers: ErrorHandler | Callable[..., Any],
    catch_exceptions: bool | None = None,
) -> list[CommandInfo]:
    """Add GET and POST routes for every command; returns the command index.

    The global default command has no route, it only makes sense on a
    command line. Neither do names containing braces or slashes.
    """
    index = []
    for super_command, sub in _sub_dispatchers(dispatcher):
        for cmd in sub.commands():
            segments = [s for s in (super_command, cmd.name) if s]
            if not segments:
                continue
            if not all(_routable(s) for s in segments):
                logger.warning("Command %r has no route: name contains one of %r", " ".join(segments), _UNROUTABLE_CHARS)
                continue
            path = prefix.rstrip("/") + "/" + "/".join(segments)
            endpoint = dispatcher_endpoint(sub, cmd.name, results_writer, *error_handlers, catch_exceptions=catch_exceptions)
            name = " ".join(segments)
            router.add_api_route(path, endpoint, methods=["GET"], name=f"{name} (query)")
            router.add_api_route(path, json_body_fields_as_vars(endpoint), methods=["POST"], name=f"{name} (json)")
            index.append(_command_info(cmd, path, super_command))
            logger.debug("Added route %s for command %r", path, name)
    return index


def create_app(
    dispatcher: StringArgsDispatcher | SuperStringArgsDispatcher,
    settings: Settings | None = None,
    results_writer: ResultsWriter | None = RespondJSON,
    *error_handlers: ErrorHandler | Callable[..., Any],
) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file)
        logger.info("Serving %d commands under %s", len(app.state.command_index), settings.route_prefix)
        yield

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.dispatcher = dispatcher
    app.include_router(router)
    app.state.command_index = add_command_routes(
        app.router,
        dispatcher,
        settings.route_prefix,
        results_writer,
        *error_handlers,
        catch_exceptions=settings.catch_exceptions,
    )
    app.add_api_route(settings.route_prefix, list_commands, methods=["GET"], response_model=list[CommandInfo])
    return app
