"""Request body helpers: turn a body into command arguments."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)

Endpoint = Callable[[Request], Awaitable[Response]]


@runtime_checkable
class RequestBodyArgConverter(Protocol):
    async def body_to_arg(self, request: Request) -> tuple[str, str]:
        """Return the argument name and its string value."""
        ...


@dataclass(frozen=True)
class RequestBodyAsArg:
    """Passes the whole body, decoded as UTF-8, as one argument."""

    name: str

    async def body_to_arg(self, request: Request) -> tuple[str, str]:
        body = await request.body()
        return self.name, body.decode("utf-8")


def request_body_as_arg(name: str) -> RequestBodyAsArg:
    return RequestBodyAsArg(name)


def stringify(value: Any) -> str | None:
    """String form of a decoded JSON value; None for JSON null."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        # 3.0 must still convert to an int argument
        return str(int(value))
    return str(value)


async def _json_object(request: Request) -> dict[str, Any] | None:
    try:
        data = await request.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _bad_request() -> Response:
    return PlainTextResponse("Bad Request", status_code=400)


def _set_path_params(request: Request, fields: Mapping[str, Any]) -> None:
    params = dict(request.path_params)
    for name, value in fields.items():
        text = stringify(value)
        if text is not None:
            params[name] = text
    request.scope["path_params"] = params


def json_body_fields_as_vars(endpoint: Endpoint) -> Endpoint:
    """Wrap ``endpoint`` so every field of a JSON object body becomes a path param."""

    async def wrapper(request: Request) -> Response:
        fields = await _json_object(request)
        if fields is None:
            return _bad_request()
        _set_path_params(request, fields)
        return await endpoint(request)

    return wrapper


def map_json_body_fields_as_vars(mapping: Mapping[str, str], endpoint: Endpoint) -> Endpoint:
    """Like json_body_fields_as_vars, but only for the fields in ``mapping`` (body field -> var name)."""

    async def wrapper(request: Request) -> Response:
        fields = await _json_object(request)
        if fields is None:
            return _bad_request()
        _set_path_params(request, {var: fields[field] for field, var in mapping.items() if field in fields})
        return await endpoint(request)

    return wrapper
