"""String to typed value coercion.

Converters are built once per handler parameter when a command is bound,
so each dispatch only pays for the actual parsing.
"""

from __future__ import annotations

import inspect
import re
import types
from collections.abc import Callable
from enum import Enum
from typing import Any, Literal, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from cmdispatch.args import ArgType
from cmdispatch.exceptions import ArgumentConversionError

Converter = Callable[[str], Any]

_JSON_CONTAINERS = (list, dict, tuple, set, frozenset)

# Plain ASCII decimal syntax, stricter than int() and float()
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


class UnsupportedTypeError(TypeError):
    pass


def infer_arg_type(annotation: Any) -> tuple[ArgType | None, tuple[str, ...]]:
    """Map a parameter annotation to an ArgType and its select options.

    Returns ``(None, ())`` for unannotated parameters and ``Any``.
    Optional[X] is treated as X.
    """
    if annotation is inspect.Parameter.empty or annotation is Any:
        return None, ()

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(annotation) if a is not type(None)]
        if len(members) != 1:
            raise UnsupportedTypeError(f"union type {annotation!r} is not supported")
        return infer_arg_type(members[0])

    if annotation is bool:
        return ArgType.BOOL, ()
    if annotation is str:
        return ArgType.STRING, ()
    if annotation is int:
        return ArgType.INT, ()
    if annotation is float:
        return ArgType.FLOAT, ()
    if origin is Literal:
        return ArgType.SELECT, tuple(str(v) for v in get_args(annotation))
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return ArgType.SELECT, tuple(str(member.value) for member in annotation)
    if annotation in _JSON_CONTAINERS or origin in _JSON_CONTAINERS:
        return ArgType.JSON, ()
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return ArgType.JSON, ()

    raise UnsupportedTypeError(f"unsupported parameter type {annotation!r}")


def compatible(declared: ArgType, inferred: ArgType | None) -> bool:
    if inferred is None or declared is inferred:
        return True
    # An int parses fine into a float parameter, and any string
    # parameter can be restricted to a set of options.
    return (declared, inferred) in {
        (ArgType.INT, ArgType.FLOAT),
        (ArgType.SELECT, ArgType.STRING),
    }


def parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError("expected 'true' or 'false'")


def parse_int(raw: str) -> int:
    if not _INT_RE.fullmatch(raw):
        raise ValueError("invalid decimal integer syntax")
    return int(raw, 10)


def parse_float(raw: str) -> float:
    if not _FLOAT_RE.fullmatch(raw):
        raise ValueError("invalid decimal float syntax")
    return float(raw)


def make_converter(
    name: str,
    arg_type: ArgType,
    annotation: Any = inspect.Parameter.empty,
    options: tuple[str, ...] = (),
) -> Converter:
    """Build the converter for one parameter.

    Raises UnsupportedTypeError when the annotation cannot be parsed from JSON.
    """
    if arg_type is ArgType.STRING:
        return lambda raw: raw

    if arg_type is ArgType.INT:
        return _wrap(name, arg_type, parse_int)

    if arg_type is ArgType.FLOAT:
        return _wrap(name, arg_type, parse_float)

    if arg_type is ArgType.BOOL:
        return _wrap(name, arg_type, parse_bool)

    if arg_type is ArgType.SELECT:
        return _select_converter(name, annotation, options)

    if arg_type is ArgType.JSON:
        target = Any if annotation is inspect.Parameter.empty else annotation
        try:
            adapter: TypeAdapter[Any] = TypeAdapter(target)
        except PydanticSchemaGenerationError as e:
            raise UnsupportedTypeError(str(e)) from e

        def convert_json(raw: str) -> Any:
            try:
                return adapter.validate_json(raw)
            except ValidationError as e:
                raise ArgumentConversionError(name, raw, arg_type.value, _first_error(e)) from e

        return convert_json

    raise UnsupportedTypeError(f"unknown argument type {arg_type!r}")


def _wrap(name: str, arg_type: ArgType, parse: Callable[[str], Any]) -> Converter:
    def convert(raw: str) -> Any:
        try:
            return parse(raw)
        except ValueError as e:
            raise ArgumentConversionError(name, raw, arg_type.value, str(e)) from e

    return convert


def _select_converter(name: str, annotation: Any, options: tuple[str, ...]) -> Converter:
    choices: dict[str, Any] = {option: option for option in options}

    target = annotation
    if get_origin(target) is Union or get_origin(target) is types.UnionType:
        target = next(a for a in get_args(target) if a is not type(None))
    if isinstance(target, type) and issubclass(target, Enum):
        members = {str(member.value): member for member in target}
        choices = {option: members[option] for option in options if option in members}
    elif get_origin(target) is Literal:
        literals = {str(v): v for v in get_args(target)}
        choices = {option: literals[option] for option in options if option in literals}

    allowed = ", ".join(choices)

    def convert(raw: str) -> Any:
        try:
            return choices[raw]
        except KeyError:
            raise ArgumentConversionError(
                name, raw, ArgType.SELECT.value, f"must be one of: {allowed}"
            ) from None

    return convert


def _first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return str(e)
    return errors[0].get("msg", str(e))
