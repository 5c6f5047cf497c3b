"""Argument binding and invocation.

``bind`` checks a handler signature against an argument schema once, at
registration time, and returns a BoundInvoker. The invoker turns raw string
input (positional or keyed) into typed values, calls the handler and hands
back a Result. It never raises for bad input or a failing handler; the error
travels inside the Result.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, NamedTuple, get_type_hints

from cmdispatch.args import REQUIRED, Args, ArgSpec, ArgType
from cmdispatch.context import Context
from cmdispatch.convert import Converter, UnsupportedTypeError, compatible, infer_arg_type, make_converter
from cmdispatch.exceptions import (
    ArgumentError,
    BindingError,
    CommandError,
    InvocationError,
    MissingArgumentError,
    ResultHandlerError,
    TooManyArgumentsError,
)
from cmdispatch.results import ResultHandler, as_result_handler

logger = logging.getLogger(__name__)

RawArgs = Sequence[str] | Mapping[str, str]


@dataclass(frozen=True)
class Result:
    values: tuple = ()
    error: CommandError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def value(self) -> Any:
        """The single result value, None for no values, the tuple for several."""
        if len(self.values) == 0:
            return None
        if len(self.values) == 1:
            return self.values[0]
        return self.values

    def unwrap(self) -> tuple:
        if self.error is not None:
            raise self.error
        return self.values


class HandlerParam(NamedTuple):
    param: inspect.Parameter
    annotation: Any
    arg_type: ArgType | None
    options: tuple[str, ...]


def _type_hints(func: Callable[..., Any]) -> dict[str, Any]:
    target: Any = func
    if not (inspect.isfunction(target) or inspect.ismethod(target)) and not isinstance(target, type):
        target = getattr(type(target), "__call__", target)
    try:
        return get_type_hints(target)
    except NameError as e:
        raise BindingError(f"can't resolve handler annotations: {e}") from e
    except TypeError:
        # builtins, functools.partial and friends carry no hints
        return {}


def _analyze(func: Callable[..., Any]) -> tuple[bool, list[HandlerParam]]:
    if not callable(func):
        raise BindingError(f"handler is not callable: {func!r}")
    if inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(getattr(func, "__call__", None)):
        raise BindingError("coroutine functions can't be used as command handlers")
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as e:
        raise BindingError(f"can't inspect handler signature: {e}") from e

    hints = _type_hints(func)
    params = list(signature.parameters.values())

    takes_context = False
    if params and params[0].kind is not inspect.Parameter.KEYWORD_ONLY:
        first = hints.get(params[0].name, params[0].annotation)
        if params[0].name == "ctx" or (isinstance(first, type) and issubclass(first, Context)):
            takes_context = True
            params = params[1:]

    result = []
    for position, param in enumerate(params):
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise BindingError("variadic parameters are not supported", position, param.name)
        annotation = hints.get(param.name, param.annotation)
        if isinstance(annotation, str):
            raise BindingError(f"unresolved annotation {annotation!r}", position, param.name)
        try:
            arg_type, options = infer_arg_type(annotation)
        except UnsupportedTypeError as e:
            raise BindingError(str(e), position, param.name) from e
        result.append(HandlerParam(param, annotation, arg_type, options))
    return takes_context, result


def handler_parameters(func: Callable[..., Any]) -> list[HandlerParam]:
    """The handler's command parameters, without a leading context parameter."""
    return _analyze(func)[1]


@dataclass(frozen=True)
class _Param:
    spec: ArgSpec
    param_name: str
    keyword_only: bool
    convert: Converter


@dataclass(frozen=True)
class BoundInvoker:
    handler: Callable[..., Any]
    args: Args
    params: tuple[_Param, ...]
    takes_context: bool
    result_handlers: tuple[ResultHandler, ...] = ()

    @property
    def name(self) -> str:
        return getattr(self.handler, "__qualname__", repr(self.handler))

    def __call__(self, ctx: Context | None, raw: RawArgs) -> Result:
        if isinstance(raw, Mapping):
            return self.call_map(ctx, raw)
        return self.call_strings(ctx, raw)

    def call_strings(self, ctx: Context | None, args: Sequence[str]) -> Result:
        """Bind positional strings left to right against the schema."""
        if len(args) > len(self.params):
            return Result(error=TooManyArgumentsError(len(self.params), len(args)))
        try:
            values = tuple(
                _value(p, args[i] if i < len(args) else None) for i, p in enumerate(self.params)
            )
        except ArgumentError as e:
            return Result(error=e)
        return self.call_values(ctx, values)

    def call_map(self, ctx: Context | None, args: Mapping[str, str]) -> Result:
        """Bind named strings; keys that are not arguments are ignored."""
        try:
            values = tuple(_value(p, args.get(p.spec.name)) for p in self.params)
        except ArgumentError as e:
            return Result(error=e)
        return self.call_values(ctx, values)

    def call_values(self, ctx: Context | None, values: tuple) -> Result:
        """Call the handler with already converted values."""
        call_args: list[Any] = [ctx] if self.takes_context else []
        call_kwargs: dict[str, Any] = {}
        for p, value in zip(self.params, values):
            if p.keyword_only:
                call_kwargs[p.param_name] = value
            else:
                call_args.append(value)

        try:
            returned = self.handler(*call_args, **call_kwargs)
        except CommandError as e:
            return Result(error=e)
        except Exception as e:
            logger.exception("Command handler %s failed", self.name)
            return Result(error=InvocationError(e))

        results = normalize_results(returned)
        for handler in self.result_handlers:
            try:
                handler.handle_results(self.args, values, results)
            except Exception as e:
                logger.exception("Result handler %r failed for %s", handler, self.name)
                return Result(values=results, error=ResultHandlerError(e))
        return Result(values=results)


def _value(p: _Param, raw: str | None) -> Any:
    if raw is None:
        if p.spec.required:
            raise MissingArgumentError(p.spec.name)
        return p.spec.default
    return p.convert(raw)


def normalize_results(returned: Any) -> tuple:
    if returned is None:
        return ()
    if isinstance(returned, tuple):
        return returned
    return (returned,)


def bind(
    handler: Callable[..., Any],
    args: Args | Sequence[ArgSpec] | None = None,
    *result_handlers: ResultHandler | Callable[[Args, tuple, tuple], None],
) -> BoundInvoker:
    """Validate ``handler`` against ``args`` and build its invoker.

    With ``args=None`` the schema is inferred from the handler signature.
    Raises BindingError on arity or type mismatches.
    """
    takes_context, slots = _analyze(handler)
    if args is None:
        args = Args.from_function(handler)
    elif not isinstance(args, Args):
        args = Args(args)

    if len(args) != len(slots):
        raise BindingError(f"handler takes {len(slots)} arguments but {len(args)} are declared")

    specs = []
    params = []
    for position, (spec, slot) in enumerate(zip(args, slots)):
        if spec.type is not None and not compatible(spec.type, slot.arg_type):
            raise BindingError(
                f"declared type {spec.type.value} does not fit parameter "
                f"'{slot.param.name}' of type {slot.arg_type.value}",
                position,
                spec.name,
            )
        arg_type = spec.type or slot.arg_type or ArgType.STRING

        options = spec.options or slot.options
        if arg_type is ArgType.SELECT:
            if not options:
                raise BindingError("select argument without options", position, spec.name)
            unknown = set(options) - set(slot.options) if slot.options else set()
            if unknown:
                raise BindingError(f"options {sorted(unknown)} are not valid for the parameter", position, spec.name)

        default = spec.default
        if default is REQUIRED and slot.param.default is not inspect.Parameter.empty:
            default = slot.param.default

        try:
            convert = make_converter(spec.name, arg_type, slot.annotation, options)
        except UnsupportedTypeError as e:
            raise BindingError(str(e), position, spec.name) from e

        resolved = replace(spec, type=arg_type, default=default, options=options)
        specs.append(resolved)
        params.append(
            _Param(
                spec=resolved,
                param_name=slot.param.name,
                keyword_only=slot.param.kind is inspect.Parameter.KEYWORD_ONLY,
                convert=convert,
            )
        )

    return BoundInvoker(
        handler=handler,
        args=Args(specs),
        params=tuple(params),
        takes_context=takes_context,
        result_handlers=tuple(as_result_handler(h) for h in result_handlers),
    )
