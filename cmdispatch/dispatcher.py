from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import IO, Any, Protocol, runtime_checkable

from cmdispatch.args import Args, ArgSpec
from cmdispatch.binder import BoundInvoker, RawArgs, Result, bind
from cmdispatch.context import Context, background
from cmdispatch.exceptions import (
    BindingError,
    CommandNotFoundError,
    DuplicateCommandError,
    InvalidCommandNameError,
)
from cmdispatch.results import ResultHandler

logger = logging.getLogger(__name__)

DEFAULT = ""

_INVALID_CHARS = "|&;()<>"


def check_command_chars(command: str) -> None:
    """Raise InvalidCommandNameError unless ``command`` is a usable command word."""
    if any(c.isspace() for c in command):
        raise InvalidCommandNameError(command, "command contains space characters")
    if not any(c.isprintable() for c in command):
        raise InvalidCommandNameError(command, "command contains no graphic characters")
    if any(c in _INVALID_CHARS for c in command):
        raise InvalidCommandNameError(command, f"command contains one of the invalid characters {_INVALID_CHARS!r}")


@runtime_checkable
class CommandLogger(Protocol):
    def log_command(self, command: str, args: RawArgs) -> None: ...


@dataclass(frozen=True)
class CommandLoggerFunc:
    func: Callable[[str, RawArgs], None]

    def log_command(self, command: str, args: RawArgs) -> None:
        self.func(command, args)


class LoggingCommandLogger:
    """Logs every dispatched command through the ``logging`` module."""

    def __init__(self, level: int = logging.INFO, log: logging.Logger | None = None) -> None:
        self._level = level
        self._log = log or logger

    def log_command(self, command: str, args: RawArgs) -> None:
        self._log.log(self._level, "Dispatching command %r args=%r", command, args)


def _as_command_logger(obj: CommandLogger | Callable[[str, RawArgs], None]) -> CommandLogger:
    if isinstance(obj, CommandLogger):
        return obj
    if callable(obj):
        return CommandLoggerFunc(obj)
    raise TypeError(f"not a command logger: {obj!r}")


@dataclass(frozen=True)
class Command:
    name: str
    description: str
    args: Args
    handler: Callable[..., Any]
    invoker: BoundInvoker
    result_handlers: tuple[ResultHandler, ...] = ()

    def usage(self, prefix: str = "") -> str:
        return " ".join(part for part in (prefix, self.name, str(self.args)) if part)


class StringArgsDispatcher:
    """Registry of named commands taking string arguments."""

    def __init__(self, *loggers: CommandLogger | Callable[[str, RawArgs], None]) -> None:
        self._commands: dict[str, Command] = {}
        self._loggers: tuple[CommandLogger, ...] = tuple(_as_command_logger(lg) for lg in loggers)

    @property
    def loggers(self) -> tuple[CommandLogger, ...]:
        return self._loggers

    # --- Registration ---

    def add_command(
        self,
        command: str,
        description: str,
        handler: Callable[..., Any],
        args: Args | Sequence[ArgSpec] | None = None,
        *result_handlers: ResultHandler | Callable[[Args, tuple, tuple], None],
    ) -> Command:
        if command in self._commands:
            raise DuplicateCommandError(command)
        check_command_chars(command)
        return self._add(command, description, handler, args, result_handlers)

    def add_default_command(
        self,
        description: str,
        handler: Callable[..., Any],
        args: Args | Sequence[ArgSpec] | None = None,
        *result_handlers: ResultHandler | Callable[[Args, tuple, tuple], None],
    ) -> Command:
        if DEFAULT in self._commands:
            raise DuplicateCommandError("default", kind="default command")
        return self._add(DEFAULT, description, handler, args, result_handlers)

    def command(
        self,
        name: str | None = None,
        description: str | None = None,
        args: Args | Sequence[ArgSpec] | None = None,
        *result_handlers: ResultHandler | Callable[[Args, tuple, tuple], None],
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of add_command.

        The name defaults to the function name (pass DEFAULT for the default
        command), the description to the first docstring line.
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            desc = description
            if desc is None:
                doc = (func.__doc__ or "").strip()
                desc = doc.splitlines()[0].strip() if doc else ""
            command = func.__name__ if name is None else name
            if command == DEFAULT:
                self.add_default_command(desc, func, args, *result_handlers)
            else:
                self.add_command(command, desc, func, args, *result_handlers)
            return func

        return decorator

    def _add(self, command, description, handler, args, result_handlers) -> Command:
        label = f"Command '{command}'" if command != DEFAULT else "Default command"
        try:
            invoker = bind(handler, args, *result_handlers)
        except BindingError as e:
            e.args = (f"{label}: {e}",)
            raise
        cmd = Command(
            name=command,
            description=description,
            args=invoker.args,
            handler=handler,
            invoker=invoker,
            result_handlers=invoker.result_handlers,
        )
        self._commands[command] = cmd
        logger.debug("Registered command %r %s", command, invoker.args)
        return cmd

    # --- Lookup ---

    def has_command(self, command: str) -> bool:
        return command in self._commands

    def has_default_command(self) -> bool:
        return DEFAULT in self._commands

    def get_command(self, command: str) -> Command | None:
        return self._commands.get(command)

    def commands(self) -> list[Command]:
        return sorted(self._commands.values(), key=lambda c: c.name)

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, command: object) -> bool:
        return command in self._commands

    # --- Dispatch ---

    def dispatch(self, ctx: Context | None, command: str, *args: str) -> Result:
        return self._dispatch(ctx, command, list(args))

    def dispatch_map(self, ctx: Context | None, command: str, args: Mapping[str, str]) -> Result:
        return self._dispatch(ctx, command, dict(args))

    def _dispatch(self, ctx: Context | None, command: str, args: RawArgs) -> Result:
        cmd = self._commands.get(command)
        if cmd is None:
            return Result(error=CommandNotFoundError(command))
        for command_logger in self._loggers:
            command_logger.log_command(command, args)
        return cmd.invoker(ctx if ctx is not None else background(), args)

    def dispatch_default_command(self) -> Result:
        return self.dispatch(background(), DEFAULT)

    def dispatch_combined(self, ctx: Context | None, command_and_args: Sequence[str]) -> tuple[str, Result]:
        """Treat the first word as the command and the rest as its arguments."""
        if not command_and_args:
            return DEFAULT, self.dispatch_default_command()
        command, *args = command_and_args
        return command, self.dispatch(ctx, command, *args)

    # --- must_*: raise instead of returning the error ---

    def must_dispatch(self, ctx: Context | None, command: str, *args: str) -> tuple:
        return unwrap_result(self.dispatch(ctx, command, *args), f"Command '{command}'")

    def must_dispatch_map(self, ctx: Context | None, command: str, args: Mapping[str, str]) -> tuple:
        return unwrap_result(self.dispatch_map(ctx, command, args), f"Command '{command}'")

    def must_dispatch_default_command(self) -> tuple:
        return unwrap_result(self.dispatch_default_command(), "Default command")

    def must_dispatch_combined(self, ctx: Context | None, command_and_args: Sequence[str]) -> str:
        command, result = self.dispatch_combined(ctx, command_and_args)
        unwrap_result(result, f"must_dispatch_combined({list(command_and_args)!r})")
        return command

    # --- Usage ---

    def print_commands(self, app_name: str, file: IO[str] | None = None) -> None:
        out = file if file is not None else sys.stdout
        for cmd in self.commands():
            print_command(cmd, " ".join(p for p in (app_name, cmd.name) if p), out)

    def print_commands_usage_intro(self, app_name: str, file: IO[str] | None = None) -> None:
        out = file if file is not None else sys.stdout
        if self._commands:
            print("Commands:", file=out)
            self.print_commands(app_name, out)
            print("Flags:", file=out)


def print_command(cmd: Command, invocation: str, out: IO[str]) -> None:
    print(f"  {invocation} {cmd.args}".rstrip(), file=out)
    if cmd.description:
        print(f"      {cmd.description}", file=out)
    if cmd.args.has_descriptions():
        for spec in cmd.args:
            print(f"          <{spec.name}:{spec.type_name}> {spec.description}".rstrip(), file=out)
    print(file=out)


def unwrap_result(result: Result, label: str) -> tuple:
    if result.error is not None:
        logger.error("%s failed: %s", label, result.error)
        raise result.error
    return result.values
