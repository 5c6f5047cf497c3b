"""Two level command trees: ``app <super> <command> args...``."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence
from typing import IO, Any

from cmdispatch.args import Args, ArgSpec
from cmdispatch.binder import RawArgs, Result
from cmdispatch.context import Context, background
from cmdispatch.dispatcher import (
    DEFAULT,
    Command,
    CommandLogger,
    StringArgsDispatcher,
    check_command_chars,
    print_command,
    unwrap_result,
)
from cmdispatch.exceptions import DuplicateCommandError, SuperCommandNotFoundError
from cmdispatch.results import ResultHandler

logger = logging.getLogger(__name__)


class SuperStringArgsDispatcher:
    def __init__(self, *loggers: CommandLogger | Callable[[str, RawArgs], None]) -> None:
        self._sub: dict[str, StringArgsDispatcher] = {}
        self._loggers = loggers

    def add_super_command(self, super_command: str) -> StringArgsDispatcher:
        """Create the sub dispatcher for ``super_command`` and return it."""
        if super_command != DEFAULT:
            check_command_chars(super_command)
        if super_command in self._sub:
            raise DuplicateCommandError(super_command, kind="super command")
        sub = StringArgsDispatcher(*self._loggers)
        self._sub[super_command] = sub
        logger.debug("Registered super command %r", super_command)
        return sub

    def add_default_command(
        self,
        description: str,
        handler: Callable[..., Any],
        args: Args | Sequence[ArgSpec] | None = None,
        *result_handlers: ResultHandler | Callable[[Args, tuple, tuple], None],
    ) -> Command:
        sub = self._sub.get(DEFAULT)
        if sub is None:
            sub = self.add_super_command(DEFAULT)
        return sub.add_default_command(description, handler, args, *result_handlers)

    def get_super_command(self, super_command: str) -> StringArgsDispatcher | None:
        return self._sub.get(super_command)

    def super_commands(self) -> list[str]:
        return sorted(self._sub)

    def has_command(self, super_command: str) -> bool:
        """True if ``super_command`` exists and can run without a sub command."""
        sub = self._sub.get(super_command)
        return sub is not None and sub.has_default_command()

    def has_sub_command(self, super_command: str, command: str) -> bool:
        sub = self._sub.get(super_command)
        return sub is not None and sub.has_command(command)

    def dispatch(self, ctx: Context | None, super_command: str, command: str, *args: str) -> Result:
        sub = self._sub.get(super_command)
        if sub is None:
            return Result(error=SuperCommandNotFoundError(super_command))
        return sub.dispatch(ctx, command, *args)

    def dispatch_default_command(self) -> Result:
        return self.dispatch(background(), DEFAULT, DEFAULT)

    def dispatch_combined(
        self, ctx: Context | None, command_and_args: Sequence[str]
    ) -> tuple[str, str, Result]:
        """Split words into super command, command and arguments, then dispatch.

        A super command that has a default command takes all following
        words as its arguments; otherwise the second word names the sub
        command.
        """
        args: Sequence[str] = ()
        if len(command_and_args) == 0:
            super_command, command = DEFAULT, DEFAULT
        elif len(command_and_args) == 1:
            super_command, command = command_and_args[0], DEFAULT
        else:
            super_command = command_and_args[0]
            if self.has_command(super_command):
                command = DEFAULT
                args = command_and_args[1:]
            else:
                command = command_and_args[1]
                args = command_and_args[2:]
        return super_command, command, self.dispatch(ctx, super_command, command, *args)

    def must_dispatch(self, ctx: Context | None, super_command: str, command: str, *args: str) -> tuple:
        result = self.dispatch(ctx, super_command, command, *args)
        return unwrap_result(result, f"Command '{super_command} {command}'")

    def must_dispatch_default_command(self) -> tuple:
        return unwrap_result(self.dispatch_default_command(), "Default command")

    def must_dispatch_combined(self, ctx: Context | None, command_and_args: Sequence[str]) -> tuple[str, str]:
        super_command, command, result = self.dispatch_combined(ctx, command_and_args)
        unwrap_result(result, f"must_dispatch_combined({list(command_and_args)!r})")
        return super_command, command

    def commands(self) -> list[tuple[str, Command]]:
        """All (super command, command) pairs, sorted."""
        pairs = [(name, cmd) for name, sub in self._sub.items() for cmd in sub.commands()]
        return sorted(pairs, key=lambda pair: (pair[0], pair[1].name))

    def print_commands(self, app_name: str, file: IO[str] | None = None) -> None:
        out = file if file is not None else sys.stdout
        for super_command, cmd in self.commands():
            invocation = " ".join(p for p in (app_name, super_command, cmd.name) if p)
            print_command(cmd, invocation, out)

    def print_commands_usage_intro(self, app_name: str, file: IO[str] | None = None) -> None:
        out = file if file is not None else sys.stdout
        if self._sub:
            print("Commands:", file=out)
            self.print_commands(app_name, out)
            print("Flags:", file=out)
