"""Exception hierarchy for cmdispatch.

CommandError
├── RegistrationError
│   ├── DuplicateCommandError
│   ├── InvalidCommandNameError
│   └── BindingError
├── CommandNotFoundError
├── SuperCommandNotFoundError
├── ArgumentError
│   ├── ArgumentConversionError
│   ├── MissingArgumentError
│   └── TooManyArgumentsError
└── InvocationError
    └── ResultHandlerError
"""

from __future__ import annotations


class CommandError(Exception):
    """Base exception for all cmdispatch errors."""


# --- Registration ----------------------------------------------------------


class RegistrationError(CommandError):
    """Raised when a command cannot be registered."""


class DuplicateCommandError(RegistrationError):
    def __init__(self, command: str, kind: str = "command") -> None:
        self.command = command
        super().__init__(f"{kind.capitalize()} '{command}' already added")


class InvalidCommandNameError(RegistrationError):
    def __init__(self, command: str, reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"Command '{command}': {reason}")


class BindingError(RegistrationError):
    """The handler signature and the declared arguments do not fit together."""

    def __init__(self, message: str, position: int | None = None, arg_name: str | None = None) -> None:
        self.position = position
        self.arg_name = arg_name
        if arg_name is not None:
            message = f"argument {position} '{arg_name}': {message}"
        super().__init__(message)


# --- Lookup ----------------------------------------------------------------


class CommandNotFoundError(CommandError):
    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"command not found: '{command}'")


class SuperCommandNotFoundError(CommandError):
    def __init__(self, super_command: str) -> None:
        self.super_command = super_command
        super().__init__(f"Super command '{super_command}' not found")


# --- Arguments -------------------------------------------------------------


class ArgumentError(CommandError):
    """Raised when raw input cannot be turned into handler arguments."""


class ArgumentConversionError(ArgumentError):
    def __init__(self, arg_name: str, raw: str, arg_type: str, reason: str = "") -> None:
        self.arg_name = arg_name
        self.raw = raw
        self.arg_type = arg_type
        message = f"can't convert argument '{arg_name}' value {raw!r} to {arg_type}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MissingArgumentError(ArgumentError):
    def __init__(self, arg_name: str) -> None:
        self.arg_name = arg_name
        super().__init__(f"missing argument '{arg_name}'")


class TooManyArgumentsError(ArgumentError):
    def __init__(self, expected: int, got: int) -> None:
        self.expected = expected
        self.got = got
        super().__init__(f"expected at most {expected} arguments, got {got}")


# --- Invocation ------------------------------------------------------------


class InvocationError(CommandError):
    """The handler raised. The original exception is kept as ``cause``."""

    def __init__(self, cause: BaseException, message: str | None = None) -> None:
        self.cause = cause
        super().__init__(message or f"{type(cause).__name__}: {cause}")
        self.__cause__ = cause


class ResultHandlerError(InvocationError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(cause, f"result handler failed: {type(cause).__name__}: {cause}")
