"""Command dispatch with typed arguments bound from strings.

Provides:
- StringArgsDispatcher / SuperStringArgsDispatcher: command registries
- bind / BoundInvoker / Result: argument binding and invocation
- Args / ArgSpec / ArgType: argument schemas
- result handlers for the command line print path
"""

from cmdispatch.args import NO_ARGS, REQUIRED, Args, ArgSpec, ArgType
from cmdispatch.binder import BoundInvoker, Result, bind
from cmdispatch.context import Context, background
from cmdispatch.dispatcher import (
    DEFAULT,
    Command,
    CommandLogger,
    CommandLoggerFunc,
    LoggingCommandLogger,
    StringArgsDispatcher,
    check_command_chars,
)
from cmdispatch.exceptions import (
    ArgumentConversionError,
    ArgumentError,
    BindingError,
    CommandError,
    CommandNotFoundError,
    DuplicateCommandError,
    InvalidCommandNameError,
    InvocationError,
    MissingArgumentError,
    RegistrationError,
    ResultHandlerError,
    SuperCommandNotFoundError,
    TooManyArgumentsError,
)
from cmdispatch.results import (
    LogResults,
    PrintJSONTo,
    PrintJSONToStdout,
    PrintlnTo,
    PrintlnToStdout,
    PrintTo,
    PrintToStdout,
    ResultHandler,
    ResultHandlerFunc,
)
from cmdispatch.super_dispatcher import SuperStringArgsDispatcher

__version__ = "0.1.0"
