"""Command line runner: ``app [super] command args...``.

Flags are limited to ``-h/--help``; every other word is handed to the
dispatcher. Results are printed by the commands' own result handlers.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import IO

from cmdispatch.config import get_settings
from cmdispatch.context import Context, background
from cmdispatch.dispatcher import StringArgsDispatcher
from cmdispatch.exceptions import CommandNotFoundError, SuperCommandNotFoundError
from cmdispatch.super_dispatcher import SuperStringArgsDispatcher

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def _build_parser(app_name: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=app_name, add_help=False)
    parser.add_argument("-h", "--help", action="store_true", help="show this help message and exit")
    parser.add_argument("words", nargs=argparse.REMAINDER)
    return parser


def print_usage(
    dispatcher: StringArgsDispatcher | SuperStringArgsDispatcher,
    app_name: str,
    file: IO[str] | None = None,
) -> None:
    out = file if file is not None else sys.stdout
    parser = _build_parser(app_name)
    print(parser.format_usage(), end="", file=out)
    dispatcher.print_commands_usage_intro(app_name, out)
    print("  -h, --help  show this help message and exit", file=out)


def run(
    dispatcher: StringArgsDispatcher | SuperStringArgsDispatcher,
    argv: Sequence[str] | None = None,
    app_name: str | None = None,
    ctx: Context | None = None,
) -> int:
    """Dispatch ``argv`` (default ``sys.argv[1:]``) and return a process exit code."""
    app_name = app_name or get_settings().app_name
    ns = _build_parser(app_name).parse_args(list(sys.argv[1:] if argv is None else argv))
    if ns.help:
        print_usage(dispatcher, app_name)
        return EXIT_OK

    ctx = ctx or background()
    if isinstance(dispatcher, SuperStringArgsDispatcher):
        super_command, command, result = dispatcher.dispatch_combined(ctx, ns.words)
        label = " ".join(p for p in (super_command, command) if p)
    else:
        command, result = dispatcher.dispatch_combined(ctx, ns.words)
        label = command

    if result.error is None:
        return EXIT_OK

    logger.debug("Command %r failed", label, exc_info=result.error)
    print(f"{app_name}: {result.error}", file=sys.stderr)
    if isinstance(result.error, (CommandNotFoundError, SuperCommandNotFoundError)):
        print_usage(dispatcher, app_name, sys.stderr)
        return EXIT_USAGE
    return EXIT_ERROR
