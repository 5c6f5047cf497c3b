import io

import pytest

from cmdispatch.dispatcher import DEFAULT
from cmdispatch.exceptions import (
    CommandNotFoundError,
    DuplicateCommandError,
    InvalidCommandNameError,
    MissingArgumentError,
    SuperCommandNotFoundError,
)
from cmdispatch.super_dispatcher import SuperStringArgsDispatcher


def test_add_super_command_shares_loggers(super_dispatcher, logged):
    assert super_dispatcher.must_dispatch(None, "math", "add", "1", "2") == (3,)
    assert logged == [("add", ["1", "2"])]


def test_duplicate_super_command(super_dispatcher):
    with pytest.raises(DuplicateCommandError, match="Super command 'math' already added"):
        super_dispatcher.add_super_command("math")


def test_invalid_super_command():
    d = SuperStringArgsDispatcher()
    with pytest.raises(InvalidCommandNameError):
        d.add_super_command("a b")
    assert d.super_commands() == []


def test_lookup(super_dispatcher):
    assert super_dispatcher.super_commands() == ["hello", "math"]
    assert super_dispatcher.get_super_command("math").has_command("add")
    assert super_dispatcher.get_super_command("nope") is None
    assert super_dispatcher.has_command("hello")
    assert not super_dispatcher.has_command("math")
    assert super_dispatcher.has_sub_command("math", "divide")
    assert not super_dispatcher.has_sub_command("math", "mul")
    assert not super_dispatcher.has_sub_command("nope", "add")


def test_unknown_super_command(super_dispatcher, logged):
    result = super_dispatcher.dispatch(None, "nope", "add", "1")
    assert isinstance(result.error, SuperCommandNotFoundError)
    assert str(result.error) == "Super command 'nope' not found"
    assert logged == []


def test_unknown_sub_command(super_dispatcher):
    result = super_dispatcher.dispatch(None, "math", "mul", "1", "2")
    assert isinstance(result.error, CommandNotFoundError)


def test_default_command_reuses_empty_super_command():
    d = SuperStringArgsDispatcher()
    root = d.add_super_command(DEFAULT)
    root.add_command("version", "", lambda: "1.0")
    d.add_default_command("", lambda: "usage")
    assert d.super_commands() == [DEFAULT]
    assert d.must_dispatch_default_command() == ("usage",)
    assert d.must_dispatch(None, DEFAULT, "version") == ("1.0",)


def test_dispatch_default_command_missing():
    result = SuperStringArgsDispatcher().dispatch_default_command()
    assert isinstance(result.error, SuperCommandNotFoundError)


# --- Combined dispatch ---


def test_combined_empty_runs_global_default():
    d = SuperStringArgsDispatcher()
    d.add_default_command("", lambda: "root")
    assert d.dispatch_combined(None, [])[:2] == (DEFAULT, DEFAULT)
    assert d.dispatch_combined(None, [])[2].value == "root"


def test_combined_single_word_runs_super_default(super_dispatcher):
    super_command, command, result = super_dispatcher.dispatch_combined(None, ["hello"])
    assert (super_command, command) == ("hello", DEFAULT)
    assert isinstance(result.error, MissingArgumentError)


def test_combined_super_default_takes_all_words(super_dispatcher):
    super_command, command, result = super_dispatcher.dispatch_combined(None, ["hello", "World"])
    assert (super_command, command) == ("hello", DEFAULT)
    assert result.value == "Hello, World"


def test_combined_sub_command(super_dispatcher):
    super_command, command, result = super_dispatcher.dispatch_combined(None, ["math", "add", "20", "22"])
    assert (super_command, command) == ("math", "add")
    assert result.value == 42


def test_combined_single_word_without_default(super_dispatcher):
    _, _, result = super_dispatcher.dispatch_combined(None, ["math"])
    assert isinstance(result.error, CommandNotFoundError)


def test_must_dispatch_combined(super_dispatcher):
    assert super_dispatcher.must_dispatch_combined(None, ["math", "add", "1", "1"]) == ("math", "add")
    with pytest.raises(SuperCommandNotFoundError):
        super_dispatcher.must_dispatch_combined(None, ["nope", "x"])


def test_commands_sorted(super_dispatcher):
    pairs = [(s, cmd.name) for s, cmd in super_dispatcher.commands()]
    assert pairs == [("hello", DEFAULT), ("math", "add"), ("math", "divide")]


def test_print_commands(super_dispatcher):
    buf = io.StringIO()
    super_dispatcher.print_commands("app", buf)
    assert buf.getvalue() == (
        "  app hello <name:string>\n"
        "      Say hello\n"
        "\n"
        "  app math add <a:int> <b:int>\n"
        "      Add two integers\n"
        "\n"
        "  app math divide <a:float> <b:float>\n"
        "      Divide a by b\n"
        "\n"
    )


def test_print_commands_usage_intro(super_dispatcher):
    buf = io.StringIO()
    super_dispatcher.print_commands_usage_intro("app", buf)
    lines = buf.getvalue().splitlines()
    assert lines[0] == "Commands:"
    assert lines[-1] == "Flags:"
