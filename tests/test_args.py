from enum import Enum
from typing import Literal

import pytest

from cmdispatch.args import NO_ARGS, REQUIRED, Args, ArgSpec, ArgType
from cmdispatch.context import Context
from cmdispatch.exceptions import BindingError


class Color(Enum):
    RED = "red"
    GREEN = "green"


def test_arg_spec_defaults():
    spec = ArgSpec("name")
    assert spec.type is None
    assert spec.default is REQUIRED
    assert spec.required
    assert spec.type_name == "any"
    assert spec.usage() == "<name:any>"


def test_arg_spec_type_from_string():
    spec = ArgSpec("count", "int", default=1)
    assert spec.type is ArgType.INT
    assert not spec.required
    assert spec.usage() == "[<count:int>]"


def test_arg_spec_rejects_bad_name():
    with pytest.raises(BindingError):
        ArgSpec("not a name")
    with pytest.raises(BindingError):
        ArgSpec("")


def test_arg_spec_unknown_type():
    with pytest.raises(ValueError):
        ArgSpec("x", "complex")


def test_arg_spec_options_are_strings():
    assert ArgSpec("n", ArgType.SELECT, options=(1, 2)).options == ("1", "2")


def test_args_duplicate_name():
    with pytest.raises(BindingError, match="duplicate argument name"):
        Args([ArgSpec("a"), ArgSpec("a")])


def test_args_sequence_behaviour():
    args = Args([ArgSpec("a", ArgType.INT), ArgSpec("b", ArgType.STRING, "second")])
    assert len(args) == 2
    assert args[0].name == "a"
    assert args.names() == ["a", "b"]
    assert args.get("b").description == "second"
    assert args.get("c") is None
    assert args.has_descriptions()
    assert str(args) == "<a:int> <b:string>"
    assert args == Args([ArgSpec("a", ArgType.INT), ArgSpec("b", ArgType.STRING, "second")])


def test_no_args():
    assert len(NO_ARGS) == 0
    assert str(NO_ARGS) == ""
    assert not NO_ARGS.has_descriptions()


def test_from_function():
    def handler(ctx: Context, name: str, count: int = 2, *, color: Color = Color.RED, ok: bool = False):
        pass

    args = Args.from_function(handler, {"name": "who"})
    assert args.names() == ["name", "count", "color", "ok"]
    assert [spec.type for spec in args] == [ArgType.STRING, ArgType.INT, ArgType.SELECT, ArgType.BOOL]
    assert args.get("name").description == "who"
    assert args.get("name").required
    assert args.get("count").default == 2
    assert args.get("color").options == ("red", "green")
    assert args.get("color").default is Color.RED


def test_from_function_literal_and_untyped():
    def handler(mode: Literal["fast", "slow"], anything):
        pass

    args = Args.from_function(handler)
    assert args.get("mode").type is ArgType.SELECT
    assert args.get("mode").options == ("fast", "slow")
    assert args.get("anything").type is None
