import math
from enum import Enum
from typing import Any, Literal, Optional

import pytest
from pydantic import BaseModel

from cmdispatch.args import ArgType
from cmdispatch.convert import (
    UnsupportedTypeError,
    compatible,
    infer_arg_type,
    make_converter,
    parse_bool,
)
from cmdispatch.exceptions import ArgumentConversionError


class Size(Enum):
    SMALL = "s"
    LARGE = "l"


class Point(BaseModel):
    x: int
    y: int


# --- Type inference ---


def test_infer_scalars():
    assert infer_arg_type(str) == (ArgType.STRING, ())
    assert infer_arg_type(int) == (ArgType.INT, ())
    assert infer_arg_type(float) == (ArgType.FLOAT, ())
    assert infer_arg_type(bool) == (ArgType.BOOL, ())


def test_infer_optional_and_any():
    assert infer_arg_type(Optional[int]) == (ArgType.INT, ())
    assert infer_arg_type(int | None) == (ArgType.INT, ())
    assert infer_arg_type(Any) == (None, ())


def test_infer_select():
    assert infer_arg_type(Size) == (ArgType.SELECT, ("s", "l"))
    assert infer_arg_type(Literal["a", "b"]) == (ArgType.SELECT, ("a", "b"))


def test_infer_json():
    assert infer_arg_type(list[int]) == (ArgType.JSON, ())
    assert infer_arg_type(dict) == (ArgType.JSON, ())
    assert infer_arg_type(Point) == (ArgType.JSON, ())


def test_infer_unsupported():
    with pytest.raises(UnsupportedTypeError):
        infer_arg_type(int | str)
    with pytest.raises(UnsupportedTypeError):
        infer_arg_type(complex)


def test_compatible():
    assert compatible(ArgType.INT, None)
    assert compatible(ArgType.INT, ArgType.INT)
    assert compatible(ArgType.INT, ArgType.FLOAT)
    assert compatible(ArgType.SELECT, ArgType.STRING)
    assert not compatible(ArgType.FLOAT, ArgType.INT)
    assert not compatible(ArgType.STRING, ArgType.BOOL)


# --- Converters ---


def test_parse_bool():
    assert parse_bool("true") is True
    assert parse_bool("TRUE") is True
    assert parse_bool("false") is False
    assert parse_bool("False") is False
    for raw in ("1", "yes", "", "t"):
        with pytest.raises(ValueError):
            parse_bool(raw)


def test_bool_converter_error():
    convert = make_converter("flag", ArgType.BOOL)
    with pytest.raises(ArgumentConversionError) as exc:
        convert("yes")
    assert exc.value.arg_name == "flag"
    assert exc.value.raw == "yes"
    assert exc.value.arg_type == "bool"


def test_int_converter():
    convert = make_converter("n", ArgType.INT)
    assert convert("42") == 42
    assert convert("-7") == -7
    assert convert("+5") == 5
    assert convert("007") == 7
    for raw in ("abc", "1.5", "", "1_000", " 7 ", "7\n", "\u0663", "\uff11", "0x10", "+"):
        with pytest.raises(ArgumentConversionError):
            convert(raw)


def test_float_converter():
    convert = make_converter("x", ArgType.FLOAT)
    assert convert("1.5") == 1.5
    assert convert("3") == 3.0
    assert convert("-.5") == -0.5
    assert convert("2.") == 2.0
    assert convert("1e3") == 1000.0
    assert convert("-2.5E-1") == -0.25
    assert convert("Inf") == float("inf")
    assert math.isnan(convert("nan"))
    for raw in ("one", "", ".", "1_0.5", " 1.5", "\u0661.5", "1e", "0x1p3", "in"):
        with pytest.raises(ArgumentConversionError):
            convert(raw)


def test_string_converter_is_identity():
    assert make_converter("s", ArgType.STRING)(" spaced ") == " spaced "


def test_select_converter_enum():
    convert = make_converter("size", ArgType.SELECT, Size, ("s", "l"))
    assert convert("l") is Size.LARGE
    with pytest.raises(ArgumentConversionError, match="must be one of: s, l"):
        convert("m")


def test_select_converter_plain_strings():
    convert = make_converter("mode", ArgType.SELECT, str, ("fast", "slow"))
    assert convert("fast") == "fast"
    with pytest.raises(ArgumentConversionError):
        convert("medium")


def test_select_converter_literal_ints():
    convert = make_converter("level", ArgType.SELECT, Literal[1, 2], ("1", "2"))
    assert convert("2") == 2


def test_json_converter():
    assert make_converter("items", ArgType.JSON, list[int])("[1, 2, 3]") == [1, 2, 3]
    assert make_converter("point", ArgType.JSON, Point)('{"x": 1, "y": 2}') == Point(x=1, y=2)
    assert make_converter("any", ArgType.JSON)('{"a": null}') == {"a": None}


def test_json_converter_invalid():
    convert = make_converter("items", ArgType.JSON, list[int])
    with pytest.raises(ArgumentConversionError):
        convert("[1, ")
    with pytest.raises(ArgumentConversionError):
        convert('["a"]')
