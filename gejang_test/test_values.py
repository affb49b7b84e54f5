import math

import pytest

from gejang.language.lox_callable import LoxFunction, LoxNativeFunction
from gejang.language.lox_class import LoxClass, LoxInstance
from gejang.language.lox_types import (FunctionKind, lox_division, lox_equality, lox_kind_name, lox_object_to_repr,
                                       lox_object_to_str, lox_truth)
from gejang.lexing.token import Tk, Token
from gejang.parsing.stmt import FunctionStmt


def declaration(name: str, *params: str) -> FunctionStmt:
    return FunctionStmt(
        Token.create_arbitrary(Tk.IDENTIFIER, name),
        [Token.create_arbitrary(Tk.IDENTIFIER, param) for param in params],
        []
    )


@pytest.mark.parametrize("obj, expected", [
    (None, "nil"),
    (True, "true"),
    (False, "false"),
    (3.0, "3"),
    (-0.5, "-0.5"),
    (100.0, "100"),
    (1e21, "1000000000000000000000"),
    (1e-7, "0.0000001"),
    (math.inf, "inf"),
    (-math.inf, "-inf"),
    (math.nan, "NaN"),
    ("text", "text"),
])
def test_display(obj, expected):
    assert lox_object_to_str(obj) == expected


def test_repr_quotes_strings():
    assert lox_object_to_repr("a") == '"a"'
    assert lox_object_to_repr(1.0) == "1"


@pytest.mark.parametrize("obj, expected", [
    (None, False),
    (False, False),
    (True, True),
    (0.0, True),
    ("", True),
])
def test_truth(obj, expected):
    assert lox_truth(obj) is expected


@pytest.mark.parametrize("left, right, expected", [
    (1.0, 1.0, True),
    (1.0, 2.0, False),
    ("a", "a", True),
    (None, None, True),
    (None, False, False),
    (1.0, True, False),
    (0.0, False, False),
    (math.nan, math.nan, False),
])
def test_equality(left, right, expected):
    assert lox_equality(left, right) is expected


@pytest.mark.parametrize("left, right, expected", [
    (1.0, 0.0, math.inf),
    (-1.0, 0.0, -math.inf),
    (1.0, -0.0, -math.inf),
    (6.0, 3.0, 2.0),
])
def test_division(left, right, expected):
    assert lox_division(left, right) == expected


def test_zero_over_zero_is_nan():
    assert math.isnan(lox_division(0.0, 0.0))


def test_kind_names():
    native = LoxNativeFunction("clock", 0, lambda arguments: 0.0)
    klass = LoxClass("A", {})
    assert [lox_kind_name(obj) for obj in (None, True, 1.0, "s", native, klass, LoxInstance(klass))] == [
        "Nil", "Boolean", "Number", "String", "NativeFunction", "Class", "Instance"
    ]
    assert lox_kind_name(LoxFunction(declaration("f"), [{}])) == "Function"


def test_function_display_and_arity():
    function = LoxFunction(declaration("add", "a", "b"), [{}])
    assert str(function) == "<fun add/2>"
    assert function.arity == 2


def test_class_arity_follows_initializer():
    assert LoxClass("A", {}).arity == 0
    init = LoxFunction(declaration("init", "x"), [{}], FunctionKind.INITIALIZER)
    assert LoxClass("A", {"init": init}).arity == 1


def test_instance_binds_methods():
    closure = [{}]
    method = LoxFunction(declaration("m"), closure, FunctionKind.METHOD)
    klass = LoxClass("A", {"m": method})
    instance = LoxInstance(klass)

    bound = instance.get("m")
    assert bound is not method
    assert bound.bound_instance is instance
    assert bound.closure[-1] == {"this": instance}
    assert bound.closure[0] is closure[0]
    # A bound method is returned as is, keeping its receiver.
    other = LoxInstance(klass)
    other.set("stolen", bound)
    assert other.get("stolen") is bound


def test_instance_fields_are_independent():
    klass = LoxClass("A", {})
    first, second = LoxInstance(klass), LoxInstance(klass)
    first.set("x", 1.0)
    with pytest.raises(KeyError):
        second.get("x")
    assert klass.methods == {}
