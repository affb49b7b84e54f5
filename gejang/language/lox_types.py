import math
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from gejang.language.lox_callable import LoxFunction, LoxNativeFunction
    from gejang.language.lox_class import LoxClass, LoxInstance

LoxLiteral = Union[str, float]
LoxPrimitive = Union[float, str, bool, None]
LoxObject = Union[LoxPrimitive, "LoxNativeFunction", "LoxFunction", "LoxClass", "LoxInstance"]

_PRIMITIVE_KIND_NAMES = {
    type(None): "Nil",
    bool: "Boolean",
    float: "Number",
    str: "String",
}


class FunctionKind(Enum):
    FUNCTION = "function"
    METHOD = "method"
    INITIALIZER = "initializer"


def lox_is_valid_identifier_start(char: Optional[str]) -> bool:
    if char is None:
        return False
    return (char.isascii() and char.isalpha()) or char == "_"


def lox_is_valid_identifier_name(char: Optional[str]) -> bool:
    if char is None:
        return False
    return lox_is_valid_identifier_start(char) or char in "0123456789"


def lox_kind_name(obj: LoxObject) -> str:
    """Name the kind of a Lox object, as used in error messages."""
    if (name := _PRIMITIVE_KIND_NAMES.get(type(obj))) is not None:
        return name
    return obj.kind  # type: ignore  # Every non-primitive Lox object carries its kind.


def lox_number_to_str(number: float) -> str:
    """Format a number with the shortest digits that round-trip, never in
    scientific notation, and without a fractional part if it is integral."""
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    string = format(Decimal(repr(number)), "f")
    if "." in string:
        string = string.rstrip("0").rstrip(".")  # Output 100.0 as 100, etc.
    return string


def lox_object_to_str(obj: LoxObject) -> str:
    """Represent a Lox object as a string."""
    if obj is None:
        return "nil"  # The null type is "nil" in Lox.
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, float):
        return lox_number_to_str(obj)
    return str(obj)


def lox_object_to_repr(obj: LoxObject) -> str:
    if isinstance(obj, str):
        return f'"{obj}"'
    return lox_object_to_str(obj)


def lox_truth(obj: LoxObject) -> bool:
    """Evaluate the truthiness of a Lox object.

    `false` and `nil` are the only falsy objects."""
    if obj is None:
        return False
    if isinstance(obj, bool):
        return obj
    return True


def lox_equality(left: LoxObject, right: LoxObject) -> bool:
    """Evaluate if two Lox objects are equal.

    Objects of different kinds are never equal. Functions, classes and instances
    are only equal to themselves."""
    if type(left) is type(right):
        return left == right
    return False


def lox_division(left: float, right: float) -> float:
    """Divide following IEEE 754: division by zero yields an infinity or NaN."""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
