import time
from typing import Dict, Sequence

from gejang.language.lox_callable import LoxNativeFunction
from gejang.language.lox_types import LoxObject, lox_kind_name


def _clock(arguments: Sequence[LoxObject]) -> LoxObject:
    return time.time()


def _tsp2cup(arguments: Sequence[LoxObject]) -> LoxObject:
    teaspoons, = arguments
    if not isinstance(teaspoons, float):
        raise TypeError(f"expected Number, got {lox_kind_name(teaspoons)}")
    return teaspoons / 48.0


def native_functions() -> Dict[str, LoxNativeFunction]:
    """The functions every program starts out with in its global scope."""
    return {
        native.name: native
        for native in (
            LoxNativeFunction("clock", 0, _clock),
            LoxNativeFunction("tsp2cup", 1, _tsp2cup),
        )
    }
