"""Completion signals.

Executing a statement returns None when control carries on to the next
statement, or one of the signals below when it has to leave early. Blocks and
loops hand a signal they do not consume up to whatever executed them."""
from dataclasses import dataclass
from typing import Union

from gejang.language.lox_types import LoxObject


@dataclass(frozen=True)
class Return:
    """Leave the innermost function call, producing `value`."""
    value: LoxObject


class Break:
    """Leave the innermost loop."""

    def __repr__(self) -> str:
        return "BREAK"


BREAK = Break()

Signal = Union[Return, Break]
