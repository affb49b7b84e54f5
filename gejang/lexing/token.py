from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, List, Optional

from gejang.language.lox_types import LoxLiteral


class Tk(Enum):
    @staticmethod
    def _generate_next_value_(name: str, start: int, count: int, last_values: List[Any]) -> str:  # type: ignore[override]
        return f"#{name}"  # Never collides with punctuation or keyword values.

    # single-char
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    LEFT_BRACE = "{"
    RIGHT_BRACE = "}"
    COMMA = ","
    DOT = "."
    MINUS = "-"
    PLUS = "+"
    SEMICOLON = ";"
    STAR = "*"
    # compoundable
    BANG = "!"
    EQUAL = "="
    GREATER = ">"
    LESS = "<"
    BANG_EQUAL = "!="
    EQUAL_EQUAL = "=="
    GREATER_EQUAL = ">="
    LESS_EQUAL = "<="
    SLASH = auto()
    # keywords
    AND = "@AND"
    BREAK = "@BREAK"
    CLASS = "@CLASS"
    ELSE = "@ELSE"
    FALSE = "@FALSE"
    FUN = "@FUN"
    FOR = "@FOR"
    IF = "@IF"
    NIL = "@NIL"
    OR = "@OR"
    PRINT = "@PRINT"
    RETURN = "@RETURN"
    SUPER = "@SUPER"
    THIS = "@THIS"
    TRUE = "@TRUE"
    VAR = "@VAR"
    WHILE = "@WHILE"
    # literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    EOF = auto()


# Values of auto() variants start with "#" and keywords with "@"; what is left is punctuation.
_PUNCTUATION = frozenset(tk.value for tk in Tk if tk.value[0] not in "#@")
SINGLE_CHAR_TOKENS = frozenset(p for p in _PUNCTUATION if len(p) == 1)
COMPOUND_TOKENS = frozenset(p for p in _PUNCTUATION if len(p) == 2)


@dataclass
class Token:
    """A representation of a token. `line` is the 1-based line on which the
    token's lexeme starts."""
    token_type: Tk
    lexeme: str
    literal: Optional[LoxLiteral]
    line: int

    @classmethod
    def create_arbitrary(cls, token_type: Tk, lexeme: str, literal: Optional[LoxLiteral] = None) -> Token:
        """Create a token that does not come from any source text."""
        return cls(token_type, lexeme, literal, 0)

    def __eq__(self, other: Any) -> bool:
        """Compare a `Tk` to a `Token`'s own type.

        i.e., a `Token` of type `FOO` is equal to `Tk.FOO`. This provides better
        ergonomics when used in a `StreamView`."""
        if isinstance(other, Tk):
            return self.token_type is other
        return super().__eq__(other)

    def __str__(self) -> str:
        attributes = ", ".join(
            f"{name}={getattr(self, name)!r}"
            for name in ("lexeme", "literal", "line")
        )
        return f"{self.token_type.name}: {attributes}"
