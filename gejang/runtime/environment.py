from typing import Optional

from gejang.language.lox_types import LoxObject
from gejang.lexing.token import Token
from gejang.utilities.error import LoxInternalError, UndefinedVariable
from gejang.utilities.stacked_map import StackedMap


class Environment(StackedMap[str, LoxObject]):
    """The chain of variable scopes of a running program.

    Lookups never search by name: the resolver has already worked out how many
    frames out from the innermost one each variable lives (`depth`), with None
    meaning the global frame."""

    def get(self, name: Token, depth: Optional[int]) -> LoxObject:
        frame = self._frame_for(name, depth)
        try:
            return frame[name.lexeme]
        except KeyError:
            raise self._missing(name, depth) from None

    def assign(self, name: Token, value: LoxObject, depth: Optional[int]) -> None:
        frame = self._frame_for(name, depth)
        if name.lexeme not in frame:
            raise self._missing(name, depth)
        frame[name.lexeme] = value

    def _frame_for(self, name: Token, depth: Optional[int]) -> dict:
        frame = self.frame_at(depth)
        if frame is None:
            raise LoxInternalError(
                name.line, f"'{name.lexeme}' was resolved {depth} scopes out, but only {len(self)} scopes exist."
            )
        return frame

    @staticmethod
    def _missing(name: Token, depth: Optional[int]) -> Exception:
        if depth is None:
            return UndefinedVariable(name)
        return LoxInternalError(name.line, f"'{name.lexeme}' was resolved {depth} scopes out, but is not there.")
