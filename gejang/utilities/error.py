from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from termcolor import colored

from gejang.lexing.token import Tk, Token

# Exit codes, following the BSD sysexits convention.
EX_DATAERR = 65
EX_SOFTWARE = 70


class LoxExit(Exception):
    """Raised to abandon the current run. Carries the process exit code."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


class LoxError(Exception):
    """Base class of every error reported to the user.

    `where` locates the error within its line, e.g. " at 'foo'" or " at end"."""
    category = "LoxError"
    exit_code = EX_DATAERR

    def __init__(self, line: int, message: str, *, where: str = "") -> None:
        super().__init__(message)
        self.line = line
        self.message = message
        self.where = where

    @classmethod
    def at_token(cls, token: Token, message: str) -> LoxError:
        where = " at end" if token.token_type is Tk.EOF else f" at '{token.lexeme}'"
        return cls(token.line, message, where=where)

    def __str__(self) -> str:
        return f"[line {self.line}] {self.category}{self.where}: {self.message}"


class LoxSyntaxError(LoxError):
    category = "LoxSyntaxError"


class LoxResolutionError(LoxError):
    category = "LoxResolutionError"


class LoxRuntimeError(LoxError):
    category = "LoxRuntimeError"
    exit_code = EX_SOFTWARE

    def __init__(self, token: Token, message: str) -> None:
        super().__init__(token.line, message)
        self.token = token


class UndefinedVariable(LoxRuntimeError):
    def __init__(self, token: Token) -> None:
        super().__init__(token, f"Undefined variable {token.lexeme}")
        self.name = token.lexeme


class Unimplemented(LoxRuntimeError):
    """An operator or native function was applied to the wrong kinds of values."""


class WrongNumberOfArgs(LoxRuntimeError):
    def __init__(self, token: Token, expected: int, got: int) -> None:
        super().__init__(token, f"Expected {expected} arguments but got {got}.")
        self.expected = expected
        self.got = got


class NotCallable(LoxRuntimeError):
    def __init__(self, token: Token) -> None:
        super().__init__(token, "Can only call functions and classes.")


class OnlyInstancesHaveAttributes(LoxRuntimeError):
    def __init__(self, token: Token) -> None:
        super().__init__(token, "Only instances have attributes.")


class UndefinedProperty(LoxRuntimeError):
    def __init__(self, token: Token) -> None:
        super().__init__(token, f"Undefined property '{token.lexeme}'.")
        self.name = token.lexeme


class PrintFailed(LoxRuntimeError):
    def __init__(self, token: Token) -> None:
        super().__init__(token, "Print failed.")


class LoxInternalError(LoxError):
    """The resolver and the interpreter disagree about where a variable lives.

    This is a bug in the interpreter, never in the program being run."""
    category = "LoxInternalError"
    exit_code = EX_SOFTWARE


class LoxErrorHandler:
    """Collects the errors of a run and reports them to the error sink."""

    def __init__(self, sink: Optional[TextIO] = None) -> None:
        self._sink = sink if sink is not None else sys.stderr
        self.errors: List[LoxError] = list()

    @property
    def sink(self) -> TextIO:
        return self._sink

    @property
    def error_state(self) -> bool:
        return bool(self.errors)

    def err(self, error: LoxError) -> None:
        self.errors.append(error)
        message = str(error)
        if self._colorize():
            message = colored(message, "red")
        print(message, file=self._sink)

    def checkpoint(self) -> None:
        """Abandon the run if any error has been reported since the last checkpoint."""
        if not self.errors:
            return
        code = max(error.exit_code for error in self.errors)
        self.errors.clear()
        raise LoxExit(code)

    def _colorize(self) -> bool:
        isatty = getattr(self._sink, "isatty", None)
        return bool(isatty and isatty())
