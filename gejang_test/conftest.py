from io import StringIO
from typing import Callable, List, NamedTuple, Optional

import pytest

from gejang.lexing.scanner import Scanner
from gejang.lexing.token import Token
from gejang.lox import Lox
from gejang.parsing.parser import Parser
from gejang.parsing.stmt import Stmt
from gejang.utilities.error import LoxErrorHandler, LoxExit


class RunResult(NamedTuple):
    out: List[str]
    err: List[str]
    exit_code: Optional[int]


class LoxRunner:
    """Runs sources through one `Lox` instance, capturing what each run writes."""

    def __init__(self) -> None:
        self._out = StringIO()
        self._err = StringIO()
        self.lox = Lox(output=self._out, error=self._err)

    def __call__(self, source: str) -> RunResult:
        exit_code = None
        try:
            self.lox.run(source)
        except LoxExit as exit_:
            exit_code = exit_.code
        return RunResult(self._drain(self._out), self._drain(self._err), exit_code)

    @staticmethod
    def _drain(buf: StringIO) -> List[str]:
        lines = buf.getvalue().splitlines()
        buf.seek(0)
        buf.truncate()
        return lines


@pytest.fixture
def run() -> LoxRunner:
    return LoxRunner()


@pytest.fixture
def error_handler() -> LoxErrorHandler:
    return LoxErrorHandler(StringIO())


@pytest.fixture
def scan(error_handler: LoxErrorHandler) -> Callable[[str], List[Token]]:
    def _scan(source: str) -> List[Token]:
        return Scanner(source, error_handler).scan_tokens()
    return _scan


@pytest.fixture
def parse(scan: Callable[[str], List[Token]], error_handler: LoxErrorHandler) -> Callable[[str], List[Stmt]]:
    def _parse(source: str) -> List[Stmt]:
        return Parser(scan(source), error_handler).parse()
    return _parse
