import sys
import traceback
from typing import Optional, TextIO

from gejang.lexing.scanner import Scanner
from gejang.parsing.parser import Parser
from gejang.runtime.interpreter import Interpreter
from gejang.runtime.natives import native_functions
from gejang.runtime.resolver import Resolver
from gejang.utilities import dump_internal
from gejang.utilities.configuration import Debug
from gejang.utilities.error import LoxErrorHandler, LoxExit, LoxInternalError, LoxResolutionError


class Lox:
    BANNER = "Gejang TW REPL"
    PROMPT_CHARACTER = "🦀> "
    ERROR_PROMPT_CHARACTER = "😵> "

    def __init__(
            self,
            debug_flags: Debug = Debug(0),
            *,
            output: Optional[TextIO] = None,
            error: Optional[TextIO] = None
    ) -> None:
        self.output = output if output is not None else sys.stdout
        self.error_handler = LoxErrorHandler(error)
        self.debug_flags = debug_flags
        # Both persist between runs, so that a REPL keeps its globals.
        self.resolver = Resolver(native_functions())
        self.interpreter = Interpreter(self.error_handler, output=self.output)

    def run_file(self, path: str) -> None:
        with open(path, 'r', encoding="utf-8") as fil:
            self.run(fil.read())

    def run_interactive(self) -> None:
        print(self.BANNER, file=self.output)
        prompt = self.PROMPT_CHARACTER
        while True:
            try:
                line = input(prompt)
            except (KeyboardInterrupt, EOFError):  # Exit gracefully on ctrl-c or ctrl-d.
                print(file=self.output)
                return
            try:
                self.run(line)
                prompt = self.PROMPT_CHARACTER
            except LoxExit as exit_:
                prompt = self.PROMPT_CHARACTER if exit_.code == 0 else self.ERROR_PROMPT_CHARACTER

    def run(self, source: str) -> None:
        """Scan, parse, resolve and interpret `source`.

        Raises `LoxExit` if any stage reported an error, or if a debug flag stopped
        the run early."""
        source = source.replace("\r\n", "\n")
        sink = self.error_handler.sink

        tokens = Scanner(
            source,
            self.error_handler,
            debug_flags=self.debug_flags
        ).scan_tokens()

        self.error_handler.checkpoint()
        if self.debug_flags & Debug.NO_PARSE:
            raise LoxExit(0)
        statements = Parser(
            tokens,
            self.error_handler,
            dump=bool(self.debug_flags & Debug.DUMP_AST),
        ).parse()

        self.error_handler.checkpoint()
        if self.debug_flags & Debug.NO_RESOLVE:
            raise LoxExit(0)
        try:
            depths = self.resolver.resolve(statements)
        except LoxResolutionError as error:
            self.error_handler.err(error)
            depths = dict()
        if self.debug_flags & Debug.DUMP_DEPTHS:
            dump_internal("Depths", *(f"{expr} -> {depth}" for expr, depth in depths.items()), file=sink)

        self.error_handler.checkpoint()
        if self.debug_flags & Debug.NO_INTERPRET:
            raise LoxExit(0)
        self.interpreter.interpret(statements, depths)

        if self.debug_flags & Debug.BACKTRACE:
            for error in self.error_handler.errors:
                if isinstance(error, LoxInternalError):
                    traceback.print_exception(type(error), error, error.__traceback__, file=sink)
        self.error_handler.checkpoint()
