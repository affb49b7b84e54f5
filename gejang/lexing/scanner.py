from typing import List, Optional

from gejang.language.lox_types import LoxLiteral, lox_is_valid_identifier_name, lox_is_valid_identifier_start
from gejang.lexing.token import COMPOUND_TOKENS, SINGLE_CHAR_TOKENS, Tk, Token
from gejang.utilities import dump_internal, is_arabic_numeral
from gejang.utilities.configuration import Debug
from gejang.utilities.error import LoxErrorHandler, LoxSyntaxError
from gejang.utilities.streamview import StreamView


class Scanner:
    def __init__(
            self,
            source: str,
            error_handler: LoxErrorHandler,
            *,
            debug_flags: Debug = Debug(0)
    ) -> None:
        """Split a source string into Tokens.

        Every error in the source is reported to `error_handler`; scanning carries
        on past them so that they can all be reported at once.

        :param source: source string
        :type source: str
        :param error_handler: error reporting manager
        :type error_handler: LoxErrorHandler
        :param debug_flags: whether to dump the scanned tokens
        :type debug_flags: Debug, optional
        """
        self._tokens: List[Token] = list()
        self._sv = StreamView(source)
        self._error_handler = error_handler
        self._debug_flags = debug_flags
        self._line = 1
        self._lexeme_line = 1

    def scan_tokens(self) -> List[Token]:
        while self._sv.has_next():
            self._sv.set_marker()
            self._lexeme_line = self._line
            self._scan_lexeme()
        self._tokens.append(Token(Tk.EOF, "", None, self._line))

        if self._debug_flags & Debug.DUMP_TOKENS:
            dump_internal("Token", *self._tokens, file=self._error_handler.sink)

        return self._tokens

    def _scan_lexeme(self) -> None:
        char = self._sv.advance()
        follower = self._sv.peek()

        # Two-character operators take priority over their one-character prefixes.
        if follower is not None and char + follower in COMPOUND_TOKENS:
            self._sv.advance()
            self._emit(Tk(char + follower))
        elif char in SINGLE_CHAR_TOKENS:
            self._emit(Tk(char))
        elif char == "/":
            if follower == "/":
                self._skip_comment()
            else:
                self._emit(Tk.SLASH)
        elif char == '"':
            self._scan_string()
        elif char == "\n":
            self._line += 1
        elif char.isspace():
            pass
        elif is_arabic_numeral(char):
            self._scan_number()
        elif lox_is_valid_identifier_start(char):
            self._scan_word()
        else:
            self._error(f"Unexpected character: {char!r}.")

    def _emit(self, token_type: Tk, literal: Optional[LoxLiteral] = None) -> None:
        lexeme = "".join(self._sv.slice_from_marker())
        self._tokens.append(Token(token_type, lexeme, literal, self._lexeme_line))

    def _error(self, message: str) -> None:
        self._error_handler.err(LoxSyntaxError(self._lexeme_line, message))

    # ~~~ Multi-character lexemes ~~~

    def _skip_comment(self) -> None:
        # The newline is left in the stream to be counted.
        while self._sv.has_next() and self._sv.peek() != "\n":
            self._sv.advance()

    def _scan_string(self) -> None:
        while self._sv.has_next() and self._sv.peek() != '"':
            if self._sv.advance() == "\n":
                self._line += 1
        if not self._sv.has_next():
            self._error("Unterminated string.")
            return
        self._sv.advance()  # Closing quote.
        self._emit(Tk.STRING, "".join(self._sv.slice_from_marker()[1:-1]))

    def _scan_number(self) -> None:
        """Digits, optionally followed by a fractional part. A trailing "." without
        digits after it is left alone: `1.` is the number 1 followed by a dot."""
        self._skip_digits()
        if self._sv.peek() == "." and is_arabic_numeral(self._sv.peek(1)):
            self._sv.advance()
            self._skip_digits()
        self._emit(Tk.NUMBER, float("".join(self._sv.slice_from_marker())))

    def _skip_digits(self) -> None:
        while is_arabic_numeral(self._sv.peek()):
            self._sv.advance()

    def _scan_word(self) -> None:
        while lox_is_valid_identifier_name(self._sv.peek()):
            self._sv.advance()
        self._emit(keyword_or_identifier("".join(self._sv.slice_from_marker())))


def keyword_or_identifier(word: str) -> Tk:
    """Keywords are all lower case, and have enum values in the form "@KEYWORD"."""
    if not word.islower():
        return Tk.IDENTIFIER
    try:
        return Tk(f"@{word.upper()}")
    except ValueError:
        return Tk.IDENTIFIER
