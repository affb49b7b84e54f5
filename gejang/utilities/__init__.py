import sys
from typing import Any, Iterator, Optional, TextIO, Tuple

from gejang.lexing.token import Token

DUMP_RULE_WIDTH = 20


def dump_internal(name: str, *content: Any, file: Optional[TextIO] = None) -> None:
    """Write each item in `content` on its own line, between two rules."""
    sink = sys.stderr if file is None else file
    print(f" {name} Dump ".center(DUMP_RULE_WIDTH, "~"), file=sink)
    for item in content:
        print(item, file=sink)
    print("~" * DUMP_RULE_WIDTH, file=sink)


def ast_node_pretty_printer(obj: Any, base_name: str) -> Tuple[str, Iterator[str]]:
    """Split an AST node into a short name (`BinaryExpr` -> `binary`) and its
    fields rendered as text. Tokens are shown by their lexeme."""
    short_name = type(obj).__name__[:-len(base_name)].lower()
    fields = (
        field.lexeme if isinstance(field, Token) else str(field)
        for field in vars(obj).values()
    )
    return short_name, fields


def is_arabic_numeral(char: Optional[str]) -> bool:
    return char is not None and len(char) == 1 and "0" <= char <= "9"


def indent(text: str) -> str:
    return "".join(f"\t{line}\n" for line in str(text).splitlines())
