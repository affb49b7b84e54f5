import argparse
import sys
from functools import reduce
from typing import List, Optional

from gejang.lox import Lox
from gejang.utilities.configuration import Debug
from gejang.utilities.error import LoxExit


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gejang",
        description="Run a Lox program with a tree-walking interpreter, or start a REPL when given none",
        allow_abbrev=False
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-c", metavar="STRING", help="run this source string")
    source.add_argument("source", metavar="FILE", nargs="?", help="run this .lox file")
    parser.add_argument(
        "--dbg",
        action="append",
        default=list(),
        choices=[flag.name for flag in Debug],
        help="enable a debugging option (repeatable)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_argument_parser().parse_args(argv)
    debug_flags = reduce(lambda flags, name: flags | Debug[name], args.dbg, Debug(0))

    lox = Lox(debug_flags)
    try:
        if args.c is not None:
            lox.run(args.c)
        elif args.source is not None:
            lox.run_file(args.source)
        else:
            lox.run_interactive()
    except LoxExit as exit_:
        sys.exit(exit_.code)


if __name__ == "__main__":
    main()
