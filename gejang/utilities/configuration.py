from enum import Flag, auto


class Debug(Flag):
    DUMP_TOKENS = auto()
    DUMP_AST = auto()
    DUMP_DEPTHS = auto()
    NO_PARSE = auto()
    NO_RESOLVE = auto()
    NO_INTERPRET = auto()
    BACKTRACE = auto()
