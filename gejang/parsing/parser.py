from __future__ import annotations

from enum import IntEnum, auto
from typing import Callable, Iterator, List, Optional, TypeVar

from gejang.lexing.token import Tk, Token
from gejang.parsing.expr import *
from gejang.parsing.stmt import *
from gejang.utilities import dump_internal
from gejang.utilities.error import LoxErrorHandler, LoxSyntaxError
from gejang.utilities.streamview import StreamView


class Prec(IntEnum):
    NONE = auto()
    ASSIGNMENT = auto()
    OR = auto()
    AND = auto()
    EQUALITY = auto()
    COMPARISON = auto()
    TERM = auto()
    FACTOR = auto()
    UNARY = auto()
    CALL = auto()
    PRIMARY = auto()


INFIX_PRECEDENCE = {
    Tk.EQUAL: Prec.ASSIGNMENT,
    Tk.OR: Prec.OR,
    Tk.AND: Prec.AND,
    Tk.EQUAL_EQUAL: Prec.EQUALITY,
    Tk.BANG_EQUAL: Prec.EQUALITY,
    Tk.GREATER: Prec.COMPARISON,
    Tk.GREATER_EQUAL: Prec.COMPARISON,
    Tk.LESS: Prec.COMPARISON,
    Tk.LESS_EQUAL: Prec.COMPARISON,
    Tk.PLUS: Prec.TERM,
    Tk.MINUS: Prec.TERM,
    Tk.STAR: Prec.FACTOR,
    Tk.SLASH: Prec.FACTOR,
    Tk.LEFT_PAREN: Prec.CALL,
    Tk.DOT: Prec.CALL,
}

LITERAL_KEYWORDS = {
    Tk.FALSE: False,
    Tk.TRUE: True,
    Tk.NIL: None,
}

OPERAND_TOKENS = frozenset((
    Tk.LEFT_PAREN, Tk.BANG, Tk.MINUS, Tk.NUMBER, Tk.STRING, Tk.IDENTIFIER, Tk.THIS, *LITERAL_KEYWORDS
))

# Error recovery stops in front of these.
STATEMENT_KEYWORDS = (Tk.BREAK, Tk.CLASS, Tk.FUN, Tk.VAR, Tk.FOR, Tk.IF, Tk.WHILE, Tk.PRINT, Tk.RETURN)

T = TypeVar("T")


class Parser:
    """Recursive descent for statements, Pratt parsing for expressions.

    The expression half follows Aleksey Kladov's article on the subject:
    https://matklad.github.io/2020/04/13/simple-but-powerful-pratt-parsing.html.
    """

    def __init__(
            self,
            tokens: List[Token],
            error_handler: LoxErrorHandler,
            *,
            dump: bool = False
    ) -> None:
        self._tv = StreamView(tokens)
        self._error_handler = error_handler
        self._dump = dump

    def parse(self) -> List[Stmt]:
        """Parse every declaration in the token stream.

        A declaration containing a syntax error is reported and dropped, and
        parsing picks up again at what looks like the next statement."""
        statements: List[Stmt] = list()
        while not self._at_end():
            if (declaration := self._declaration()) is not None:
                statements.append(declaration)
        if self._dump and not self._error_handler.error_state:
            dump_internal("AST", *statements, file=self._error_handler.sink)
        return statements

    # ~~~ Token handling ~~~

    def _at_end(self) -> bool:
        token = self._tv.peek()
        return token is None or token.token_type is Tk.EOF

    def _upcoming(self) -> Token:
        """The next token, left unconsumed. Running out of input is an error."""
        if self._at_end():
            raise LoxSyntaxError.at_token(self._tv[-1], "Unexpected end of input.")
        return self._tv[self._tv.current_index]

    def _consume(self, expected: Tk, message: str) -> Token:
        if not self._tv.match(expected):
            raise LoxSyntaxError.at_token(self._tv[self._tv.current_index], message)
        return self._tv.advance()

    def _consume_punct(self, symbol: Tk, context: str) -> Token:
        return self._consume(symbol, f"Expect '{symbol.value}' {context}.")

    def _recover(self) -> None:
        if self._at_end():
            return
        self._tv.advance()
        while not self._at_end():
            if self._tv.previous() == Tk.SEMICOLON or self._tv.match(*STATEMENT_KEYWORDS):
                return
            self._tv.advance()

    def _delimited(
            self,
            item: Callable[[], Optional[T]],
            *,
            closing: Tk,
            context: str,
            separator: Optional[Tk] = None
    ) -> Iterator[T]:
        """Parse items up to and including the `closing` token."""
        while not self._tv.match(closing) and not self._at_end():
            if (result := item()) is not None:
                yield result
            if separator is not None and not self._tv.advance_if_match(separator):
                break
        self._consume_punct(closing, context)

    # ~~~ Declarations ~~~

    def _declaration(self) -> Optional[Stmt]:
        try:
            if self._tv.advance_if_match(Tk.VAR):
                return self._var_declaration()
            if self._tv.advance_if_match(Tk.FUN):
                return self._function("function")
            if self._tv.advance_if_match(Tk.CLASS):
                return self._class_declaration()
            return self._statement()
        except LoxSyntaxError as error:
            self._error_handler.err(error)
            self._recover()
            return None

    def _var_declaration(self) -> VarStmt:
        name = self._consume(Tk.IDENTIFIER, "Expect variable name.")
        initializer = self._expression() if self._tv.advance_if_match(Tk.EQUAL) else None
        self._consume_punct(Tk.SEMICOLON, "after variable declaration")
        return VarStmt(name, initializer)

    def _function(self, kind: str) -> FunctionStmt:
        name = self._consume(Tk.IDENTIFIER, f"Expect {kind} name.")
        self._consume_punct(Tk.LEFT_PAREN, f"after {kind} name")
        params = list(self._delimited(
            lambda: self._consume(Tk.IDENTIFIER, "Expect parameter name."),
            closing=Tk.RIGHT_PAREN,
            context="after parameters",
            separator=Tk.COMMA
        ))
        self._consume_punct(Tk.LEFT_BRACE, f"before {kind} body")
        return FunctionStmt(name, params, self._block())

    def _class_declaration(self) -> ClassStmt:
        name = self._consume(Tk.IDENTIFIER, "Expect class name.")
        self._consume_punct(Tk.LEFT_BRACE, "before class body")
        methods = list(self._delimited(
            lambda: self._function("method"),
            closing=Tk.RIGHT_BRACE,
            context="after class body"
        ))
        return ClassStmt(name, methods)

    # ~~~ Statements ~~~

    def _statement(self) -> Stmt:
        if self._tv.advance_if_match(Tk.LEFT_BRACE):
            return BlockStmt(self._block())
        if self._tv.advance_if_match(Tk.IF):
            return self._if_statement()
        if self._tv.advance_if_match(Tk.WHILE):
            return self._while_statement()
        if self._tv.advance_if_match(Tk.FOR):
            return self._for_statement()
        if self._tv.match(Tk.PRINT):
            return self._print_statement()
        if self._tv.match(Tk.RETURN):
            return self._return_statement()
        if self._tv.match(Tk.BREAK):
            stmt: Stmt = BreakStmt(self._tv.advance())
            self._consume_punct(Tk.SEMICOLON, "after 'break'")
            return stmt
        stmt = ExpressionStmt(self._expression())
        self._consume_punct(Tk.SEMICOLON, "after expression")
        return stmt

    def _block(self) -> List[Stmt]:
        """The statements of a block whose opening brace has been consumed."""
        return list(self._delimited(self._declaration, closing=Tk.RIGHT_BRACE, context="after block"))

    def _if_statement(self) -> IfStmt:
        self._consume_punct(Tk.LEFT_PAREN, "after 'if'")
        condition = self._expression()
        self._consume_punct(Tk.RIGHT_PAREN, "after if condition")
        then_branch = self._statement()
        # A dangling else goes to the nearest if.
        else_branch = self._statement() if self._tv.advance_if_match(Tk.ELSE) else None
        return IfStmt(condition, then_branch, else_branch)

    def _while_statement(self) -> WhileStmt:
        self._consume_punct(Tk.LEFT_PAREN, "after 'while'")
        condition = self._expression()
        self._consume_punct(Tk.RIGHT_PAREN, "after while condition")
        return WhileStmt(condition, self._statement())

    def _for_statement(self) -> Stmt:
        """There is no for loop node. The loop is rewritten as

            { initializer; while (condition) { body; increment; } }

        leaving out whichever clauses are empty. An empty condition is `true`.
        """
        self._consume_punct(Tk.LEFT_PAREN, "after 'for'")

        initializer: Optional[Stmt] = None
        if self._tv.advance_if_match(Tk.VAR):
            initializer = self._var_declaration()
        elif not self._tv.advance_if_match(Tk.SEMICOLON):
            initializer = ExpressionStmt(self._expression())
            self._consume_punct(Tk.SEMICOLON, "after expression")

        condition: Expr = LiteralExpr(True)
        if not self._tv.match(Tk.SEMICOLON):
            condition = self._expression()
        self._consume_punct(Tk.SEMICOLON, "after loop condition")

        increment: Optional[Expr] = None
        if not self._tv.match(Tk.RIGHT_PAREN):
            increment = self._expression()
        self._consume_punct(Tk.RIGHT_PAREN, "after for clauses")

        loop: Stmt = self._statement()
        if increment is not None:
            loop = BlockStmt([loop, ExpressionStmt(increment)])
        loop = WhileStmt(condition, loop)
        if initializer is not None:
            loop = BlockStmt([initializer, loop])
        return loop

    def _print_statement(self) -> PrintStmt:
        keyword = self._tv.advance()
        value = self._expression()
        self._consume_punct(Tk.SEMICOLON, "after value")
        return PrintStmt(keyword, value)

    def _return_statement(self) -> ReturnStmt:
        keyword = self._tv.advance()
        value = None if self._tv.match(Tk.SEMICOLON) else self._expression()
        self._consume_punct(Tk.SEMICOLON, "after return value")
        return ReturnStmt(keyword, value)

    # ~~~ Expressions ~~~

    def _expression(self, min_precedence: Prec = Prec.NONE) -> Expr:
        """Parse an expression whose operators all bind tighter than `min_precedence`.

        An operand is parsed first. For as long as the next token is an operator
        binding tighter than `min_precedence`, the expression so far becomes that
        operator's left-hand side. A looser operator ends the call, so that the
        expression so far becomes the right-hand side of an enclosing operator.

        e.g. in `a = b + c * d`, the call parsing the right-hand side of `+` stops
        after `c * d`, and the one parsing the right-hand side of `=` stops after
        `b + (c * d)`.
        """
        left = self._operand()
        while (op := self._tv.peek()) is not None:
            precedence = INFIX_PRECEDENCE.get(op.token_type)
            if precedence is None or precedence <= min_precedence:
                break
            self._tv.advance()
            left = self._infix(op, left, precedence)
        return left

    def _operand(self) -> Expr:
        token = self._upcoming()
        token_type = token.token_type
        # The offending token is left in the stream for error recovery to skip.
        if token_type not in OPERAND_TOKENS:
            raise LoxSyntaxError.at_token(token, "Expect expression.")
        self._tv.advance()

        if token_type is Tk.LEFT_PAREN:
            inner = self._expression()
            self._consume_punct(Tk.RIGHT_PAREN, "after expression")
            return GroupingExpr(inner)
        if token_type is Tk.BANG or token_type is Tk.MINUS:
            return UnaryExpr(token, self._expression(Prec.UNARY))
        if token_type in LITERAL_KEYWORDS:
            return LiteralExpr(LITERAL_KEYWORDS[token_type])
        if token_type is Tk.NUMBER or token_type is Tk.STRING:
            return LiteralExpr(token.literal)
        if token_type is Tk.IDENTIFIER:
            return VariableExpr(token)
        return ThisExpr(token)

    def _infix(self, op: Token, left: Expr, precedence: Prec) -> Expr:
        op_type = op.token_type
        if op_type is Tk.LEFT_PAREN:
            arguments = list(self._delimited(
                self._expression,
                closing=Tk.RIGHT_PAREN,
                context="after arguments",
                separator=Tk.COMMA
            ))
            return CallExpr(left, op, arguments)
        if op_type is Tk.DOT:
            return GetExpr(left, self._consume(Tk.IDENTIFIER, "Expect property name after '.'."))
        if op_type is Tk.EQUAL:
            # Right associative: the value may itself be an assignment.
            value = self._expression(Prec.NONE)
            return self._assignment(op, left, value)

        right = self._expression(precedence)
        if op_type is Tk.AND or op_type is Tk.OR:
            return LogicalExpr(op, left, right)
        return BinaryExpr(op, left, right)

    @staticmethod
    def _assignment(op: Token, target: Expr, value: Expr) -> Expr:
        if isinstance(target, VariableExpr):
            return AssignmentExpr(target.name, value)
        if isinstance(target, GetExpr):
            return SetExpr(target.object, target.name, value)
        raise LoxSyntaxError.at_token(op, "Invalid assignment target.")


__all__ = ("Parser",)
