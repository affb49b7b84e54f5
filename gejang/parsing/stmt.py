from dataclasses import dataclass
from typing import List, Optional

from gejang.lexing.token import Token
from gejang.parsing.expr import Expr
from gejang.utilities import ast_node_pretty_printer, indent


class Stmt:
    """Base class for Lox statements."""

    def __str__(self) -> str:
        name, values = ast_node_pretty_printer(self, "Stmt")
        return f"<{name}: {', '.join(values)}>"


@dataclass(eq=False)
class BlockStmt(Stmt):
    """A group of statements evaluated in their own scope."""
    statements: List[Stmt]

    def __str__(self) -> str:
        inner_text = "".join(indent(str(stmt)) for stmt in self.statements)
        return f"<block:\n{inner_text}>"


@dataclass(eq=False)
class BreakStmt(Stmt):
    keyword: Token


@dataclass(eq=False)
class ClassStmt(Stmt):
    name: Token
    methods: List["FunctionStmt"]

    def __str__(self) -> str:
        body_text = "".join(indent(str(method)) for method in self.methods)
        return f"<class: {self.name.lexeme}\n{body_text}>"


@dataclass(eq=False)
class ExpressionStmt(Stmt):
    expression: Expr


@dataclass(eq=False)
class FunctionStmt(Stmt):
    """A function declaration. The body shares the scope of the parameters."""
    name: Token
    params: List[Token]
    body: List[Stmt]

    def __str__(self) -> str:
        params_text = ", ".join(param.lexeme for param in self.params)
        body_text = "".join(indent(str(stmt)) for stmt in self.body)
        return f"<function: {self.name.lexeme}, [{params_text}],\n{body_text}>"


@dataclass(eq=False)
class IfStmt(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]

    def __str__(self) -> str:
        inner_text = "".join(indent(str(attr)) for attr in vars(self).values())
        return f"<if:\n{inner_text}>"


@dataclass(eq=False)
class PrintStmt(Stmt):
    keyword: Token
    expression: Expr


@dataclass(eq=False)
class ReturnStmt(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(eq=False)
class VarStmt(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(eq=False)
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt
