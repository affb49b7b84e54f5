"""Expression nodes.

Nodes compare and hash by identity (`eq=False`): the resolver's depth table is
keyed by the node itself, and two textually identical references to a variable
may well resolve to different scopes."""
from dataclasses import dataclass
from typing import List

from gejang.language.lox_types import LoxPrimitive, lox_object_to_repr
from gejang.lexing.token import Token
from gejang.utilities import ast_node_pretty_printer


class Expr:
    """Base class for expressions which have differing attributes."""

    def __str__(self) -> str:
        name, values = ast_node_pretty_printer(self, "Expr")
        return f"({name} {' '.join(values)})"


@dataclass(eq=False)
class AssignmentExpr(Expr):
    name: Token
    value: Expr


@dataclass(eq=False)
class BinaryExpr(Expr):
    operator: Token
    left: Expr
    right: Expr

    def __str__(self) -> str:
        return f"({self.operator.lexeme} {self.left} {self.right})"


@dataclass(eq=False)
class LogicalExpr(BinaryExpr):
    pass


@dataclass(eq=False)
class CallExpr(Expr):
    callee: Expr
    paren: Token
    arguments: List[Expr]

    def __str__(self) -> str:
        return f"(call {self.callee} [{', '.join(map(str, self.arguments))}])"


@dataclass(eq=False)
class GetExpr(Expr):
    object: Expr
    name: Token

    def __str__(self) -> str:
        return f"(. {self.object} {self.name.lexeme})"


@dataclass(eq=False)
class GroupingExpr(Expr):
    expression: Expr


@dataclass(eq=False)
class LiteralExpr(Expr):
    value: LoxPrimitive

    def __str__(self) -> str:
        return lox_object_to_repr(self.value)


@dataclass(eq=False)
class SetExpr(Expr):
    object: Expr
    name: Token
    value: Expr

    def __str__(self) -> str:
        return f"(.= {self.object} {self.name.lexeme} {self.value})"


@dataclass(eq=False)
class ThisExpr(Expr):
    keyword: Token


@dataclass(eq=False)
class UnaryExpr(Expr):
    operator: Token
    right: Expr

    def __str__(self) -> str:
        return f"({self.operator.lexeme} {self.right})"


@dataclass(eq=False)
class VariableExpr(Expr):
    name: Token
