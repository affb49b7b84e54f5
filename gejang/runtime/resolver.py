from typing import Dict, Iterable, List, Optional, Union

from gejang.language.lox_types import FunctionKind
from gejang.lexing.token import Token
from gejang.parsing.expr import *
from gejang.parsing.stmt import *
from gejang.utilities.error import LoxResolutionError
from gejang.utilities.scoped_state_handler import ScopedStateHandler
from gejang.utilities.stacked_map import StackedMap
from gejang.utilities.visitor import Visitor

DepthTable = Dict[Expr, int]


class Resolver(Visitor[Union[Expr, Stmt], None]):
    """Work out, before anything runs, which scope every variable reference refers to.

    The result maps each local variable reference (the `Expr` node itself) to the
    number of scopes between the reference and the declaration. References that
    are not in the table are global.

    The scopes are tracked in a stack shaped exactly like the interpreter's
    `Environment`: one frame per block, per function call (parameters and body
    together) and per bound method (holding `this`). A name maps to False while
    its initializer is being resolved and to True once it is defined. The bottom
    frame records global declarations, which persist from one `resolve()` to the
    next so that an interactive session can refer to earlier globals.
    """

    def __init__(self, predefined: Iterable[str] = ()) -> None:
        self._scopes: StackedMap[str, bool] = StackedMap()
        for name in predefined:
            self._scopes.define(name, True)
        self._depths: DepthTable = dict()
        self._function_kind: ScopedStateHandler[Optional[FunctionKind]] = ScopedStateHandler(None)
        self._is_resolving_class: ScopedStateHandler[bool] = ScopedStateHandler(False)
        self._is_resolving_loop: ScopedStateHandler[bool] = ScopedStateHandler(False)

    def resolve(self, ast: List[Stmt]) -> DepthTable:
        """Resolve a whole program. The first error aborts resolution, in which case
        none of the program's global declarations are kept."""
        self._depths = dict()
        checkpoint = dict(self._scopes.base)
        try:
            for stmt in ast:
                self.visit(stmt)
        except LoxResolutionError:
            self._scopes.reset(checkpoint)
            raise
        return self._depths

    # Blanket impl: nodes that neither declare nor reference anything simply
    # have their children resolved.

    def _visit_Expr__(self, expr: Expr) -> None:
        self._resolve_children(expr)

    def _visit_Stmt__(self, stmt: Stmt) -> None:
        self._resolve_children(stmt)

    def _resolve_children(self, node: Union[Expr, Stmt]) -> None:
        for attr in vars(node).values():
            for child in attr if isinstance(attr, list) else (attr, ):
                if isinstance(child, (Expr, Stmt)):
                    self.visit(child)

    # ~~~ Scope bookkeeping ~~~

    def _declare(self, name: Token) -> None:
        scope = self._scopes[-1]
        if not self._scopes.is_local():
            # Globals may be redeclared. Keep an existing definition so that
            # `var a = a;` can read the previous global `a`.
            scope.setdefault(name.lexeme, False)
        elif name.lexeme in scope:
            raise LoxResolutionError.at_token(name, "Already a variable with this name in this scope.")
        else:
            scope[name.lexeme] = False

    def _define(self, name: Token) -> None:
        self._scopes.define(name.lexeme, True)

    def _resolve_local(self, expr: Expr, name: Token) -> None:
        # A name that is declared but not yet defined is being initialized: the
        # reference is to a binding of the same name further out, if there is one.
        in_own_initializer = False
        for depth in range(len(self._scopes) - 1):
            is_defined = self._scopes[-1 - depth].get(name.lexeme)
            if is_defined:
                self._depths[expr] = depth
                return
            if is_defined is not None:
                in_own_initializer = True

        is_defined_globally = self._scopes.base.get(name.lexeme)
        if is_defined_globally is False or (is_defined_globally is None and in_own_initializer):
            raise LoxResolutionError.at_token(name, "Cannot read local variable in its own initializer.")
        # Otherwise the variable is global. If it is never defined, that is a runtime error.

    def _resolve_function(self, function: FunctionStmt, kind: FunctionKind) -> None:
        with self._function_kind.enter(kind), self._is_resolving_loop.enter(False), self._scopes.scope():
            for param in function.params:
                self._declare(param)
                self._define(param)
            for stmt in function.body:
                self.visit(stmt)

    # ~~~ Statements ~~~

    def _visit_BlockStmt__(self, stmt: BlockStmt) -> None:
        with self._scopes.scope():
            for inner_stmt in stmt.statements:
                self.visit(inner_stmt)

    def _visit_BreakStmt__(self, stmt: BreakStmt) -> None:
        if not self._is_resolving_loop.state:
            raise LoxResolutionError.at_token(stmt.keyword, "Cannot use 'break' outside of a loop.")

    def _visit_ClassStmt__(self, stmt: ClassStmt) -> None:
        self._declare(stmt.name)
        self._define(stmt.name)
        # Methods are bound by wrapping their closure in a frame holding `this`.
        with self._is_resolving_class.enter(True), self._scopes.scope():
            self._scopes.define("this", True)
            for method in stmt.methods:
                # Methods with name `init` are constructors.
                kind = FunctionKind.INITIALIZER if method.name.lexeme == "init" else FunctionKind.METHOD
                self._resolve_function(method, kind)

    def _visit_FunctionStmt__(self, stmt: FunctionStmt) -> None:
        # Define the name before resolving the body to allow recursion.
        self._declare(stmt.name)
        self._define(stmt.name)
        self._resolve_function(stmt, FunctionKind.FUNCTION)

    def _visit_ReturnStmt__(self, stmt: ReturnStmt) -> None:
        if self._function_kind.state is None:
            raise LoxResolutionError.at_token(stmt.keyword, "Cannot return from top-level code.")
        if stmt.value is not None:
            if self._function_kind.state is FunctionKind.INITIALIZER:
                raise LoxResolutionError.at_token(stmt.keyword, "Cannot return a value from an initializer.")
            self.visit(stmt.value)

    def _visit_VarStmt__(self, stmt: VarStmt) -> None:
        self._declare(stmt.name)
        if stmt.initializer is not None:
            self.visit(stmt.initializer)
        self._define(stmt.name)

    def _visit_WhileStmt__(self, stmt: WhileStmt) -> None:
        self.visit(stmt.condition)
        with self._is_resolving_loop.enter(True):
            self.visit(stmt.body)

    # ~~~ Expressions ~~~

    def _visit_AssignmentExpr__(self, expr: AssignmentExpr) -> None:
        self.visit(expr.value)
        self._resolve_local(expr, expr.name)

    def _visit_ThisExpr__(self, expr: ThisExpr) -> None:
        if not self._is_resolving_class.state:
            raise LoxResolutionError.at_token(expr.keyword, "Cannot use 'this' outside of a class.")
        self._resolve_local(expr, expr.keyword)

    def _visit_VariableExpr__(self, expr: VariableExpr) -> None:
        self._resolve_local(expr, expr.name)
