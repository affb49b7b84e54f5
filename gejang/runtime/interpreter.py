import sys
from contextlib import contextmanager
from operator import add, ge, gt, le, lt, mul, sub
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple, Type, Union

from gejang.language.lox_callable import LoxCallable, LoxFunction, LoxNativeFunction
from gejang.language.lox_class import LoxClass, LoxInstance
from gejang.language.lox_types import (FunctionKind, LoxObject, LoxPrimitive, lox_division, lox_equality,
                                       lox_kind_name, lox_object_to_str, lox_truth)
from gejang.lexing.token import Tk, Token
from gejang.parsing.expr import *
from gejang.parsing.stmt import *
from gejang.runtime.control_flow import BREAK, Return, Signal
from gejang.runtime.environment import Environment
from gejang.runtime.natives import native_functions
from gejang.utilities.error import (LoxErrorHandler, LoxInternalError, LoxRuntimeError, NotCallable,
                                    OnlyInstancesHaveAttributes, PrintFailed, Unimplemented, UndefinedProperty,
                                    WrongNumberOfArgs)
from gejang.utilities.visitor import Visitor

# Binary operators, keyed by the operator and the Python types of both operands.
# Any combination not listed is not implemented.
_BINARY_OPS: Dict[Tuple[Tk, Type, Type], Callable[[Any, Any], LoxObject]] = {
    # Arithmetic:
    (Tk.PLUS, float, float): add,
    (Tk.MINUS, float, float): sub,
    (Tk.STAR, float, float): mul,
    (Tk.SLASH, float, float): lox_division,
    # Concatenation:
    (Tk.PLUS, str, str): add,
    # Comparison:
    (Tk.GREATER, float, float): gt,
    (Tk.GREATER_EQUAL, float, float): ge,
    (Tk.LESS, float, float): lt,
    (Tk.LESS_EQUAL, float, float): le,
}


class Interpreter(Visitor[Union[Expr, Stmt], Union[None, LoxObject, Signal]]):
    """Tree-walking evaluator.

    Expressions evaluate to Lox objects. Statements evaluate to a completion
    signal (see `gejang.runtime.control_flow`), which is None unless control is
    leaving a function or a loop early.
    """
    # pylint: disable=invalid-name
    _environment: Environment

    def __init__(self, error_handler: LoxErrorHandler, *, output: Optional[TextIO] = None) -> None:
        self._error_handler = error_handler
        self._output = output if output is not None else sys.stdout
        self._locals: Dict[Expr, int] = dict()
        self._environment = Environment()
        for name, native in native_functions().items():
            self._environment.define(name, native)

    def interpret(self, ast: List[Stmt], depths: Dict[Expr, int]) -> None:
        """Run a resolved program. The first runtime error stops the run and is
        reported to the error handler.

        `depths` only covers this program. Functions declared by earlier programs
        keep the table they were declared with."""
        try:
            with self._depth_table(depths):
                for stmt in ast:
                    self._execute(stmt)
        except (LoxRuntimeError, LoxInternalError) as error:
            self._error_handler.err(error)

    def evaluate(self, expr: Expr) -> LoxObject:
        return self.visit(expr)

    # ~~~ Helper functions ~~~

    def _execute(self, stmt: Stmt) -> Optional[Signal]:
        return self.visit(stmt)

    def _execute_all(self, statements: Iterable[Stmt]) -> Optional[Signal]:
        """Execute statements in order, stopping at the first that signals."""
        for stmt in statements:
            if (signal := self._execute(stmt)) is not None:
                return signal
        return None

    def _depth_of(self, expr: Expr) -> Optional[int]:
        return self._locals.get(expr)

    @contextmanager
    def _depth_table(self, depths: Dict[Expr, int]) -> Iterator[None]:
        previous = self._locals
        self._locals = depths
        try:
            yield
        finally:
            self._locals = previous

    # ~~~ Callable interpreter ~~~

    def _call(self, callee: LoxCallable, paren: Token, arguments: Sequence[LoxObject]) -> LoxObject:
        if isinstance(callee, LoxNativeFunction):
            try:
                return callee.callback(arguments)
            except TypeError as error:
                raise Unimplemented(paren, f"Native function {callee.name}: {error}") from error
        if isinstance(callee, LoxClass):
            instance = LoxInstance(callee)
            if (initializer := callee.initializer) is not None:
                self._call_function(initializer.bind_to_instance(instance), arguments)
            return instance
        if isinstance(callee, LoxFunction):
            return self._call_function(callee, arguments)
        raise NotCallable(paren)

    def _call_function(self, function: LoxFunction, arguments: Sequence[LoxObject]) -> LoxObject:
        # The body runs directly in the frame holding the parameters.
        environment = self._environment
        with self._depth_table(function.depths), environment.graft(function.closure), environment.scope():
            for param, arg in zip(function.params, arguments):
                self._environment.define(param.lexeme, arg)
            signal = self._execute_all(function.body)
        if function.function_kind is FunctionKind.INITIALIZER:
            return function.bound_instance
        if isinstance(signal, Return):
            return signal.value
        return None

    # ~~~ Statement interpreters ~~~

    def _visit_BlockStmt__(self, stmt: BlockStmt) -> Optional[Signal]:
        with self._environment.scope():
            return self._execute_all(stmt.statements)

    def _visit_BreakStmt__(self, stmt: BreakStmt) -> Signal:
        return BREAK

    def _visit_ClassStmt__(self, stmt: ClassStmt) -> None:
        closure = self._environment.snapshot()
        methods = {
            method.name.lexeme: LoxFunction(
                method,
                closure,
                FunctionKind.INITIALIZER if method.name.lexeme == "init" else FunctionKind.METHOD,
                depths=self._locals
            )
            for method in stmt.methods
        }
        self._environment.define(stmt.name.lexeme, LoxClass(stmt.name.lexeme, methods))

    def _visit_ExpressionStmt__(self, stmt: ExpressionStmt) -> None:
        self.evaluate(stmt.expression)

    def _visit_FunctionStmt__(self, stmt: FunctionStmt) -> None:
        # The closure shares the current frame, so the function can see itself.
        function = LoxFunction(stmt, self._environment.snapshot(), depths=self._locals)
        self._environment.define(stmt.name.lexeme, function)

    def _visit_IfStmt__(self, stmt: IfStmt) -> Optional[Signal]:
        if lox_truth(self.evaluate(stmt.condition)):
            return self._execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self._execute(stmt.else_branch)
        return None

    def _visit_PrintStmt__(self, stmt: PrintStmt) -> None:
        text = lox_object_to_str(self.evaluate(stmt.expression))
        try:
            print(text, file=self._output)
        except (OSError, ValueError) as error:
            raise PrintFailed(stmt.keyword) from error

    def _visit_ReturnStmt__(self, stmt: ReturnStmt) -> Signal:
        if stmt.value is not None:
            return Return(self.evaluate(stmt.value))
        return Return(None)

    def _visit_VarStmt__(self, stmt: VarStmt) -> None:
        value: LoxObject = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self._environment.define(stmt.name.lexeme, value)

    def _visit_WhileStmt__(self, stmt: WhileStmt) -> Optional[Signal]:
        while lox_truth(self.evaluate(stmt.condition)):
            if (signal := self._execute(stmt.body)) is BREAK:
                break
            if signal is not None:
                return signal
        return None

    # ~~~ Expression interpreters ~~~

    def _visit_AssignmentExpr__(self, expr: AssignmentExpr) -> LoxObject:
        value = self.evaluate(expr.value)
        self._environment.assign(expr.name, value, self._depth_of(expr))
        return value

    def _visit_BinaryExpr__(self, expr: BinaryExpr) -> LoxObject:
        """Evaluate both operands, then apply the operator.

        Equality is defined between any two objects. Every other operator is only
        defined on particular kinds of operands, and there are no implicit casts."""
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)

        if (op := expr.operator.token_type) is Tk.EQUAL_EQUAL:
            return lox_equality(left, right)
        if op is Tk.BANG_EQUAL:
            return not lox_equality(left, right)
        if (impl := _BINARY_OPS.get((op, type(left), type(right)))) is not None:
            return impl(left, right)
        raise Unimplemented(
            expr.operator,
            f"Binary operation not implemented: "
            f"{lox_kind_name(left)} {expr.operator.lexeme} {lox_kind_name(right)}"
        )

    def _visit_CallExpr__(self, expr: CallExpr) -> LoxObject:
        callee = self.evaluate(expr.callee)
        arguments = tuple(map(self.evaluate, expr.arguments))
        if not isinstance(callee, LoxCallable):
            raise NotCallable(expr.paren)
        if (found := len(arguments)) != (expected := callee.arity):
            raise WrongNumberOfArgs(expr.paren, expected, found)
        return self._call(callee, expr.paren, arguments)

    def _visit_GetExpr__(self, expr: GetExpr) -> LoxObject:
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise OnlyInstancesHaveAttributes(expr.name)
        try:
            return obj.get(expr.name.lexeme)
        except KeyError:
            raise UndefinedProperty(expr.name) from None

    def _visit_GroupingExpr__(self, expr: GroupingExpr) -> LoxObject:
        """Evaluate a group by evaluating the expression contained within."""
        return self.evaluate(expr.expression)

    def _visit_LiteralExpr__(self, expr: LiteralExpr) -> LoxPrimitive:
        """A literal is evaluated by extracting its value."""
        return expr.value

    def _visit_LogicalExpr__(self, expr: LogicalExpr) -> LoxObject:
        left = self.evaluate(expr.left)
        if expr.operator.token_type is Tk.OR:
            if lox_truth(left):
                return left
        else:
            if not lox_truth(left):
                return left
        return self.evaluate(expr.right)

    def _visit_SetExpr__(self, expr: SetExpr) -> LoxObject:
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise OnlyInstancesHaveAttributes(expr.name)
        value = self.evaluate(expr.value)
        obj.set(expr.name.lexeme, value)
        return value

    def _visit_ThisExpr__(self, expr: ThisExpr) -> LoxObject:
        return self._environment.get(expr.keyword, self._depth_of(expr))

    def _visit_UnaryExpr__(self, expr: UnaryExpr) -> LoxObject:
        """Evaluate the operand and then apply the correct unary operation.

        There are two unary operations: logical negation and arithmetic negation."""
        right = self.evaluate(expr.right)

        if (op := expr.operator.token_type) is Tk.BANG:
            return not lox_truth(right)
        if op is Tk.MINUS and isinstance(right, float):
            return -right
        raise Unimplemented(
            expr.operator, f"Unary operation not implemented: {expr.operator.lexeme}{lox_kind_name(right)}"
        )

    def _visit_VariableExpr__(self, expr: VariableExpr) -> LoxObject:
        return self._environment.get(expr.name, self._depth_of(expr))
