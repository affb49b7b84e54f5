from __future__ import annotations

from abc import ABC
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence

from gejang.language.lox_types import FunctionKind, LoxObject
from gejang.utilities.stacked_map import RawStack

if TYPE_CHECKING:
    from gejang.language.lox_class import LoxInstance
    from gejang.lexing.token import Token
    from gejang.parsing.expr import Expr
    from gejang.parsing.stmt import FunctionStmt, Stmt

NativeCallback = Callable[[Sequence[LoxObject]], LoxObject]


class LoxCallable(ABC):
    kind: str
    name: str
    arity: int


class LoxNativeFunction(LoxCallable):
    """A function implemented in Python. `callback` receives exactly `arity` arguments."""
    kind = "NativeFunction"

    def __init__(self, name: str, arity: int, callback: NativeCallback) -> None:
        self.name = name
        self.arity = arity
        self.callback = callback

    def __str__(self) -> str:
        return f"<native fun {self.name}/{self.arity}>"


class LoxFunction(LoxCallable):
    """A user-defined function together with the environment stack it was declared in.

    `depths` is the resolver's table for the program the declaration came from,
    which is what variable references in the body are looked up in."""
    kind = "Function"

    def __init__(
            self,
            declaration: FunctionStmt,
            closure: RawStack[str, LoxObject],
            function_kind: FunctionKind = FunctionKind.FUNCTION,
            bound_instance: Optional[LoxInstance] = None,
            *,
            depths: Optional[Dict[Expr, int]] = None
    ) -> None:
        self.declaration = declaration
        self.closure = closure
        self.function_kind = function_kind
        self.bound_instance = bound_instance
        self.depths: Dict[Expr, int] = depths if depths is not None else dict()

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.declaration.name.lexeme

    @property
    def params(self) -> List[Token]:
        return self.declaration.params

    @property
    def body(self) -> List[Stmt]:
        return self.declaration.body

    @property
    def arity(self) -> int:  # type: ignore[override]
        return len(self.declaration.params)

    @property
    def is_unbound_method(self) -> bool:
        return self.function_kind is not FunctionKind.FUNCTION and self.bound_instance is None

    def bind_to_instance(self, instance: LoxInstance) -> LoxFunction:
        """Return a copy of this method whose closure has an extra innermost frame
        in which `this` is `instance`."""
        return LoxFunction(
            self.declaration,
            [*self.closure, {"this": instance}],
            self.function_kind,
            instance,
            depths=self.depths
        )

    def __str__(self) -> str:
        return f"<fun {self.name}/{self.arity}>"
