from __future__ import annotations  # Circular references in annotations.

from abc import ABC
from typing import Any, Callable, ClassVar, Dict, Generic, Optional, Type, TypeVar

V = TypeVar("V")
R = TypeVar("R")


class Visitor(Generic[V, R], ABC):
    """Base class that acts as a visitor in the visitor pattern.

    Implementations of visit methods are structured as follows:
    `def _visit_<Class>__(self, visitable)`

    The most specific implementation along the visitable's MRO is used, so a
    visitor may handle a whole family of nodes with a single method on their
    common base class.
    """
    _dispatch_cache: ClassVar[Dict[Type[Any], Callable[..., Any]]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._dispatch_cache = {}

    def visit(self, visitable: V) -> R:
        """Attempt to find and call the correct visitor function."""
        visitable_type = type(visitable)
        impl = type(self)._dispatch_cache.get(visitable_type)
        if impl is None:
            impl = self._find_impl(visitable_type)
            type(self)._dispatch_cache[visitable_type] = impl
        return impl(self, visitable)

    @classmethod
    def _find_impl(cls, visitable_type: Type[Any]) -> Callable[..., Any]:
        for class_ in visitable_type.mro():
            impl: Optional[Callable[..., Any]] = getattr(cls, f"_visit_{class_.__name__}__", None)
            if impl is not None:
                return impl
        raise NotImplementedError(f"{cls.__name__} does not implement visit() for {visitable_type.__name__}")
