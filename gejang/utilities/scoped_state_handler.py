from contextlib import contextmanager
from typing import Generic, Iterator, List, TypeVar

T = TypeVar("T")


class ScopedStateHandler(Generic[T]):
    """A flag that can be overridden for the extent of a `with` block, restoring
    the previous value on the way out.

    The resolver tracks the kind of function it is in, and whether it is inside
    a class body or a loop, with these."""

    def __init__(self, default: T) -> None:
        self._overrides: List[T] = [default]

    @property
    def state(self) -> T:
        return self._overrides[-1]

    @contextmanager
    def enter(self, state: T) -> Iterator[None]:
        self._overrides.append(state)
        try:
            yield
        finally:
            del self._overrides[-1]
