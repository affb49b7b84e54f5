from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Generic, Iterator, List, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")

Frame = Dict[K, V]
RawStack = List[Frame[K, V]]


class StackedMap(Generic[K, V]):
    """A stack of mappings, innermost last. The first frame is the global frame
    and is never popped.

    Frames are plain dicts that may be shared between several stacks: a
    snapshot of a stack holds the very same frame objects, so writes made through
    one stack are visible through every other stack holding that frame.
    """

    def __init__(self) -> None:
        self._stack: RawStack[K, V] = [{}]

    def __getitem__(self, idx):  # type: ignore
        return self._stack[idx]

    def __len__(self) -> int:
        return len(self._stack)

    @property
    def base(self) -> Frame[K, V]:
        return self._stack[0]

    def reset(self, base: Optional[Frame[K, V]] = None) -> None:
        """Drop every frame, replacing the global frame with `base` (or an empty one)."""
        self._stack = [base if base is not None else {}]

    def push(self) -> None:
        self._stack.append({})

    def pop(self) -> None:
        assert self.is_local(), "The global frame cannot be popped."
        self._stack.pop()

    @contextmanager
    def scope(self) -> Iterator[None]:
        self.push()
        try:
            yield
        finally:
            self.pop()

    def snapshot(self) -> RawStack[K, V]:
        """Copy the stack itself, sharing its frames."""
        return list(self._stack)

    @contextmanager
    def graft(self, stack: RawStack[K, V]) -> Iterator[None]:
        """Temporarily replace the whole stack with a snapshot."""
        original = self._stack
        self._stack = list(stack)
        try:
            yield
        finally:
            self._stack = original

    def is_local(self) -> bool:
        return len(self._stack) > 1

    def define(self, key: K, value: V) -> None:
        self._stack[-1][key] = value

    def frame_at(self, depth: Optional[int]) -> Optional[Frame[K, V]]:
        """Return the frame `depth` steps out from the innermost one, or the global
        frame if `depth` is None. Return None if the stack is not that deep."""
        if depth is None:
            return self._stack[0]
        if not 0 <= depth < len(self._stack):
            return None
        return self._stack[-1 - depth]

