from __future__ import annotations  # Reference the parent class in methods' annotations.

from typing import Any, Generic, Optional, Sequence, TypeVar, overload

T = TypeVar("T")  # pylint: disable=invalid-name


class StreamView(Generic[T]):
    """A cursor over a Sequence. Elements can be peeked at without being consumed,
    and the consumed range since a marker can be retrieved as a slice.

    Both the scanner (over characters) and the parser (over tokens) read their
    input through one of these."""

    def __init__(self, sequence: Sequence[T]) -> None:
        self.sequence = sequence
        self.current_index = 0
        self.marker_index = 0

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index):
        return self.sequence[index]

    def __len__(self) -> int:
        return len(self.sequence)

    def has_next(self, lookahead: int = 0) -> bool:
        return self.current_index + lookahead < len(self)

    def set_marker(self) -> None:
        """Mark the current position, for use by `slice_from_marker()`."""
        self.marker_index = self.current_index

    def slice_from_marker(self) -> Sequence[T]:
        return self[self.marker_index:self.current_index]

    def peek(self, lookahead: int = 0) -> Optional[T]:
        """Return the element `lookahead` places after the next one, if there is one."""
        index = self.current_index + lookahead
        if 0 <= index < len(self):
            return self[index]
        return None

    def previous(self) -> Optional[T]:
        """Return the most recently consumed element."""
        return self.peek(-1)

    def match(self, *expected: Any) -> bool:
        """Test if the next element is one of the `expected` values."""
        return self.peek() in expected

    def advance(self) -> T:
        """Consume the next element and return it."""
        if not self.has_next():
            raise IndexError("Items have been exhausted.")
        self.current_index += 1
        return self[self.current_index - 1]

    def advance_if_match(self, *expected: Any) -> bool:
        """Consume the next element if it is one of the `expected` values."""
        if self.match(*expected):
            self.advance()
            return True
        return False
