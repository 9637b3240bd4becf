"""Bounded read-ahead buffer over a forward-only input.

The decoder needs random access into the input from every live frontier
offset, but never behind the lowest of them. `WindowBuffer` pulls elements
from the producer on demand and drops the prefix once it is truncated, so a
long or streamed input only keeps the span between the oldest live offset and
the furthest read-ahead in memory.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Generic, TypeVar, overload

from latticeviterbi.errors import InternalConsistencyError

T = TypeVar("T")


class WindowBuffer(Generic[T]):
    """Random-access cursor over an iterable with a discardable history."""

    def __init__(self, source: Iterable[T]) -> None:
        self._source: Iterator[T] = iter(source)
        self._window: deque[T] = deque()
        self._offset = 0
        self._exhausted = False

    @property
    def window_offset(self) -> int:
        """Index of the first retained element."""
        return self._offset

    @property
    def retained(self) -> int:
        return len(self._window)

    @property
    def exhausted(self) -> bool:
        """Whether the producer has reported its end."""
        return self._exhausted

    def get(self, idx: int, default: Any = None) -> T | Any:
        """Return element `idx`, or `default` past the end of the input."""
        self._check_index(idx)
        self._read_till(idx + 1)
        position = idx - self._offset
        if position >= len(self._window):
            return default
        return self._window[position]

    def covers(self, idx: int) -> bool:
        """Whether element `idx` exists in the input."""
        self._check_index(idx)
        self._read_till(idx + 1)
        return idx - self._offset < len(self._window)

    def truncate(self, idx: int) -> None:
        """Forget every element strictly before `idx`."""
        if idx <= self._offset:
            return
        self._read_till(idx)
        while self._offset < idx and self._window:
            self._window.popleft()
            self._offset += 1

    def drain(self) -> int:
        """Read the producer to its end and return the total input length."""
        while not self._exhausted:
            self._pull()
        return self._offset + len(self._window)

    def suffix(self, start: int) -> InputSuffix[T]:
        """Return a lazy view of the input from `start` onwards."""
        self._check_index(start)
        return InputSuffix(self, start)

    def _read_till(self, end: int) -> None:
        while not self._exhausted and self._offset + len(self._window) < end:
            self._pull()

    def _pull(self) -> None:
        try:
            self._window.append(next(self._source))
        except StopIteration:
            self._exhausted = True

    def _check_index(self, idx: int) -> None:
        if idx < 0:
            raise InternalConsistencyError(f"window index must be non-negative, got {idx}")
        if idx < self._offset:
            raise InternalConsistencyError(
                f"window index {idx} was discarded (window starts at {self._offset})"
            )


class InputSuffix(Sequence[T]):
    """Read-only view of the unconsumed input handed to `emission`.

    Indexing and iteration read lazily from the buffer. `len()` has to drain
    the producer, so streaming models should prefer indexing or truthiness.
    The view is only valid until the buffer is next truncated.
    """

    __slots__ = ("_buffer", "_start")

    def __init__(self, buffer: WindowBuffer[T], start: int) -> None:
        self._buffer = buffer
        self._start = start

    @property
    def start(self) -> int:
        """Absolute input offset of the first element of this view."""
        return self._start

    @property
    def window_offset(self) -> int:
        """First input offset still retained by the underlying buffer."""
        return self._buffer.window_offset

    def covers(self, index: int) -> bool:
        """Whether the view holds an element at relative position `index`."""
        return self._buffer.covers(self._start + index)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> list[T]: ...

    def __getitem__(self, index: int | slice) -> T | list[T]:
        if isinstance(index, slice):
            if _needs_length(index):
                return [self[i] for i in range(*index.indices(len(self)))]
            return list(self._iter_range(index))
        if index < 0:
            index += len(self)
            if index < 0:
                raise IndexError("input suffix index out of range")
        absolute = self._start + index
        if not self._buffer.covers(absolute):
            raise IndexError("input suffix index out of range")
        return self._buffer.get(absolute)

    def __iter__(self) -> Iterator[T]:
        idx = self._start
        while self._buffer.covers(idx):
            yield self._buffer.get(idx)
            idx += 1

    def __len__(self) -> int:
        return max(0, self._buffer.drain() - self._start)

    def __bool__(self) -> bool:
        return self._buffer.covers(self._start)

    def __repr__(self) -> str:
        return f"InputSuffix(start={self._start})"

    def _iter_range(self, index: slice) -> Iterator[T]:
        start = index.start or 0
        step = 1 if index.step is None else index.step
        position = start
        while index.stop is None or position < index.stop:
            absolute = self._start + position
            if not self._buffer.covers(absolute):
                return
            yield self._buffer.get(absolute)
            position += step


def _needs_length(index: slice) -> bool:
    if index.step is not None and index.step <= 0:
        return True
    return any(bound is not None and bound < 0 for bound in (index.start, index.stop))
