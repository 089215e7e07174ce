from __future__ import annotations
import threading
from typing import Generic, List, TypeVar

T = TypeVar("T")


class ConcurrentBag(Generic[T]):
    """
    Append-only container shared by batch workers.

    Contract:
        • any number of threads may call `append` concurrently;
        • nothing is ever removed or replaced;
        • `snapshot` is meant for the single reader that runs after every
          writer has finished (the batch join). It is still safe to call
          earlier, it just sees a prefix of the appends.
    """

    def __init__(self):
        self._items: List[T] = []
        self._lock = threading.Lock()

    def append(self, item: T) -> None:
        with self._lock:
            self._items.append(item)

    def snapshot(self) -> List[T]:
        """Return a copy of everything appended so far."""
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class AtomicCounter:
    """Monotonic counter with lock-protected increments (no lost updates)."""

    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    def increment(self, step: int = 1) -> int:
        """Add `step` and return the new value."""
        with self._lock:
            self._value += step
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value
