"""A thread-safe pool of reusable objects."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

__all__ = ["Pool"]

T = TypeVar("T")


class Pool(Generic[T]):
    """Pool of objects handed out to one user at a time.

    :meth:`acquire` blocks until an object is free. An object handed back
    with :meth:`release` is the next one to be acquired.
    """

    def __init__(self):
        self._condition = threading.Condition()
        self._free: deque[T] = deque()
        self._in_use = 0

    def acquire(self) -> T:
        """Take an object, waiting until one becomes available."""
        with self._condition:
            self._condition.wait_for(lambda: bool(self._free))
            self._in_use += 1
            return self._free.popleft()

    def release(self, item: T) -> None:
        """Hand back an object obtained from :meth:`acquire`."""
        with self._condition:
            if self._in_use == 0:
                raise RuntimeError("no object of the pool is in use")
            self._in_use -= 1
            self._free.appendleft(item)
            self._condition.notify()

    def available(self) -> bool:
        """Whether at least one object is free."""
        with self._condition:
            return bool(self._free)

    def __len__(self) -> int:
        with self._condition:
            return len(self._free) + self._in_use

    def clear(self) -> None:
        """Drop every object of the pool."""
        with self._condition:
            if self._in_use > 0:
                raise RuntimeError("cannot clear pool when some objects are in use")
            self._free.clear()

    def push_back(self, item: T) -> None:
        """Add an object to the pool."""
        with self._condition:
            self._free.append(item)
            self._condition.notify()

    def extend(self, items: Iterable[T]) -> None:
        """Add several objects to the pool."""
        with self._condition:
            before = len(self._free)
            self._free.extend(items)
            self._condition.notify(len(self._free) - before)

    @contextmanager
    def borrowed(self) -> Iterator[T]:
        """Acquire an object for the duration of a ``with`` block."""
        item = self.acquire()
        try:
            yield item
        finally:
            self.release(item)