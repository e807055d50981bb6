"""Per-key locks for stock counters and order transitions.

Variant counters live on the Product aggregate, so the product id is the lock
key for every stock counter. Order transitions that touch no stock lock on
``order:<id>``. Locks are re-entrant: a checkout that already holds a
product's lock can call ``ProductStockStore.adjust_stock`` on it.

Entries are reference counted and dropped once no thread holds or waits on
them, so the registry only ever contains keys that are in use.
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


class StockLocks:
    """Hands out one lock per key, acquired in sorted order."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _Entry] = {}

    def _checkout(self, key: str) -> _Entry:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _Entry()
            entry.users += 1
            return entry

    def _return(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, keys: Iterable) -> Iterator[list[str]]:
        """Hold the locks of all ``keys`` for the duration of the block.

        Keys are de-duplicated and sorted so two callers with overlapping
        keys always acquire in the same order.
        """
        ordered = sorted({str(key) for key in keys if key})
        reserved = []
        acquired = []
        try:
            for key in ordered:
                entry = self._checkout(key)
                reserved.append(key)
                entry.lock.acquire()
                acquired.append(entry.lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in reversed(reserved):
                self._return(key)
