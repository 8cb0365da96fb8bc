"""Per-order write serialization.

Every handler that mutates an order holds that order's lock from the
moment it reads the order until its write is done.  Appends and captures
on the same order therefore never interleave inside one process; writers
in other processes are caught by the repository's version check.

A lock lives only while some thread holds or waits for it.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class OrderLocks:

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[int, _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, order_id: int) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(order_id)
            if entry is None:
                entry = self._entries[order_id] = _Entry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[order_id]
