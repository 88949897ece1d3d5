from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List


class KeyedLock:
    """One re-entrant lock per key, created on demand.

    Serializes read-modify-write sequences that share a key (e.g. one summary row)
    while letting unrelated keys proceed in parallel. An entry lives only while
    some thread holds or waits for it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of threads holding or waiting]
        self._locks: Dict[Hashable, List] = {}

    def _acquire_entry(self, key: Hashable) -> threading.RLock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _release_entry(self, key: Hashable) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield
        finally:
            self._release_entry(key)
