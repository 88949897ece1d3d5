from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Hashable, Iterator, Protocol

from ..common.locks import KeyedLock
from .connection import DatabaseConnection


class TransactionManager(Protocol):
    def atomic(self, key: Hashable) -> ContextManager[None]:
        """Run a unit of work serialized against others sharing ``key``."""
        raise NotImplementedError


class InProcessTransactions:
    """Per-key locking only; used with repositories that have no transactions of their own."""

    def __init__(self, locks: KeyedLock | None = None):
        self._locks = locks if locks is not None else KeyedLock()

    @contextmanager
    def atomic(self, key: Hashable) -> Iterator[None]:
        with self._locks.hold(key):
            yield


class MySQLTransactions:
    """One DB transaction per unit of work.

    Cross-process serialization comes from the row lock the service takes on the
    summary row (``SummaryRepository.lock``); the in-process lock only avoids
    needless lock waits between threads of the same worker.
    """

    def __init__(self, conn_factory: DatabaseConnection, locks: KeyedLock | None = None):
        self._conn_factory = conn_factory
        self._locks = locks if locks is not None else KeyedLock()

    @contextmanager
    def atomic(self, key: Hashable) -> Iterator[None]:
        with self._locks.hold(key):
            with self._conn_factory.transaction():
                yield
