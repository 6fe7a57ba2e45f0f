from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from returns.result import Failure, Result

from bookstore.adapters.outbound.in_memory_books import InMemoryBookRepository
from bookstore.adapters.outbound.in_memory_purchases import InMemoryPurchaseRepository
from bookstore.core.domain.model.errors import BookstoreError
from bookstore.core.ports.outbound.transactions import TransactionManager

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class InMemoryTransactionManager(TransactionManager):
    """
    Serializes units of work with one re-entrant lock and undoes their writes
    by restoring a snapshot taken on entry. Entities are immutable, so a
    shallow copy of each store is a complete snapshot.
    """

    books: InMemoryBookRepository
    purchases: InMemoryPurchaseRepository
    _lock: threading.RLock = field(default_factory=threading.RLock)

    def atomic(
        self, work: Callable[[], Result[T, BookstoreError]]
    ) -> Result[T, BookstoreError]:
        with self._lock:
            books_before = self.books.snapshot()
            purchases_before = self.purchases.snapshot()
            try:
                result = work()
            except BaseException:
                self._rollback(books_before, purchases_before)
                raise
            if isinstance(result, Failure):
                logger.debug("rolling back: %s", type(result.failure()).__name__)
                self._rollback(books_before, purchases_before)
            return result

    def _rollback(self, books_before, purchases_before) -> None:
        self.books.restore(books_before)
        self.purchases.restore(purchases_before)
