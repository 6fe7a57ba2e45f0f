from __future__ import annotations

from typing import Callable, Protocol, TypeVar

from returns.result import Result

from bookstore.core.domain.model.errors import BookstoreError

T = TypeVar("T")


class TransactionManager(Protocol):
    def atomic(
        self, work: Callable[[], Result[T, BookstoreError]]
    ) -> Result[T, BookstoreError]:
        """
        Run ``work`` as a single unit.

        Units touching the same rows are serialized (row locks or optimistic
        retries in a real database). When ``work`` returns a Failure or raises,
        none of its writes stay visible.
        """
        ...
