from __future__ import annotations

from typing import Protocol, Sequence
from uuid import UUID

from returns.result import Result

from bookstore.core.domain.model.errors import BookstoreError
from bookstore.core.domain.model.purchase import Purchase, PurchaseStatus


class PurchaseRepository(Protocol):
    """
    Purchases are keyed by id and by order number; a real database puts a
    UNIQUE constraint on order_number.
    """

    def get(self, purchase_id: UUID) -> Result[Purchase, BookstoreError]: ...

    def get_by_order_number(
        self, order_number: str
    ) -> Result[Purchase, BookstoreError]: ...

    def save(self, purchase: Purchase) -> Result[Purchase, BookstoreError]: ...

    def find_by_status(self, status: PurchaseStatus) -> Sequence[Purchase]: ...

    def find_by_customer_email(self, email: str) -> Sequence[Purchase]: ...

    def find_all(self) -> Sequence[Purchase]: ...

    def count(self) -> int: ...

    def count_by_status(self, status: PurchaseStatus) -> int: ...
