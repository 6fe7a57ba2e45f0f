from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple
from uuid import UUID

from returns.result import Failure, Result, Success

from bookstore.core.domain.model.errors import (
    BookstoreError,
    PersistenceError,
    PurchaseNotFound,
)
from bookstore.core.domain.model.purchase import Purchase, PurchaseStatus
from bookstore.core.ports.outbound.purchases import PurchaseRepository


@dataclass
class InMemoryPurchaseRepository(PurchaseRepository):
    _store: Dict[UUID, Purchase] = field(default_factory=dict)
    _by_order_number: Dict[str, UUID] = field(default_factory=dict)

    def get(self, purchase_id: UUID) -> Result[Purchase, BookstoreError]:
        purchase = self._store.get(purchase_id)
        if purchase is None:
            return Failure(
                PurchaseNotFound(message="purchase not found", identifier=str(purchase_id))
            )
        return Success(purchase)

    def get_by_order_number(self, order_number: str) -> Result[Purchase, BookstoreError]:
        purchase_id = self._by_order_number.get(order_number)
        if purchase_id is None:
            return Failure(
                PurchaseNotFound(message="purchase not found", identifier=order_number)
            )
        return self.get(purchase_id)

    def save(self, purchase: Purchase) -> Result[Purchase, BookstoreError]:
        owner = self._by_order_number.get(purchase.order_number)
        if owner is not None and owner != purchase.id:
            return Failure(PersistenceError(message="order_number already exists"))
        self._store[purchase.id] = purchase
        self._by_order_number[purchase.order_number] = purchase.id
        return Success(purchase)

    def find_by_status(self, status: PurchaseStatus) -> Sequence[Purchase]:
        return tuple(p for p in self.find_all() if p.status is status)

    def find_by_customer_email(self, email: str) -> Sequence[Purchase]:
        wanted = email.strip().lower()
        return tuple(p for p in self.find_all() if p.customer_email.lower() == wanted)

    def find_all(self) -> Sequence[Purchase]:
        return tuple(self._store.values())  # insertion order

    def count(self) -> int:
        return len(self._store)

    def count_by_status(self, status: PurchaseStatus) -> int:
        return len(self.find_by_status(status))

    # ---- transaction support ----------------------------------------------

    def snapshot(self) -> Tuple[Dict[UUID, Purchase], Dict[str, UUID]]:
        return dict(self._store), dict(self._by_order_number)

    def restore(self, snapshot: Tuple[Dict[UUID, Purchase], Dict[str, UUID]]) -> None:
        store, index = snapshot
        self._store = dict(store)
        self._by_order_number = dict(index)
