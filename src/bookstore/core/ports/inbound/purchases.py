from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence
from uuid import UUID

from returns.result import Result

from bookstore.core.domain.model.common import Money
from bookstore.core.domain.model.errors import BookstoreError
from bookstore.core.domain.model.purchase import Purchase, PurchaseStatus


@dataclass(frozen=True)
class PurchaseLine:
    book_id: UUID
    quantity: int


@dataclass(frozen=True)
class CreatePurchaseCommand:
    customer_name: str
    customer_email: str
    shipping_address: str
    lines: Sequence[PurchaseLine]
    discount_code: str | None = None


@dataclass(frozen=True)
class PurchaseStatistics:
    total_purchases: int
    pending_purchases: int
    confirmed_purchases: int
    cancelled_purchases: int
    total_revenue: Money


class PurchaseUseCase(Protocol):
    def create_purchase(
        self, command: CreatePurchaseCommand
    ) -> Result[Purchase, BookstoreError]: ...

    def confirm_purchase(self, purchase_id: UUID) -> Result[Purchase, BookstoreError]: ...

    def cancel_purchase(self, purchase_id: UUID) -> Result[Purchase, BookstoreError]: ...

    def update_purchase_status(
        self, purchase_id: UUID, status: PurchaseStatus
    ) -> Result[Purchase, BookstoreError]: ...

    def apply_discount_code(
        self, purchase_id: UUID, code: str
    ) -> Result[Purchase, BookstoreError]: ...


class PurchaseQueryUseCase(Protocol):
    def get_purchase_by_id(self, purchase_id: UUID) -> Result[Purchase, BookstoreError]: ...

    def get_purchase_by_order_number(
        self, order_number: str
    ) -> Result[Purchase, BookstoreError]: ...

    def get_purchases_by_customer_email(
        self, email: str
    ) -> Result[Sequence[Purchase], BookstoreError]: ...

    def get_purchases_by_status(
        self, status: PurchaseStatus
    ) -> Result[Sequence[Purchase], BookstoreError]: ...

    def list_purchases(self) -> Result[Sequence[Purchase], BookstoreError]: ...

    def get_purchase_statistics(self) -> Result[PurchaseStatistics, BookstoreError]: ...
