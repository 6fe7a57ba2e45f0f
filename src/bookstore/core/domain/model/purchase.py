from __future__ import annotations

import time
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Mapping, Tuple
from uuid import UUID, uuid4

from returns.result import Failure, Result, Success

from bookstore.core.domain.model.book import Book
from bookstore.core.domain.model.common import (
    DEFAULT_CURRENCY,
    EntityMetadata,
    Money,
    fold_money,
    now_utc,
)
from bookstore.core.domain.model.discount import DiscountRule, normalize_code
from bookstore.core.domain.model.errors import (
    BookstoreError,
    InvalidArgument,
    InvalidPurchaseState,
)


class PurchaseStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


ALLOWED_TRANSITIONS: Mapping[PurchaseStatus, frozenset[PurchaseStatus]] = {
    PurchaseStatus.PENDING: frozenset(
        {PurchaseStatus.CONFIRMED, PurchaseStatus.CANCELLED}
    ),
    PurchaseStatus.CONFIRMED: frozenset(
        {PurchaseStatus.PROCESSING, PurchaseStatus.CANCELLED}
    ),
    PurchaseStatus.PROCESSING: frozenset(
        {PurchaseStatus.SHIPPED, PurchaseStatus.CANCELLED}
    ),
    PurchaseStatus.SHIPPED: frozenset({PurchaseStatus.DELIVERED}),
    PurchaseStatus.DELIVERED: frozenset({PurchaseStatus.REFUNDED}),
    PurchaseStatus.CANCELLED: frozenset(),
    PurchaseStatus.REFUNDED: frozenset(),
}


def can_transition(current: PurchaseStatus, target: PurchaseStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def new_order_number() -> str:
    """ORD-{epoch millis}-{8 random hex chars}."""
    millis = time.time_ns() // 1_000_000
    return f"ORD-{millis}-{uuid4().hex[:8].upper()}"


@dataclass(frozen=True)
class PurchaseItem:
    """One order line.

    The book fields and the unit price are a snapshot taken when the line was
    created; later catalogue changes never flow back into an existing item.
    """

    book_id: UUID
    book_title: str
    book_author: str
    book_isbn: str
    unit_price: Money
    quantity: int

    @staticmethod
    def from_book(book: Book, quantity: int) -> "PurchaseItem":
        return PurchaseItem(
            book_id=book.id,
            book_title=book.title,
            book_author=book.author,
            book_isbn=book.isbn,
            unit_price=book.price,
            quantity=quantity,
        )

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> Result["PurchaseItem", BookstoreError]:
        if quantity < 1:
            return Failure(InvalidArgument("item quantity must be >= 1"))
        return Success(replace(self, quantity=quantity))

    def with_unit_price(self, unit_price: Money) -> "PurchaseItem":
        return replace(self, unit_price=unit_price)


@dataclass(frozen=True)
class Purchase:
    metadata: EntityMetadata
    order_number: str
    customer_name: str
    customer_email: str
    shipping_address: str
    purchase_date: datetime
    items: Tuple[PurchaseItem, ...] = ()
    discount_amount: Money = Money.zero()
    discount_code: str | None = None
    status: PurchaseStatus = PurchaseStatus.PENDING
    currency: str = DEFAULT_CURRENCY

    @staticmethod
    def open(
        customer_name: str,
        customer_email: str,
        shipping_address: str,
        currency: str = DEFAULT_CURRENCY,
    ) -> "Purchase":
        return Purchase(
            metadata=EntityMetadata.new(),
            order_number=new_order_number(),
            customer_name=customer_name,
            customer_email=customer_email,
            shipping_address=shipping_address,
            purchase_date=now_utc(),
            discount_amount=Money.zero(currency),
            currency=currency,
        )

    @property
    def id(self) -> UUID:
        return self.metadata.id

    # ---- totals ------------------------------------------------------------

    @property
    def subtotal(self) -> Money:
        return fold_money((it.subtotal for it in self.items), currency=self.currency)

    @property
    def total_items(self) -> int:
        return sum(it.quantity for it in self.items)

    @property
    def total_amount(self) -> Money:
        return (self.subtotal - self.discount_amount).clamp_to_zero()

    # ---- items -------------------------------------------------------------

    def add_item(self, item: PurchaseItem) -> "Purchase":
        return self._with(items=self.items + (item,))

    def remove_item(self, index: int) -> Result["Purchase", BookstoreError]:
        if not 0 <= index < len(self.items):
            return Failure(InvalidArgument(f"no item at position {index}"))
        return Success(self._with(items=self.items[:index] + self.items[index + 1 :]))

    # ---- discount ----------------------------------------------------------

    def apply_discount(self, rule: DiscountRule, code: str) -> "Purchase":
        # a new code replaces the previous discount, discounts never stack
        return self._with(
            discount_code=normalize_code(code),
            discount_amount=rule.amount_for(self.subtotal),
        )

    def clear_discount(self) -> "Purchase":
        return self._with(discount_code=None, discount_amount=Money.zero(self.currency))

    # ---- lifecycle ---------------------------------------------------------

    def is_modifiable(self) -> bool:
        return self.status is PurchaseStatus.PENDING

    def is_completed(self) -> bool:
        return self.status is PurchaseStatus.DELIVERED

    def confirm(self) -> Result["Purchase", BookstoreError]:
        if self.status is not PurchaseStatus.PENDING:
            return Failure(
                InvalidPurchaseState(
                    message=f"cannot confirm purchase in status {self.status.value}",
                    current=self.status.value,
                    requested=PurchaseStatus.CONFIRMED.value,
                )
            )
        return Success(self._with(status=PurchaseStatus.CONFIRMED))

    def cancel(self) -> Result["Purchase", BookstoreError]:
        return self.transition_to(PurchaseStatus.CANCELLED)

    def transition_to(
        self, target: PurchaseStatus
    ) -> Result["Purchase", BookstoreError]:
        if not can_transition(self.status, target):
            return Failure(
                InvalidPurchaseState(
                    message=(
                        f"cannot transition from {self.status.value} to {target.value}"
                    ),
                    current=self.status.value,
                    requested=target.value,
                )
            )
        return Success(self._with(status=target))

    def _with(self, **changes: object) -> "Purchase":
        return replace(self, metadata=self.metadata.touched(), **changes)
