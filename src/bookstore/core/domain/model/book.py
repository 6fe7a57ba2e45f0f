from __future__ import annotations

from dataclasses import dataclass, replace
from uuid import UUID

from returns.result import Failure, Result, Success

from bookstore.core.domain.model.common import EntityMetadata, Money
from bookstore.core.domain.model.errors import (
    BookstoreError,
    InsufficientStock,
    InvalidArgument,
)

_REVISABLE_FIELDS = frozenset(
    {"title", "author", "price", "publisher", "publication_year", "genre", "description"}
)


@dataclass(frozen=True)
class Book:
    """A catalogue entry and its on-hand inventory.

    Books are immutable: every stock change returns a new ``Book`` so a
    failed change can never leave a half-updated instance behind.
    """

    metadata: EntityMetadata
    isbn: str
    title: str
    author: str
    price: Money
    quantity: int = 0
    publisher: str | None = None
    publication_year: int | None = None
    genre: str | None = None
    description: str | None = None

    @property
    def id(self) -> UUID:
        return self.metadata.id

    def has_stock(self, amount: int) -> bool:
        return self.quantity >= amount

    def is_available(self) -> bool:
        return self.quantity > 0

    def reduce_quantity(self, amount: int) -> Result["Book", BookstoreError]:
        if amount < 0:
            return Failure(InvalidArgument(f"amount must be >= 0, got {amount}"))
        if not self.has_stock(amount):
            return Failure(
                InsufficientStock(
                    message="insufficient stock",
                    isbn=self.isbn,
                    requested=amount,
                    available=self.quantity,
                )
            )
        return Success(self._with(quantity=self.quantity - amount))

    def add_quantity(self, amount: int) -> Result["Book", BookstoreError]:
        if amount < 0:
            return Failure(InvalidArgument(f"amount must be >= 0, got {amount}"))
        return Success(self._with(quantity=self.quantity + amount))

    def with_quantity(self, quantity: int) -> Result["Book", BookstoreError]:
        if quantity < 0:
            return Failure(InvalidArgument("quantity cannot be negative"))
        return Success(self._with(quantity=quantity))

    def revise(self, **changes: object) -> Result["Book", BookstoreError]:
        unknown = set(changes) - _REVISABLE_FIELDS
        if unknown:
            return Failure(InvalidArgument(f"cannot revise fields: {sorted(unknown)}"))
        price = changes.get("price")
        if isinstance(price, Money) and price.is_negative():
            return Failure(InvalidArgument("price cannot be negative"))
        return Success(self._with(**changes))

    def _with(self, **changes: object) -> "Book":
        return replace(self, metadata=self.metadata.touched(), **changes)
