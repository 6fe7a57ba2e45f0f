from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


# eq=False keeps exceptions hashable and lets the runtime attach tracebacks.
@dataclass(eq=False)
class BookstoreError(Exception):
    message: str

    code: ClassVar[str] = "BOOKSTORE_ERROR"

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(eq=False)
class InvalidArgument(BookstoreError):
    code: ClassVar[str] = "INVALID_ARGUMENT"


@dataclass(eq=False)
class BookNotFound(BookstoreError):
    identifier: str

    code: ClassVar[str] = "BOOK_NOT_FOUND"

    def __str__(self) -> str:  # pragma: no cover
        return f"book_not_found: {self.identifier} ({self.message})"


@dataclass(eq=False)
class DuplicateIsbn(BookstoreError):
    isbn: str

    code: ClassVar[str] = "DUPLICATE_ISBN"

    def __str__(self) -> str:  # pragma: no cover
        return f"duplicate_isbn: {self.isbn} ({self.message})"


@dataclass(eq=False)
class InsufficientStock(BookstoreError):
    isbn: str
    requested: int
    available: int

    code: ClassVar[str] = "INSUFFICIENT_STOCK"

    def __str__(self) -> str:  # pragma: no cover
        return (
            f"insufficient_stock: isbn={self.isbn} requested={self.requested} "
            f"available={self.available} ({self.message})"
        )


@dataclass(eq=False)
class PurchaseNotFound(BookstoreError):
    identifier: str

    code: ClassVar[str] = "PURCHASE_NOT_FOUND"

    def __str__(self) -> str:  # pragma: no cover
        return f"purchase_not_found: {self.identifier} ({self.message})"


@dataclass(eq=False)
class InvalidDiscountCode(BookstoreError):
    discount_code: str

    code: ClassVar[str] = "INVALID_DISCOUNT_CODE"

    def __str__(self) -> str:  # pragma: no cover
        return f"invalid_discount_code: '{self.discount_code}' ({self.message})"


@dataclass(eq=False)
class InvalidPurchaseState(BookstoreError):
    current: str
    requested: str | None = None

    code: ClassVar[str] = "INVALID_PURCHASE_STATE"

    def __str__(self) -> str:  # pragma: no cover
        if self.requested is None:
            return f"invalid_purchase_state: {self.current} ({self.message})"
        return (
            f"invalid_purchase_state: {self.current} -> {self.requested} "
            f"({self.message})"
        )


@dataclass(eq=False)
class PersistenceError(BookstoreError):
    code: ClassVar[str] = "PERSISTENCE_ERROR"
