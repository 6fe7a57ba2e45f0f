from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, Sequence
from uuid import UUID

from returns.result import Result

from bookstore.core.domain.model.book import Book
from bookstore.core.domain.model.errors import BookstoreError


@dataclass(frozen=True)
class BookCriteria:
    author: str | None = None  # substring, case-insensitive
    title: str | None = None  # substring, case-insensitive
    genre: str | None = None  # exact, case-insensitive
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    text: str | None = None  # matches title, author or genre
    available_only: bool = False


class BookRepository(Protocol):
    def get(self, book_id: UUID) -> Result[Book, BookstoreError]: ...

    def get_by_isbn(self, isbn: str) -> Result[Book, BookstoreError]: ...

    def save(self, book: Book) -> Result[Book, BookstoreError]: ...

    def delete(self, book_id: UUID) -> Result[None, BookstoreError]: ...

    def exists_by_id(self, book_id: UUID) -> bool: ...

    def exists_by_isbn(self, isbn: str) -> bool: ...

    def list_all(self) -> Sequence[Book]: ...

    def search(self, criteria: BookCriteria) -> Sequence[Book]: ...
