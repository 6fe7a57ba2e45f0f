from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, Sequence
from uuid import UUID

from returns.result import Result

from bookstore.core.domain.model.book import Book
from bookstore.core.domain.model.errors import BookstoreError


@dataclass(frozen=True)
class CreateBookCommand:
    isbn: str
    title: str
    author: str
    price: Decimal
    quantity: int = 0
    publisher: str | None = None
    publication_year: int | None = None
    genre: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class UpdateBookCommand:
    """Partial update: ``None`` leaves the field as it is."""

    title: str | None = None
    author: str | None = None
    price: Decimal | None = None
    publisher: str | None = None
    publication_year: int | None = None
    genre: str | None = None
    description: str | None = None
    quantity: int | None = None


class CatalogUseCase(Protocol):
    def create_book(self, command: CreateBookCommand) -> Result[Book, BookstoreError]: ...

    def get_book_by_id(self, book_id: UUID) -> Result[Book, BookstoreError]: ...

    def get_book_by_isbn(self, isbn: str) -> Result[Book, BookstoreError]: ...

    def list_books(self) -> Result[Sequence[Book], BookstoreError]: ...

    def update_book(
        self, book_id: UUID, command: UpdateBookCommand
    ) -> Result[Book, BookstoreError]: ...

    def delete_book(self, book_id: UUID) -> Result[None, BookstoreError]: ...

    def find_books_by_author(self, author: str) -> Result[Sequence[Book], BookstoreError]: ...

    def find_books_by_title(self, title: str) -> Result[Sequence[Book], BookstoreError]: ...

    def find_books_by_genre(self, genre: str) -> Result[Sequence[Book], BookstoreError]: ...

    def find_books_by_price_range(
        self, min_price: Decimal, max_price: Decimal
    ) -> Result[Sequence[Book], BookstoreError]: ...

    def list_available_books(self) -> Result[Sequence[Book], BookstoreError]: ...

    def search_books(self, term: str) -> Result[Sequence[Book], BookstoreError]: ...

    def update_stock(self, book_id: UUID, quantity: int) -> Result[Book, BookstoreError]: ...
