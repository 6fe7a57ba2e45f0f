from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence
from uuid import UUID

from returns.result import Failure, Result, Success

from bookstore.core.domain.model.book import Book
from bookstore.core.domain.model.errors import (
    BookNotFound,
    BookstoreError,
    DuplicateIsbn,
)
from bookstore.core.ports.outbound.books import BookCriteria, BookRepository


@dataclass
class InMemoryBookRepository(BookRepository):
    _store: Dict[UUID, Book] = field(default_factory=dict)

    def get(self, book_id: UUID) -> Result[Book, BookstoreError]:
        book = self._store.get(book_id)
        if book is None:
            return Failure(BookNotFound(message="book not found", identifier=str(book_id)))
        return Success(book)

    def get_by_isbn(self, isbn: str) -> Result[Book, BookstoreError]:
        for book in list(self._store.values()):
            if book.isbn == isbn:
                return Success(book)
        return Failure(BookNotFound(message="book not found", identifier=isbn))

    def save(self, book: Book) -> Result[Book, BookstoreError]:
        # isbn is unique across the catalogue
        for other in list(self._store.values()):
            if other.isbn == book.isbn and other.id != book.id:
                return Failure(
                    DuplicateIsbn(message="isbn already exists", isbn=book.isbn)
                )
        self._store[book.id] = book
        return Success(book)

    def delete(self, book_id: UUID) -> Result[None, BookstoreError]:
        if self._store.pop(book_id, None) is None:
            return Failure(BookNotFound(message="book not found", identifier=str(book_id)))
        return Success(None)

    def exists_by_id(self, book_id: UUID) -> bool:
        return book_id in self._store

    def exists_by_isbn(self, isbn: str) -> bool:
        return any(b.isbn == isbn for b in list(self._store.values()))

    def list_all(self) -> Sequence[Book]:
        return tuple(self._store.values())  # insertion order

    def search(self, criteria: BookCriteria) -> Sequence[Book]:
        return tuple(b for b in list(self._store.values()) if _matches(b, criteria))

    # ---- transaction support ----------------------------------------------

    def snapshot(self) -> Dict[UUID, Book]:
        return dict(self._store)

    def restore(self, snapshot: Dict[UUID, Book]) -> None:
        self._store = dict(snapshot)


def _contains(value: str | None, needle: str) -> bool:
    return value is not None and needle.lower() in value.lower()


def _matches(book: Book, c: BookCriteria) -> bool:
    if c.available_only and not book.is_available():
        return False
    if c.author is not None and not _contains(book.author, c.author):
        return False
    if c.title is not None and not _contains(book.title, c.title):
        return False
    if c.genre is not None and (book.genre or "").lower() != c.genre.lower():
        return False
    if c.min_price is not None and book.price.amount < c.min_price:
        return False
    if c.max_price is not None and book.price.amount > c.max_price:
        return False
    if c.text is not None and not (
        _contains(book.title, c.text)
        or _contains(book.author, c.text)
        or _contains(book.genre, c.text)
    ):
        return False
    return True
