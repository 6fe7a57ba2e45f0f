from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from returns.pipeline import flow
from returns.pointfree import bind
from returns.result import Failure, Result, Success

from bookstore.core.domain.model.book import Book
from bookstore.core.domain.model.common import DEFAULT_CURRENCY, EntityMetadata, Money
from bookstore.core.domain.model.errors import (
    BookstoreError,
    DuplicateIsbn,
    InvalidArgument,
)
from bookstore.core.ports.inbound.catalog import (
    CatalogUseCase,
    CreateBookCommand,
    UpdateBookCommand,
)
from bookstore.core.ports.outbound.books import BookCriteria, BookRepository
from bookstore.core.ports.outbound.transactions import TransactionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogDeps:
    books: BookRepository
    transactions: TransactionManager
    currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True)
class CatalogService(CatalogUseCase):
    deps: CatalogDeps

    def create_book(self, command: CreateBookCommand) -> Result[Book, BookstoreError]:
        logger.info("creating book with isbn %s", command.isbn)
        result = self.deps.transactions.atomic(
            lambda: flow(
                command,
                _validate_create,
                bind(self._ensure_isbn_free),
                bind(self._to_book),
                bind(self.deps.books.save),
            )
        )
        if isinstance(result, Success):
            logger.info("book created with id %s", result.unwrap().id)
        return result

    def get_book_by_id(self, book_id: UUID) -> Result[Book, BookstoreError]:
        logger.debug("fetching book %s", book_id)
        return self.deps.books.get(book_id)

    def get_book_by_isbn(self, isbn: str) -> Result[Book, BookstoreError]:
        logger.debug("fetching book with isbn %s", isbn)
        return self.deps.books.get_by_isbn(isbn)

    def list_books(self) -> Result[Sequence[Book], BookstoreError]:
        return Success(tuple(self.deps.books.list_all()))

    def update_book(
        self, book_id: UUID, command: UpdateBookCommand
    ) -> Result[Book, BookstoreError]:
        logger.info("updating book %s", book_id)

        def apply(book: Book) -> Result[Book, BookstoreError]:
            changes = {
                name: getattr(command, name)
                for name in (
                    "title",
                    "author",
                    "publisher",
                    "publication_year",
                    "genre",
                    "description",
                )
                if getattr(command, name) is not None
            }
            if command.price is not None:
                changes["price"] = Money.of(command.price, book.price.currency)
            revised = book.revise(**changes)
            if command.quantity is None:
                return revised
            return revised.bind(lambda b: b.with_quantity(command.quantity))

        return self.deps.transactions.atomic(
            lambda: flow(
                self.deps.books.get(book_id),
                bind(apply),
                bind(self.deps.books.save),
            )
        )

    def delete_book(self, book_id: UUID) -> Result[None, BookstoreError]:
        logger.info("deleting book %s", book_id)
        return self.deps.transactions.atomic(lambda: self.deps.books.delete(book_id))

    def find_books_by_author(self, author: str) -> Result[Sequence[Book], BookstoreError]:
        return self._search(BookCriteria(author=author))

    def find_books_by_title(self, title: str) -> Result[Sequence[Book], BookstoreError]:
        return self._search(BookCriteria(title=title))

    def find_books_by_genre(self, genre: str) -> Result[Sequence[Book], BookstoreError]:
        return self._search(BookCriteria(genre=genre))

    def find_books_by_price_range(
        self, min_price: Decimal, max_price: Decimal
    ) -> Result[Sequence[Book], BookstoreError]:
        if min_price > max_price:
            return Failure(InvalidArgument("min_price must be <= max_price"))
        return self._search(BookCriteria(min_price=min_price, max_price=max_price))

    def list_available_books(self) -> Result[Sequence[Book], BookstoreError]:
        return self._search(BookCriteria(available_only=True))

    def search_books(self, term: str) -> Result[Sequence[Book], BookstoreError]:
        return self._search(BookCriteria(text=term))

    def update_stock(self, book_id: UUID, quantity: int) -> Result[Book, BookstoreError]:
        logger.info("updating stock for book %s to %d", book_id, quantity)
        return self.deps.transactions.atomic(
            lambda: flow(
                self.deps.books.get(book_id),
                bind(lambda b: b.with_quantity(quantity)),
                bind(self.deps.books.save),
            )
        )

    def _search(self, criteria: BookCriteria) -> Result[Sequence[Book], BookstoreError]:
        logger.debug("searching books: %s", criteria)
        return Success(tuple(self.deps.books.search(criteria)))

    def _ensure_isbn_free(
        self, cmd: CreateBookCommand
    ) -> Result[CreateBookCommand, BookstoreError]:
        isbn = cmd.isbn.strip()
        if self.deps.books.exists_by_isbn(isbn):
            return Failure(DuplicateIsbn(message="isbn already exists", isbn=isbn))
        return Success(cmd)

    def _to_book(self, cmd: CreateBookCommand) -> Result[Book, BookstoreError]:
        return Success(
            Book(
                metadata=EntityMetadata.new(),
                isbn=cmd.isbn.strip(),
                title=cmd.title.strip(),
                author=cmd.author.strip(),
                price=Money.of(cmd.price, self.deps.currency),
                quantity=cmd.quantity,
                publisher=cmd.publisher,
                publication_year=cmd.publication_year,
                genre=cmd.genre,
                description=cmd.description,
            )
        )


def _validate_create(cmd: CreateBookCommand) -> Result[CreateBookCommand, BookstoreError]:
    if not cmd.isbn.strip():
        return Failure(InvalidArgument("isbn is required"))
    if not cmd.title.strip():
        return Failure(InvalidArgument("title is required"))
    if not cmd.author.strip():
        return Failure(InvalidArgument("author is required"))
    if Decimal(cmd.price) < 0:
        return Failure(InvalidArgument("price cannot be negative"))
    if cmd.quantity < 0:
        return Failure(InvalidArgument("quantity cannot be negative"))
    return Success(cmd)
