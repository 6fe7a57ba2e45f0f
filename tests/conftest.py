from __future__ import annotations

from typing import Callable

import pytest

from bookstore.adapters.outbound.in_memory_books import InMemoryBookRepository
from bookstore.adapters.outbound.in_memory_purchases import InMemoryPurchaseRepository
from bookstore.adapters.outbound.in_memory_transactions import (
    InMemoryTransactionManager,
)
from bookstore.core.domain.model.book import Book
from bookstore.core.domain.model.common import EntityMetadata, Money
from bookstore.core.domain.service.catalog_service import CatalogDeps, CatalogService
from bookstore.core.domain.service.purchase_query_service import (
    PurchaseQueryDeps,
    PurchaseQueryService,
)
from bookstore.core.domain.service.purchase_service import (
    PurchaseDeps,
    PurchaseService,
)
from bookstore.core.ports.inbound.purchases import CreatePurchaseCommand, PurchaseLine


def new_book(
    isbn: str = "111",
    price: str = "10.00",
    quantity: int = 5,
    title: str = "Book A",
    author: str = "Author A",
    genre: str | None = None,
) -> Book:
    return Book(
        metadata=EntityMetadata.new(),
        isbn=isbn,
        title=title,
        author=author,
        price=Money.of(price),
        quantity=quantity,
        genre=genre,
    )


def purchase_command(
    *lines: tuple[Book, int], discount_code: str | None = None
) -> CreatePurchaseCommand:
    return CreatePurchaseCommand(
        customer_name="Jana Novak",
        customer_email="jana@example.com",
        shipping_address="Ilkovicova 2, Bratislava",
        lines=tuple(PurchaseLine(book_id=b.id, quantity=q) for b, q in lines),
        discount_code=discount_code,
    )


@pytest.fixture
def books() -> InMemoryBookRepository:
    return InMemoryBookRepository()


@pytest.fixture
def purchases() -> InMemoryPurchaseRepository:
    return InMemoryPurchaseRepository()


@pytest.fixture
def transactions(books, purchases) -> InMemoryTransactionManager:
    return InMemoryTransactionManager(books=books, purchases=purchases)


@pytest.fixture
def purchase_service(books, purchases, transactions) -> PurchaseService:
    return PurchaseService(
        PurchaseDeps(books=books, purchases=purchases, transactions=transactions)
    )


@pytest.fixture
def query_service(purchases) -> PurchaseQueryService:
    return PurchaseQueryService(PurchaseQueryDeps(purchases=purchases))


@pytest.fixture
def catalog_service(books, transactions) -> CatalogService:
    return CatalogService(CatalogDeps(books=books, transactions=transactions))


@pytest.fixture
def stock(books) -> Callable[..., Book]:
    """Put a book into the catalogue and return it."""

    def _add(**kwargs) -> Book:
        book = new_book(**kwargs)
        books.save(book).unwrap()
        return book

    return _add


def quantity_of(books: InMemoryBookRepository, book: Book) -> int:
    return books.get(book.id).unwrap().quantity
