from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from fastapi import FastAPI
from returns.result import Failure

from bookstore.adapters.inbound.web.fastapi_app import create_app
from bookstore.adapters.outbound.in_memory_books import InMemoryBookRepository
from bookstore.adapters.outbound.in_memory_purchases import InMemoryPurchaseRepository
from bookstore.adapters.outbound.in_memory_transactions import (
    InMemoryTransactionManager,
)
from bookstore.config import BookstoreSettings, get_settings
from bookstore.core.domain.model.discount import DEFAULT_DISCOUNT_CODES, DiscountTable
from bookstore.core.domain.service.catalog_service import CatalogDeps, CatalogService
from bookstore.core.domain.service.purchase_query_service import (
    PurchaseQueryDeps,
    PurchaseQueryService,
)
from bookstore.core.domain.service.purchase_service import (
    PurchaseDeps,
    PurchaseService,
)
from bookstore.core.ports.inbound.catalog import CreateBookCommand
from bookstore.logging_config import configure_logging

logger = logging.getLogger(__name__)

SAMPLE_BOOKS = (
    CreateBookCommand(
        isbn="9780132350884",
        title="Clean Code: A Handbook of Agile Software Craftsmanship",
        author="Robert C. Martin",
        price=Decimal("39.99"),
        genre="Programming",
        quantity=25,
    ),
    CreateBookCommand(
        isbn="9780201633610",
        title="Design Patterns: Elements of Reusable Object-Oriented Software",
        author="Gang of Four",
        price=Decimal("54.99"),
        genre="Programming",
        quantity=15,
    ),
    CreateBookCommand(
        isbn="9780321125217",
        title="Domain-Driven Design: Tackling Complexity in the Heart of Software",
        author="Eric Evans",
        price=Decimal("62.99"),
        genre="Software Architecture",
        quantity=10,
    ),
    CreateBookCommand(
        isbn="9780134685991",
        title="Effective Java",
        author="Joshua Bloch",
        price=Decimal("45.00"),
        genre="Programming",
        quantity=30,
    ),
    CreateBookCommand(
        isbn="9780135957059",
        title="The Pragmatic Programmer",
        author="David Thomas, Andrew Hunt",
        price=Decimal("49.99"),
        genre="Programming",
        quantity=20,
    ),
)


@dataclass(frozen=True)
class UseCases:
    catalog: CatalogService
    purchases: PurchaseService
    purchase_queries: PurchaseQueryService


def build_usecases(
    settings: BookstoreSettings | None = None,
    discounts: DiscountTable = DEFAULT_DISCOUNT_CODES,
) -> UseCases:
    settings = settings or get_settings()

    books = InMemoryBookRepository()
    purchases = InMemoryPurchaseRepository()
    transactions = InMemoryTransactionManager(books=books, purchases=purchases)

    catalog = CatalogService(
        CatalogDeps(books=books, transactions=transactions, currency=settings.currency)
    )
    purchase_service = PurchaseService(
        PurchaseDeps(
            books=books,
            purchases=purchases,
            transactions=transactions,
            discounts=discounts,
            currency=settings.currency,
        )
    )
    purchase_queries = PurchaseQueryService(
        PurchaseQueryDeps(purchases=purchases, currency=settings.currency)
    )

    if settings.seed_sample_data:
        seed_catalog(catalog)

    return UseCases(
        catalog=catalog, purchases=purchase_service, purchase_queries=purchase_queries
    )


def seed_catalog(catalog: CatalogService) -> None:
    for cmd in SAMPLE_BOOKS:
        result = catalog.create_book(cmd)
        if isinstance(result, Failure):
            logger.warning("skipping sample book %s: %s", cmd.isbn, result.failure())
    logger.info("sample catalogue loaded")


def build_app(settings: BookstoreSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level.upper())
    usecases = build_usecases(settings)
    return create_app(
        usecases.catalog,
        usecases.purchases,
        usecases.purchase_queries,
        title=settings.app_name,
    )
