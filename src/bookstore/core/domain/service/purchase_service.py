from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Mapping, Tuple
from uuid import UUID

from returns.pipeline import flow
from returns.pointfree import bind
from returns.result import Failure, Result, Success

from bookstore.core.domain.model.book import Book
from bookstore.core.domain.model.common import DEFAULT_CURRENCY
from bookstore.core.domain.model.discount import (
    DEFAULT_DISCOUNT_CODES,
    DiscountRule,
    DiscountTable,
)
from bookstore.core.domain.model.errors import (
    BookNotFound,
    BookstoreError,
    InsufficientStock,
    InvalidArgument,
    InvalidPurchaseState,
)
from bookstore.core.domain.model.purchase import (
    Purchase,
    PurchaseItem,
    PurchaseStatus,
    can_transition,
)
from bookstore.core.ports.inbound.purchases import (
    CreatePurchaseCommand,
    PurchaseUseCase,
)
from bookstore.core.ports.outbound.books import BookRepository
from bookstore.core.ports.outbound.purchases import PurchaseRepository
from bookstore.core.ports.outbound.transactions import TransactionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurchaseDeps:
    books: BookRepository
    purchases: PurchaseRepository
    transactions: TransactionManager
    discounts: DiscountTable = field(default=DEFAULT_DISCOUNT_CODES)
    currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True)
class CreatePurchaseContext:
    command: CreatePurchaseCommand
    books: Mapping[UUID, Book] = field(default_factory=dict)
    discount: DiscountRule | None = None
    items: Tuple[PurchaseItem, ...] = ()
    purchase: Purchase | None = None


@dataclass(frozen=True)
class PurchaseService(PurchaseUseCase):
    """
    Purchase workflow: stock reservation, discounts and status changes.

    Every mutating operation runs inside ``TransactionManager.atomic`` so a
    Failure at any step leaves books and purchases exactly as they were.
    """

    deps: PurchaseDeps

    def create_purchase(
        self, command: CreatePurchaseCommand
    ) -> Result[Purchase, BookstoreError]:
        logger.info("creating purchase for customer %s", command.customer_email)

        result = self.deps.transactions.atomic(
            lambda: flow(
                command,
                _validate_command,
                bind(self._load_books),
                bind(_check_stock),
                bind(self._resolve_discount),
                bind(self._reserve_inventory),
                bind(self._build_purchase),
                bind(self._persist),
            )
        )
        if isinstance(result, Success):
            purchase = result.unwrap()
            logger.info(
                "purchase created: %s (total %s)",
                purchase.order_number,
                purchase.total_amount.amount,
            )
        return result

    def confirm_purchase(self, purchase_id: UUID) -> Result[Purchase, BookstoreError]:
        logger.info("confirming purchase %s", purchase_id)
        return self.deps.transactions.atomic(
            lambda: flow(
                self.deps.purchases.get(purchase_id),
                bind(lambda p: p.confirm()),
                bind(self.deps.purchases.save),
            )
        )

    def cancel_purchase(self, purchase_id: UUID) -> Result[Purchase, BookstoreError]:
        logger.info("cancelling purchase %s", purchase_id)
        return self.deps.transactions.atomic(
            lambda: flow(
                self.deps.purchases.get(purchase_id),
                bind(_ensure_cancellable),
                bind(self._restore_inventory),
                bind(lambda p: p.cancel()),
                bind(self.deps.purchases.save),
            )
        )

    def update_purchase_status(
        self, purchase_id: UUID, status: PurchaseStatus
    ) -> Result[Purchase, BookstoreError]:
        logger.info("updating purchase %s to status %s", purchase_id, status.value)
        if status is PurchaseStatus.CANCELLED:
            # cancelling through the status endpoint must give stock back too
            return self.cancel_purchase(purchase_id)
        return self.deps.transactions.atomic(
            lambda: flow(
                self.deps.purchases.get(purchase_id),
                bind(lambda p: p.transition_to(status)),
                bind(self.deps.purchases.save),
            )
        )

    def apply_discount_code(
        self, purchase_id: UUID, code: str
    ) -> Result[Purchase, BookstoreError]:
        logger.info("applying discount code '%s' to purchase %s", code, purchase_id)

        def discount(purchase: Purchase) -> Result[Purchase, BookstoreError]:
            return self.deps.discounts.lookup(code).map(
                lambda rule: purchase.apply_discount(rule, code)
            )

        return self.deps.transactions.atomic(
            lambda: flow(
                self.deps.purchases.get(purchase_id),
                bind(_ensure_modifiable),
                bind(discount),
                bind(self.deps.purchases.save),
            )
        )

    # ---- create_purchase steps ---------------------------------------------

    def _load_books(
        self, command: CreatePurchaseCommand
    ) -> Result[CreatePurchaseContext, BookstoreError]:
        books: dict[UUID, Book] = {}
        for ln in command.lines:
            if ln.book_id in books:
                continue
            got = self.deps.books.get(ln.book_id)
            if isinstance(got, Failure):
                return got
            books[ln.book_id] = got.unwrap()
        return Success(CreatePurchaseContext(command=command, books=books))

    def _resolve_discount(
        self, ctx: CreatePurchaseContext
    ) -> Result[CreatePurchaseContext, BookstoreError]:
        # looked up before any stock moves so a bad code costs nothing
        code = ctx.command.discount_code
        if code is None or not code.strip():
            return Success(ctx)
        return self.deps.discounts.lookup(code).map(
            lambda rule: replace(ctx, discount=rule)
        )

    def _reserve_inventory(
        self, ctx: CreatePurchaseContext
    ) -> Result[CreatePurchaseContext, BookstoreError]:
        books = dict(ctx.books)
        items = []
        for ln in ctx.command.lines:
            snapshot = ctx.books[ln.book_id]
            reduced = books[ln.book_id].reduce_quantity(ln.quantity).bind(
                self.deps.books.save
            )
            if isinstance(reduced, Failure):
                return reduced
            books[ln.book_id] = reduced.unwrap()
            items.append(PurchaseItem.from_book(snapshot, ln.quantity))
            logger.debug(
                "reserved %d x '%s' (stock remaining: %d)",
                ln.quantity,
                snapshot.title,
                books[ln.book_id].quantity,
            )
        return Success(replace(ctx, books=books, items=tuple(items)))

    def _build_purchase(
        self, ctx: CreatePurchaseContext
    ) -> Result[CreatePurchaseContext, BookstoreError]:
        cmd = ctx.command
        purchase = Purchase.open(
            customer_name=cmd.customer_name.strip(),
            customer_email=cmd.customer_email.strip(),
            shipping_address=cmd.shipping_address.strip(),
            currency=self.deps.currency,
        )
        for item in ctx.items:
            purchase = purchase.add_item(item)
        if ctx.discount is not None and cmd.discount_code is not None:
            purchase = purchase.apply_discount(ctx.discount, cmd.discount_code)
        return Success(replace(ctx, purchase=purchase))

    def _persist(
        self, ctx: CreatePurchaseContext
    ) -> Result[Purchase, BookstoreError]:
        assert ctx.purchase is not None
        return self.deps.purchases.save(ctx.purchase)

    # ---- cancel_purchase steps ---------------------------------------------

    def _restore_inventory(self, purchase: Purchase) -> Result[Purchase, BookstoreError]:
        for item in purchase.items:
            got = self.deps.books.get(item.book_id)
            if isinstance(got, Failure):
                if isinstance(got.failure(), BookNotFound):
                    # deleted from the catalogue; the item snapshot still stands
                    logger.debug("book %s is gone, not restocking", item.book_id)
                    continue
                return got
            restored = got.unwrap().add_quantity(item.quantity).bind(
                self.deps.books.save
            )
            if isinstance(restored, Failure):
                return restored
            logger.debug(
                "restored %d copies of '%s' to inventory", item.quantity, item.book_title
            )
        return Success(purchase)


# ---- pure helpers ----------------------------------------------------------


def _validate_command(
    cmd: CreatePurchaseCommand,
) -> Result[CreatePurchaseCommand, BookstoreError]:
    if not cmd.customer_name.strip():
        return Failure(InvalidArgument("customer_name is required"))
    if not cmd.customer_email.strip():
        return Failure(InvalidArgument("customer_email is required"))
    if not cmd.shipping_address.strip():
        return Failure(InvalidArgument("shipping_address is required"))
    if not cmd.lines:
        return Failure(InvalidArgument("at least one item is required"))

    for i, ln in enumerate(cmd.lines):
        if ln.quantity < 1:
            return Failure(InvalidArgument(f"items[{i}].quantity must be >= 1"))

    return Success(cmd)


def _check_stock(
    ctx: CreatePurchaseContext,
) -> Result[CreatePurchaseContext, BookstoreError]:
    # duplicate lines for one book are summed before checking
    requested: Counter[UUID] = Counter()
    for ln in ctx.command.lines:
        requested[ln.book_id] += ln.quantity

    for book_id, quantity in requested.items():
        book = ctx.books[book_id]
        if not book.has_stock(quantity):
            return Failure(
                InsufficientStock(
                    message="insufficient stock",
                    isbn=book.isbn,
                    requested=quantity,
                    available=book.quantity,
                )
            )
    return Success(ctx)


def _ensure_cancellable(purchase: Purchase) -> Result[Purchase, BookstoreError]:
    if not can_transition(purchase.status, PurchaseStatus.CANCELLED):
        return Failure(
            InvalidPurchaseState(
                message=f"cannot cancel purchase in status {purchase.status.value}",
                current=purchase.status.value,
                requested=PurchaseStatus.CANCELLED.value,
            )
        )
    return Success(purchase)


def _ensure_modifiable(purchase: Purchase) -> Result[Purchase, BookstoreError]:
    if not purchase.is_modifiable():
        return Failure(
            InvalidPurchaseState(
                message="cannot apply discount to a non-pending purchase",
                current=purchase.status.value,
            )
        )
    return Success(purchase)
