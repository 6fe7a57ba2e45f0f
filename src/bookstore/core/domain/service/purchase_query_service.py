from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence
from uuid import UUID

from returns.result import Result, Success

from bookstore.core.domain.model.common import DEFAULT_CURRENCY, fold_money
from bookstore.core.domain.model.errors import BookstoreError
from bookstore.core.domain.model.purchase import Purchase, PurchaseStatus
from bookstore.core.ports.inbound.purchases import (
    PurchaseQueryUseCase,
    PurchaseStatistics,
)
from bookstore.core.ports.outbound.purchases import PurchaseRepository

logger = logging.getLogger(__name__)

_NON_REVENUE = frozenset({PurchaseStatus.CANCELLED, PurchaseStatus.REFUNDED})


@dataclass(frozen=True)
class PurchaseQueryDeps:
    purchases: PurchaseRepository
    currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True)
class PurchaseQueryService(PurchaseQueryUseCase):
    deps: PurchaseQueryDeps

    def get_purchase_by_id(self, purchase_id: UUID) -> Result[Purchase, BookstoreError]:
        logger.debug("fetching purchase %s", purchase_id)
        return self.deps.purchases.get(purchase_id)

    def get_purchase_by_order_number(
        self, order_number: str
    ) -> Result[Purchase, BookstoreError]:
        logger.debug("fetching purchase with order number %s", order_number)
        return self.deps.purchases.get_by_order_number(order_number)

    def get_purchases_by_customer_email(
        self, email: str
    ) -> Result[Sequence[Purchase], BookstoreError]:
        logger.debug("fetching purchases for customer %s", email)
        return Success(tuple(self.deps.purchases.find_by_customer_email(email)))

    def get_purchases_by_status(
        self, status: PurchaseStatus
    ) -> Result[Sequence[Purchase], BookstoreError]:
        return Success(tuple(self.deps.purchases.find_by_status(status)))

    def list_purchases(self) -> Result[Sequence[Purchase], BookstoreError]:
        return Success(tuple(self.deps.purchases.find_all()))

    def get_purchase_statistics(self) -> Result[PurchaseStatistics, BookstoreError]:
        logger.debug("calculating purchase statistics")
        repo = self.deps.purchases
        revenue = fold_money(
            (p.total_amount for p in repo.find_all() if p.status not in _NON_REVENUE),
            currency=self.deps.currency,
        )
        return Success(
            PurchaseStatistics(
                total_purchases=repo.count(),
                pending_purchases=repo.count_by_status(PurchaseStatus.PENDING),
                confirmed_purchases=repo.count_by_status(PurchaseStatus.CONFIRMED),
                cancelled_purchases=repo.count_by_status(PurchaseStatus.CANCELLED),
                total_revenue=revenue,
            )
        )
