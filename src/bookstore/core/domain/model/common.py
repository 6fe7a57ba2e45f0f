from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable
from uuid import UUID, uuid4

DEFAULT_CURRENCY = "EUR"

_CENT = Decimal("0.01")


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class EntityMetadata:
    id: UUID
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def new(entity_id: UUID | None = None) -> "EntityMetadata":
        now = now_utc()
        return EntityMetadata(entity_id or uuid4(), now, now)

    def touched(self) -> "EntityMetadata":
        return replace(self, updated_at=now_utc())


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    @staticmethod
    def of(amount: Decimal | int | str, currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money(quantize(Decimal(str(amount))), currency)

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money.of(0, currency)

    def __add__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, n: int) -> "Money":
        return Money(quantize(self.amount * Decimal(n)), self.currency)

    def min(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return self if self.amount <= other.amount else other

    def clamp_to_zero(self) -> "Money":
        if self.amount < 0:
            return Money.zero(self.currency)
        return self

    def is_negative(self) -> bool:
        return self.amount < 0

    def _assert_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"currency_mismatch: {self.currency} vs {other.currency}")


def fold_money(values: Iterable[Money], currency: str = DEFAULT_CURRENCY) -> Money:
    total = Money.zero(currency)
    for v in values:
        total = total + v
    return total
