from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Iterator, Mapping, Union

from returns.result import Failure, Result, Success

from bookstore.core.domain.model.common import Money, quantize
from bookstore.core.domain.model.errors import InvalidArgument, InvalidDiscountCode

_HUNDRED = Decimal(100)


def normalize_code(code: str) -> str:
    return code.strip().upper()


@dataclass(frozen=True)
class PercentageDiscount:
    value: Decimal

    def __post_init__(self) -> None:
        if not (0 <= Decimal(self.value) <= _HUNDRED):
            raise InvalidArgument(
                f"discount percentage must be between 0 and 100, got {self.value}"
            )

    def amount_for(self, subtotal: Money) -> Money:
        raw = subtotal.amount * Decimal(self.value) / _HUNDRED
        return Money(quantize(raw), subtotal.currency)

    def describe(self) -> str:
        return f"{self.value}%"


@dataclass(frozen=True)
class FixedDiscount:
    amount: Decimal

    def __post_init__(self) -> None:
        if Decimal(self.amount) < 0:
            raise InvalidArgument(
                f"discount amount cannot be negative, got {self.amount}"
            )

    def amount_for(self, subtotal: Money) -> Money:
        # never discount more than the subtotal
        return Money.of(self.amount, subtotal.currency).min(subtotal)

    def describe(self) -> str:
        return f"{self.amount} off"


DiscountRule = Union[PercentageDiscount, FixedDiscount]


@dataclass(frozen=True)
class DiscountTable:
    """Read-only lookup of normalized discount codes to rules."""

    rules: Mapping[str, DiscountRule] = field(default_factory=dict)

    @staticmethod
    def of(rules: Mapping[str, DiscountRule]) -> "DiscountTable":
        normalized = {normalize_code(code): rule for code, rule in rules.items()}
        return DiscountTable(MappingProxyType(normalized))

    def lookup(self, code: str) -> Result[DiscountRule, InvalidDiscountCode]:
        rule = self.rules.get(normalize_code(code))
        if rule is None:
            return Failure(
                InvalidDiscountCode(
                    message="invalid or expired discount code", discount_code=code
                )
            )
        return Success(rule)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self.rules

    def __iter__(self) -> Iterator[str]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)


DEFAULT_DISCOUNT_CODES = DiscountTable.of(
    {
        "SAVE10": PercentageDiscount(Decimal("10")),
        "SAVE20": PercentageDiscount(Decimal("20")),
        "WELCOME": PercentageDiscount(Decimal("15")),
        "BOOKWORM": PercentageDiscount(Decimal("25")),
        "FLAT5": FixedDiscount(Decimal("5.00")),
        "FLAT10": FixedDiscount(Decimal("10.00")),
    }
)
