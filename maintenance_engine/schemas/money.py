"""Money value type used by cost and rate fields."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from maintenance_engine.core.config import settings

CENT = Decimal("0.01")


def _default_currency() -> str:
    return settings.DEFAULT_CURRENCY


class CurrencyMismatchError(ValueError):
    """Raised when combining Money values in different currencies."""


class Money(BaseModel):
    """Arbitrary-precision amount in a single ISO 4217 currency."""

    model_config = ConfigDict(frozen=True)

    amount: Decimal
    currency: str = Field(default_factory=_default_currency, min_length=3, max_length=3)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def zero(cls, currency: str | None = None) -> Money:
        return cls(amount=Decimal("0"), currency=currency or _default_currency())

    def _check_currency(self, other: Money) -> None:
        if other.currency != self.currency:
            raise CurrencyMismatchError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def multiply(self, factor: Decimal | int | float | str) -> Money:
        """Scale by a factor; floats go through ``str`` to avoid binary noise."""
        if isinstance(factor, float):
            factor = str(factor)
        return Money(amount=self.amount * Decimal(factor), currency=self.currency)

    def rounded(self) -> Money:
        return Money(amount=self.amount.quantize(CENT, rounding=ROUND_HALF_UP), currency=self.currency)

    def max(self, other: Money) -> Money:
        self._check_currency(other)
        return self if self.amount >= other.amount else other

    def __str__(self) -> str:
        return f"{self.currency} {self.amount.quantize(CENT, rounding=ROUND_HALF_UP)}"
