"""
Money Primitive

Every amount in the engine is an integer number of minor units (cents)
plus an ISO-style currency code.

DESIGN DECISION: We NEVER do money math on binary floats.
Strategies may use exact fractions internally, but every amount that
leaves a component is a Money, i.e. already quantized to the minor unit.

CRITICAL: Money never mixes currencies. There is no conversion here;
mixing codes raises CurrencyMismatchError.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


# Decimal places per currency. Codes not listed use DEFAULT_EXPONENT.
CURRENCY_EXPONENTS: dict[str, int] = {
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "JPY": 0,
    "XLM": 7,  # Stellar lumens: 1 stroop = 0.0000001 XLM
}
DEFAULT_EXPONENT = 2

Scalar = Union[int, Decimal]


class MoneyError(Exception):
    """Base exception for money arithmetic errors."""
    pass


class CurrencyMismatchError(MoneyError):
    """Operands carry different currency codes."""

    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(f"Currency mismatch: {left} vs {right}")


def currency_exponent(currency: str) -> int:
    """Number of decimal places of the currency's minor unit."""
    return CURRENCY_EXPONENTS.get(currency.upper(), DEFAULT_EXPONENT)


def to_decimal(value) -> Decimal:
    """Convert user input (Decimal, int, str, float) to Decimal without float noise."""
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError) as e:
            raise MoneyError(f"Not a valid amount: {value!r}") from e
    if not result.is_finite():
        raise MoneyError(f"Not a finite amount: {value!r}")
    return result


class Money(BaseModel):
    """
    An exact amount of one currency.

    Arithmetic returns new instances; Money is frozen and hashable.
    """
    model_config = ConfigDict(frozen=True)

    minor_units: StrictInt = Field(
        ...,
        description="Amount in the currency's smallest unit (e.g. cents)"
    )
    currency: str = Field(
        ...,
        pattern="^[A-Z]{3}$",
        description="Three-letter currency code"
    )

    @field_validator('currency', mode='before')
    @classmethod
    def normalize_currency(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_minor_units(cls, minor_units: int, currency: str) -> "Money":
        return cls(minor_units=minor_units, currency=currency)

    @classmethod
    def from_decimal(
        cls,
        value,
        currency: str,
        rounding: str = ROUND_HALF_UP,
    ) -> "Money":
        """
        Build Money from an amount in currency units.

        Values finer than the minor unit are quantized with `rounding`
        (half-up by default): Money.from_decimal("10.005", "USD") is 10.01.

        Raises MoneyError when the amount has more digits than the decimal
        context can hold.
        """
        amount = to_decimal(value)
        exponent = currency_exponent(currency)
        try:
            units = amount.scaleb(exponent).quantize(Decimal("1"), rounding=rounding)
        except InvalidOperation as e:
            raise MoneyError(f"Amount out of range: {value!r}") from e
        return cls(minor_units=int(units), currency=currency)

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(minor_units=0, currency=currency)

    @classmethod
    def total(cls, values: Iterable["Money"], currency: str) -> "Money":
        """Sum an iterable of Money; an empty iterable sums to zero."""
        result = cls.zero(currency)
        for value in values:
            result = result.add(value)
        return result

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def exponent(self) -> int:
        return currency_exponent(self.currency)

    @property
    def is_zero(self) -> bool:
        return self.minor_units == 0

    def to_decimal(self) -> Decimal:
        """Amount in currency units, with exactly `exponent` decimal places."""
        return Decimal(self.minor_units).scaleb(-self.exponent)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _check_currency(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Expected Money, got {type(other).__name__}")
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def add(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(minor_units=self.minor_units + other.minor_units, currency=self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(minor_units=self.minor_units - other.minor_units, currency=self.currency)

    def multiply(self, scalar: Scalar, rounding: str = ROUND_HALF_UP) -> "Money":
        """
        Multiply by an integer or Decimal scalar.

        The result is always a whole number of minor units; Decimal
        products are rounded with `rounding`.
        """
        if isinstance(scalar, bool) or not isinstance(scalar, (int, Decimal)):
            raise TypeError(f"Money can only be multiplied by int or Decimal, not {type(scalar).__name__}")
        if isinstance(scalar, int):
            units = self.minor_units * scalar
        else:
            units = int((Decimal(self.minor_units) * scalar).quantize(Decimal("1"), rounding=rounding))
        return Money(minor_units=units, currency=self.currency)

    def divide_evenly(self, n: int) -> tuple["Money", "Money"]:
        """
        Split into `n` equal integer shares.

        Returns (quotient, remainder) with quotient * n + remainder == self
        and 0 <= remainder < n minor units. The remainder is returned, never
        dropped; callers decide who absorbs it.

        Division guard: n == 0 yields a zero quotient and the whole amount
        as remainder (nobody receives anything, nothing is lost).
        """
        if isinstance(n, bool) or not isinstance(n, int):
            raise TypeError("n must be an int")
        if n < 0:
            raise MoneyError(f"Cannot divide into a negative number of shares: {n}")
        if n == 0:
            return Money.zero(self.currency), self
        quotient, remainder = divmod(self.minor_units, n)
        return (
            Money(minor_units=quotient, currency=self.currency),
            Money(minor_units=remainder, currency=self.currency),
        )

    def compare(self, other: "Money") -> int:
        """Return -1, 0 or 1."""
        self._check_currency(other)
        if self.minor_units < other.minor_units:
            return -1
        if self.minor_units > other.minor_units:
            return 1
        return 0

    # Operator sugar
    def __add__(self, other: "Money") -> "Money":
        return self.add(other)

    def __radd__(self, other) -> "Money":
        # Lets the builtin sum() start from 0
        if isinstance(other, int) and not isinstance(other, bool) and other == 0:
            return self
        return self.add(other)

    def __sub__(self, other: "Money") -> "Money":
        return self.subtract(other)

    def __mul__(self, scalar: Scalar) -> "Money":
        return self.multiply(scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "Money":
        return Money(minor_units=-self.minor_units, currency=self.currency)

    def __abs__(self) -> "Money":
        return Money(minor_units=abs(self.minor_units), currency=self.currency)

    def __lt__(self, other: "Money") -> bool:
        return self.compare(other) < 0

    def __le__(self, other: "Money") -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: "Money") -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: "Money") -> bool:
        return self.compare(other) >= 0

    def __str__(self) -> str:
        return f"{self.to_decimal()} {self.currency}"
