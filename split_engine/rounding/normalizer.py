"""
Rounding Normalizer

A second, orthogonal pass over already-allocated amounts. It does not
care which strategy produced them.

Money is already at currency precision, so up/down/nearest only change
anything when a coarser rounding unit is requested (e.g. whole dollars).

IMPORTANT: The normalizer NEVER hides what rounding did.
rounding_difference = sum(normalized amounts) - original subtotal is always
reported so the caller can display it.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from split_engine.models.money import Money, currency_exponent, to_decimal
from split_engine.models.split import AllocationResult, RoundingPolicy


class NormalizationResult(BaseModel):
    """Per-participant amounts after rounding, plus what rounding changed."""
    model_config = ConfigDict(frozen=True)

    policy: RoundingPolicy
    increment: Money = Field(
        ...,
        description="Rounding step actually applied"
    )
    amounts: dict[str, Money]
    original_subtotal: Money
    normalized_total: Money
    rounding_difference: Money = Field(
        ...,
        description="normalized_total - original_subtotal"
    )


def round_units(units: int, policy: RoundingPolicy, increment: int) -> int:
    """Round an integer number of minor units to a multiple of `increment`."""
    if increment < 1:
        raise ValueError("Rounding increment must be at least one minor unit")
    if policy == RoundingPolicy.NONE or increment == 1:
        return units

    quotient, remainder = divmod(units, increment)
    if policy == RoundingPolicy.DOWN:
        return quotient * increment
    if policy == RoundingPolicy.UP:
        return (quotient + (1 if remainder else 0)) * increment
    # NEAREST, halves round up
    return (quotient + (1 if 2 * remainder >= increment else 0)) * increment


class RoundingNormalizer:
    """Applies a RoundingPolicy to an AllocationResult."""

    def increment_for(self, currency: str, unit: Optional[Decimal]) -> Money:
        """
        Rounding step as Money.

        None means the currency's minor unit. The unit must be a whole,
        positive number of minor units: 0.005 or 0.015 USD is rejected
        rather than silently rounded to a different step.
        """
        if unit is None:
            return Money.from_minor_units(1, currency)
        units = to_decimal(unit).scaleb(currency_exponent(currency))
        if units < 1 or units != units.to_integral_value():
            raise ValueError(
                f"Rounding unit {unit} is not a whole number of {currency} minor units"
            )
        return Money.from_minor_units(int(units), currency)

    def normalize(
        self,
        allocation: AllocationResult,
        policy: RoundingPolicy = RoundingPolicy.NONE,
        unit: Optional[Decimal] = None,
    ) -> NormalizationResult:
        """
        Round every participant amount.

        Args:
            allocation: Strategy output
            policy: none / up / down / nearest
            unit: Rounding step in currency units (None = minor unit)
        """
        policy = RoundingPolicy(policy)
        currency = allocation.currency
        increment = self.increment_for(currency, unit)

        amounts = {
            pid: Money.from_minor_units(
                round_units(amount.minor_units, policy, increment.minor_units),
                currency,
            )
            for pid, amount in allocation.per_participant.items()
        }
        normalized_total = Money.total(amounts.values(), currency)

        return NormalizationResult(
            policy=policy,
            increment=increment,
            amounts=amounts,
            original_subtotal=allocation.computed_total,
            normalized_total=normalized_total,
            rounding_difference=normalized_total.subtract(allocation.computed_total),
        )
