"""
Percentage split: everyone pays their percentage of the subtotal.

DESIGN DECISION: Percentages that do not sum to 100 (within tolerance)
are rejected, NOT normalized. Silently rescaling would change what people
agreed to pay; the caller has to fix the percentages first.
"""

from decimal import Decimal
from fractions import Fraction
from typing import Optional

from split_engine.allocation.apportion import distribute
from split_engine.allocation.base import AllocationStrategy, InvalidAllocationInputError
from split_engine.config import get_settings
from split_engine.models.money import Money
from split_engine.models.split import AllocationResult, SplitMode, SplitRequest


HUNDRED = Decimal("100")


class PercentageSplitStrategy(AllocationStrategy):
    """
    amount = subtotal * percentage / 100, by largest-remainder apportionment.

    Everyone first gets the floor of their exact amount; the leftover
    minor units go to the largest fractional remainders (earlier
    participants win ties). The subtotal is always allocated in full.
    """

    mode = SplitMode.PERCENTAGE

    def __init__(self, tolerance: Optional[Decimal] = None):
        """
        Args:
            tolerance: Allowed |sum(percentages) - 100| in percentage points.
                       Defaults to ALLOCATION_PERCENTAGE_TOLERANCE (0.01).
        """
        if tolerance is None:
            tolerance = get_settings().allocation.percentage_tolerance
        self._tolerance = Decimal(tolerance)

    def _validate_percentages(self, request: SplitRequest) -> None:
        total_percentage = sum((p.percentage for p in request.participants), Decimal("0"))
        if abs(total_percentage - HUNDRED) > self._tolerance:
            raise InvalidAllocationInputError(
                f"Percentages must add up to 100 (currently {total_percentage})",
                {
                    "total_percentage": str(total_percentage),
                    "tolerance": str(self._tolerance),
                },
            )

    def compute(self, request: SplitRequest) -> AllocationResult:
        self._check_mode(request)
        self._validate_percentages(request)

        subtotal = request.money(request.subtotal)

        exact = [
            Fraction(subtotal.minor_units) * Fraction(p.percentage) / 100
            for p in request.participants
        ]
        amounts = distribute(subtotal.minor_units, exact)

        shares = {
            p.id: Money.from_minor_units(units, request.currency)
            for p, units in zip(request.participants, amounts)
        }
        return self._result(request, shares, subtotal)
