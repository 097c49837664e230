"""
Reconciliation Evaluator

Compares a declared (expected) total with a computed total.

DESIGN DECISION: A mismatch is a RESULT, not an error.
It is meant for display ("you are $5.00 short"), so the evaluator returns
a verdict and never raises for disagreeing totals.

The evaluator is stateless and O(1) so it can run on every edit.
The default tolerance only absorbs rounding noise; it is not a way to
hide real disagreement.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from split_engine.config import get_settings
from split_engine.models.money import CurrencyMismatchError, Money, to_decimal
from split_engine.models.split import (
    AllocationBalance,
    ReconciliationStatus,
    ReconciliationVerdict,
)


Amount = Union[Money, Decimal, int, str]


class ReconciliationEvaluator:
    """Classifies declared vs computed totals as Matched or Mismatched."""

    def __init__(self, default_tolerance: Optional[Decimal] = None):
        """
        Args:
            default_tolerance: Tolerance in currency units used when a call
                               passes none. Defaults to RECONCILIATION_TOLERANCE.
        """
        if default_tolerance is None:
            default_tolerance = get_settings().reconciliation.tolerance
        self._default_tolerance = to_decimal(default_tolerance)

    @staticmethod
    def _resolve_currency(
        declared_total: Amount,
        computed_total: Amount,
        currency: Optional[str],
    ) -> str:
        codes = {
            amount.currency
            for amount in (declared_total, computed_total)
            if isinstance(amount, Money)
        }
        if currency is not None:
            codes.add(currency.upper())
        if len(codes) > 1:
            left, right = sorted(codes)[:2]
            raise CurrencyMismatchError(left, right)
        if codes:
            return codes.pop()
        return get_settings().allocation.default_currency

    @staticmethod
    def _as_decimal(amount: Amount) -> Decimal:
        if isinstance(amount, Money):
            return amount.to_decimal()
        return to_decimal(amount)

    def evaluate(
        self,
        declared_total: Amount,
        computed_total: Amount,
        tolerance: Optional[Amount] = None,
        currency: Optional[str] = None,
    ) -> ReconciliationVerdict:
        """
        Matched iff |declared_total - computed_total| <= tolerance.

        Args:
            declared_total: What the user or the receipt says the total is
            computed_total: What the inputs add up to. Decimal values finer
                            than the minor unit are compared exactly.
            tolerance: In currency units (default 0.01)
            currency: Needed only when no operand is Money

        Raises:
            CurrencyMismatchError: If operands carry different currencies
        """
        code = self._resolve_currency(declared_total, computed_total, currency)
        if tolerance is None:
            tolerance_value = self._default_tolerance
        else:
            if isinstance(tolerance, Money) and tolerance.currency != code:
                raise CurrencyMismatchError(code, tolerance.currency)
            tolerance_value = self._as_decimal(tolerance)

        declared = self._as_decimal(declared_total)
        computed = self._as_decimal(computed_total)
        gap = computed - declared

        if abs(gap) <= tolerance_value:
            return ReconciliationVerdict(
                status=ReconciliationStatus.MATCHED,
                currency=code,
                declared_total=declared,
                computed_total=computed,
                tolerance=tolerance_value,
            )

        return ReconciliationVerdict(
            status=ReconciliationStatus.MISMATCHED,
            currency=code,
            declared_total=declared,
            computed_total=computed,
            tolerance=tolerance_value,
            difference=Money.from_decimal(abs(gap), code, rounding=ROUND_HALF_UP),
            balance=(
                AllocationBalance.OVER_ALLOCATED
                if gap > 0
                else AllocationBalance.UNDER_ALLOCATED
            ),
        )
