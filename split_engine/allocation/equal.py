"""Equal split: everyone pays the same, give or take one minor unit."""

from split_engine.allocation.base import AllocationStrategy
from split_engine.models.money import Money
from split_engine.models.split import AllocationResult, SplitMode, SplitRequest


class EqualSplitStrategy(AllocationStrategy):
    """
    subtotal = total + tax + tip, divided evenly.

    The division remainder goes to participants in input order, one minor
    unit each: for $10.00 among three, the first pays $3.34 and the
    others $3.33.
    """

    mode = SplitMode.EQUAL

    def compute(self, request: SplitRequest) -> AllocationResult:
        self._check_mode(request)

        subtotal = request.money(request.subtotal)

        quotient, remainder = subtotal.divide_evenly(len(request.participants))

        shares: dict[str, Money] = {}
        for index, participant in enumerate(request.participants):
            extra = 1 if index < remainder.minor_units else 0
            shares[participant.id] = quotient.add(
                Money.from_minor_units(extra, request.currency)
            )

        return self._result(request, shares, subtotal)
