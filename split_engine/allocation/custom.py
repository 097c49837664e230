"""Custom split: participants carry their amounts directly."""

from split_engine.allocation.base import AllocationStrategy
from split_engine.models.split import AllocationResult, SplitMode, SplitRequest


class CustomSplitStrategy(AllocationStrategy):
    """
    No computation beyond summing.

    Whether the amounts reach the expected total is for the
    reconciliation evaluator to judge, not for this strategy to fix.
    """

    mode = SplitMode.CUSTOM

    def compute(self, request: SplitRequest) -> AllocationResult:
        self._check_mode(request)

        shares = {p.id: request.money(p.amount) for p in request.participants}
        computed_total = sum(shares.values(), request.money(0))

        return self._result(request, shares, computed_total)
