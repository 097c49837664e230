"""
Allocation Strategy Interface

DESIGN DECISION: Every split mode is one strategy behind a single
capability, compute(request) -> AllocationResult.
Callers pick the strategy by request.mode and never branch on the mode
themselves.

Strategies are pure:
- no side effects, no shared state
- identical input gives identical output (no time- or random-based tie-breaks)
"""

from abc import ABC, abstractmethod
from typing import Mapping

from split_engine.models.money import Money
from split_engine.models.split import AllocationResult, SplitMode, SplitRequest


class AllocationError(Exception):
    """Base exception for allocation errors."""
    pass


class InvalidAllocationInputError(AllocationError):
    """
    The request cannot be allocated as given (e.g. percentages not summing to 100).

    The caller must correct the input; retrying unchanged input always fails again.
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AllocationStrategy(ABC):
    """Base class for split strategies."""

    mode: SplitMode

    @abstractmethod
    def compute(self, request: SplitRequest) -> AllocationResult:
        """
        Compute per-participant shares.

        Args:
            request: Immutable split input

        Returns:
            AllocationResult satisfying sum(shares) + remainder == computed_total

        Raises:
            InvalidAllocationInputError: If the input cannot be allocated
        """
        pass

    def _check_mode(self, request: SplitRequest) -> None:
        if request.mode != self.mode:
            raise InvalidAllocationInputError(
                f"{type(self).__name__} cannot compute a {request.mode.value} split",
                {"expected": self.mode.value, "actual": request.mode.value},
            )

    def _result(
        self,
        request: SplitRequest,
        shares: Mapping[str, Money],
        computed_total: Money,
    ) -> AllocationResult:
        """Build the result, reporting whatever was not allocated as remainder."""
        per_participant = {pid: shares[pid] for pid in request.participant_ids}
        allocated = Money.total(per_participant.values(), request.currency)
        return AllocationResult(
            mode=self.mode,
            currency=request.currency,
            per_participant=per_participant,
            computed_total=computed_total,
            remainder=computed_total.subtract(allocated),
        )
