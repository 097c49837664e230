"""
Allocation Package

Four interchangeable strategies behind one capability:
compute(SplitRequest) -> AllocationResult.
"""

from split_engine.allocation.apportion import apportion, distribute
from split_engine.allocation.base import (
    AllocationError,
    AllocationStrategy,
    InvalidAllocationInputError,
)
from split_engine.allocation.custom import CustomSplitStrategy
from split_engine.allocation.equal import EqualSplitStrategy
from split_engine.allocation.itemized import ItemizedSplitStrategy
from split_engine.allocation.percentage import PercentageSplitStrategy
from split_engine.models.split import AllocationResult, SplitMode, SplitRequest


STRATEGIES: dict[SplitMode, type[AllocationStrategy]] = {
    SplitMode.EQUAL: EqualSplitStrategy,
    SplitMode.ITEMIZED: ItemizedSplitStrategy,
    SplitMode.PERCENTAGE: PercentageSplitStrategy,
    SplitMode.CUSTOM: CustomSplitStrategy,
}


def get_strategy(mode: SplitMode) -> AllocationStrategy:
    """Instantiate the strategy for a split mode."""
    return STRATEGIES[SplitMode(mode)]()


def compute_allocation(request: SplitRequest) -> AllocationResult:
    """Compute a request with the strategy its mode selects."""
    return get_strategy(request.mode).compute(request)


__all__ = [
    "STRATEGIES",
    "AllocationError",
    "AllocationStrategy",
    "CustomSplitStrategy",
    "EqualSplitStrategy",
    "InvalidAllocationInputError",
    "ItemizedSplitStrategy",
    "PercentageSplitStrategy",
    "apportion",
    "compute_allocation",
    "distribute",
    "get_strategy",
]
