"""
Itemized split: each item is shared by the people assigned to it.

Two passes:
1. Item prices are divided evenly among each item's assignees. The
   per-item remainder goes one minor unit at a time to the assignees in
   assignment order.
2. Tax and tip follow each participant's share of the items total
   (participant_items / items_total), apportioned by largest remainder.

EDGE CASES (explicit policy, not guessed):
- An item nobody is assigned to counts toward computed_total but toward
  nobody's share. Its part of the tax and tip stays unallocated too.
- items_total == 0: tax and tip are not distributed at all.
Both show up as AllocationResult.remainder, which reconciliation surfaces.
"""

import math
from fractions import Fraction

from split_engine.allocation.apportion import apportion
from split_engine.allocation.base import AllocationStrategy
from split_engine.models.money import Money
from split_engine.models.split import AllocationResult, SplitMode, SplitRequest


class ItemizedSplitStrategy(AllocationStrategy):

    mode = SplitMode.ITEMIZED

    def compute(self, request: SplitRequest) -> AllocationResult:
        self._check_mode(request)
        currency = request.currency

        item_units = {pid: 0 for pid in request.participant_ids}
        items_total = Money.zero(currency)
        assigned_total = Money.zero(currency)

        # Pass 1: item prices
        for item in request.items:
            price = request.money(item.price)
            items_total = items_total.add(price)
            if not item.is_assigned:
                continue

            assigned_total = assigned_total.add(price)
            share, remainder = price.divide_evenly(len(item.assigned_to))
            for index, pid in enumerate(item.assigned_to):
                extra = 1 if index < remainder.minor_units else 0
                item_units[pid] += share.minor_units + extra

        # Pass 2: tax and tip, proportional to item subtotals
        extras = request.money(request.tax_amount).add(request.money(request.tip_amount))
        extra_units = {pid: 0 for pid in request.participant_ids}

        if items_total.minor_units > 0 and assigned_total.minor_units > 0:
            # Only the assigned part of the items carries tax and tip
            allocatable = math.floor(
                Fraction(extras.minor_units * assigned_total.minor_units, items_total.minor_units)
            )
            weights = [item_units[pid] for pid in request.participant_ids]
            for pid, units in zip(request.participant_ids, apportion(allocatable, weights)):
                extra_units[pid] = units

        shares = {
            pid: Money.from_minor_units(item_units[pid] + extra_units[pid], currency)
            for pid in request.participant_ids
        }
        computed_total = items_total.add(extras)

        return self._result(request, shares, computed_total)
