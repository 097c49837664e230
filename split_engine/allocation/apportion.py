"""
Integer apportionment helpers.

Largest-remainder (Hamilton) method: every share first gets the floor of
its exact value, then the leftover units go one at a time to the shares
with the largest fractional parts. Ties go to the earlier index, so the
outcome only depends on input order.

Exact values are Fractions; no rounding happens before the final integers.
"""

import math
from fractions import Fraction
from typing import Sequence


def distribute(total: int, exact_shares: Sequence[Fraction]) -> list[int]:
    """
    Turn exact (fractional) shares into integers summing to `total`.

    The leftover total - sum(floors) is normally in [0, len(shares)), but
    shares that are slightly off (e.g. percentages within tolerance of 100)
    may leave more, or less than nothing; then the adjustment wraps around
    the same ordering.
    """
    if not exact_shares:
        return []

    floors = [math.floor(share) for share in exact_shares]
    leftover = total - sum(floors)
    if leftover == 0:
        return floors

    fractions = [share - floor for share, floor in zip(exact_shares, floors)]
    if leftover > 0:
        # Largest fractional part first, earlier index wins ties
        order = sorted(range(len(floors)), key=lambda i: (-fractions[i], i))
        step = 1
    else:
        # Take back from the smallest fractional parts first
        order = sorted(range(len(floors)), key=lambda i: (fractions[i], i))
        step = -1

    result = list(floors)
    position = 0
    while leftover != 0:
        index = order[position % len(order)]
        position += 1
        if step < 0 and result[index] <= 0:
            continue
        result[index] += step
        leftover -= step
    return result


def apportion(total: int, weights: Sequence[int | Fraction]) -> list[int]:
    """
    Split `total` units in proportion to `weights`.

    Division guard: if the weights sum to zero, nobody gets anything.
    """
    weight_sum = sum(Fraction(w) for w in weights)
    if weight_sum == 0:
        return [0] * len(weights)
    exact = [Fraction(total) * Fraction(w) / weight_sum for w in weights]
    return distribute(total, exact)
