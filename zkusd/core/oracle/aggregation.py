"""Outlier-resistant price aggregation.

Median of the submitted prices. With an even number of submissions the result
is the floor of the mean of the two middle values, so the aggregate stays an
integer and never leaves the [min, max] range of the inputs.
"""

from __future__ import annotations

from typing import Sequence

from ..fixed_point import verified_div


def median_price(prices: Sequence[int]) -> int:
    if not prices:
        raise ValueError("median of an empty price set is undefined")
    for p in prices:
        if not isinstance(p, int) or isinstance(p, bool) or p <= 0:
            raise ValueError(f"prices must be positive ints, got {p!r}")
    ordered = sorted(prices)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[mid]
    return verified_div(ordered[mid - 1] + ordered[mid], 2)
