"""
Support and resistance detection from local extrema.
"""

from typing import Sequence, Tuple, List


MIN_SAMPLES = 20
MAX_LEVELS = 5


def support_resistance(prices: Sequence[float]) -> Tuple[List[float], List[float]]:
    """
    Find support and resistance levels with a sliding window.

    Window size is floor(n / 10). Every interior point whose price equals the
    minimum of its +/- window neighbourhood is a support candidate; equal to
    the maximum, a resistance candidate.

    Args:
        prices: Prices in chronological order

    Returns:
        Tuple of (supports ascending, resistances descending), each
        de-duplicated and limited to 5 levels; empty for fewer than 20 prices
    """
    if len(prices) < MIN_SAMPLES:
        return [], []

    window = len(prices) // 10
    supports = set()
    resistances = set()

    for i in range(window, len(prices) - window):
        neighbourhood = prices[i - window:i + window + 1]
        price = prices[i]

        if price == min(neighbourhood):
            supports.add(float(price))
        if price == max(neighbourhood):
            resistances.add(float(price))

    return (
        sorted(supports)[:MAX_LEVELS],
        sorted(resistances, reverse=True)[:MAX_LEVELS],
    )
