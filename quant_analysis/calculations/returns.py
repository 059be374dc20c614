"""
Returns calculation utilities.
Pure functions for per-step returns and period-over-period price changes.
"""

from typing import List, Dict, Optional, Sequence


class ReturnsError(Exception):
    """Raised when returns calculation fails."""
    pass


# Lookbacks in samples for period-over-period changes
PERIOD_WINDOWS = {
    '7d': 7,
    '30d': 30,
    '90d': 90,
    '1y': 252,
}


def calculate_returns(prices: Sequence[float]) -> List[float]:
    """
    Calculate simple per-step returns.

    Formula: r_i = (P_{i+1} - P_i) / P_i

    Steps whose prior price is exactly zero are skipped, so the result can be
    shorter than len(prices) - 1 for degenerate input.

    Args:
        prices: Prices in chronological order

    Returns:
        List of returns as decimals (0.05 = 5%)

    Example:
        [100, 110, 0, 50] -> [0.10, -1.0]  (the 0 -> 50 step is skipped)
    """
    returns = []
    for i in range(1, len(prices)):
        previous = prices[i - 1]
        if previous != 0:
            returns.append((prices[i] - previous) / previous)
    return returns


def simple_return(prices: Sequence[float], k: int) -> float:
    """
    Calculate simple return over the most recent k periods.

    Formula: R_t,k = (P_t / P_{t-k}) - 1

    Args:
        prices: Prices in chronological order
        k: Number of periods to look back

    Returns:
        Simple return as decimal

    Raises:
        ReturnsError: If insufficient data or the reference price is zero
    """
    if k <= 0:
        raise ReturnsError("Window size must be positive")

    if k >= len(prices):
        raise ReturnsError(f"Window size {k} larger than available data {len(prices)}")

    past_price = prices[-1 - k]
    if past_price == 0:
        raise ReturnsError("Reference price is zero")

    return (prices[-1] / past_price) - 1


def calculate_period_changes(
    prices: Sequence[float],
    windows: Dict[str, int] = PERIOD_WINDOWS
) -> Dict[str, Optional[float]]:
    """
    Calculate percentage price changes for several lookback windows.

    Args:
        prices: Prices in chronological order
        windows: Mapping of window name to window size in samples; the
            window includes the latest price, so a window of n compares
            against prices[-n]

    Returns:
        Dictionary mapping window names to percent change (5.0 = 5%),
        or None when fewer than n prices are available
    """
    results = {}
    for name, size in windows.items():
        try:
            results[name] = simple_return(prices, size - 1) * 100
        except ReturnsError:
            results[name] = None
    return results
