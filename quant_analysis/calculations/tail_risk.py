"""
Historical tail-risk estimators.
"""

import math
from typing import Sequence


def _tail_index(n: int, confidence: float) -> int:
    return int(math.floor((1 - confidence) * n))


def value_at_risk(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Historical Value at Risk.

    Sorts a copy of the returns ascending and reads the return at
    floor((1 - confidence) * n). Confidence is not validated; pass a value in
    (0, 1), conventionally 0.95 or 0.99.

    Args:
        returns: Per-step returns
        confidence: Confidence level

    Returns:
        VaR as positive decimal, 0 for empty input
    """
    if len(returns) == 0:
        return 0.0

    ordered = sorted(returns)
    index = _tail_index(len(ordered), confidence)
    if index >= len(ordered):
        return 0.0
    return abs(float(ordered[index]))


def conditional_value_at_risk(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Conditional VaR (expected shortfall).

    Mean of the absolute values of every return up to and including the VaR
    index of the ascending sort. Never less than the VaR at the same level.

    Returns:
        CVaR as positive decimal, 0 for empty input
    """
    if len(returns) == 0:
        return 0.0

    ordered = sorted(returns)
    index = _tail_index(len(ordered), confidence)
    tail = ordered[:index + 1]
    if not tail:
        return 0.0

    shortfall = sum(abs(r) for r in tail) / len(tail)

    # A tail holding gains can average below its own boundary; floor at VaR
    return max(float(shortfall), value_at_risk(returns, confidence))
