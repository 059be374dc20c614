"""
Volatility calculation utilities.
Pure functions for realized volatility of a return series.
"""

import math
from typing import Sequence

import numpy as np

from quant_analysis.calculations.statistics import is_constant


TRADING_DAYS_PER_YEAR = 252


def calculate_volatility(
    returns: Sequence[float],
    annualized: bool = True,
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Calculate volatility as the population standard deviation of returns.

    Formula: sigma = std(returns) [x sqrt(periods_per_year) when annualized]

    Args:
        returns: Per-step returns
        annualized: Scale daily volatility to annual
        periods_per_year: Annualization factor (252 trading days)

    Returns:
        Volatility as decimal (0.25 = 25%), 0 for fewer than 2 returns or a
        constant series
    """
    if len(returns) < 2 or is_constant(returns):
        return 0.0

    std_dev = float(np.std(np.asarray(returns, dtype=float), ddof=0))

    return std_dev * math.sqrt(periods_per_year) if annualized else std_dev


def downside_deviation(returns: Sequence[float]) -> float:
    """
    Root mean square of the negative returns (target return of zero).

    Returns 0 when no return is negative.
    """
    return math.sqrt(semi_variance(returns))


def semi_variance(returns: Sequence[float]) -> float:
    """Mean of squared negative returns, 0 when no return is negative."""
    downside = [r for r in returns if r < 0]
    if not downside:
        return 0.0
    return float(np.mean(np.square(downside)))
