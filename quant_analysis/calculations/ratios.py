"""
Risk-adjusted return ratios.
Daily returns are annualized with the 252 trading-day convention.
"""

import math
from typing import Sequence

import numpy as np

from quant_analysis.calculations.volatility import (
    calculate_volatility,
    downside_deviation,
    TRADING_DAYS_PER_YEAR
)


# Returned when no negative return exists to measure downside risk
NO_DOWNSIDE_SORTINO = 100.0


def annualized_mean_return(
    returns: Sequence[float],
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> float:
    """Mean per-step return scaled to a year; 0 for empty input."""
    if len(returns) == 0:
        return 0.0
    return float(np.mean(returns)) * periods_per_year


def sharpe_ratio(
    returns: Sequence[float],
    risk_free_rate: float = 0.02,
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Sharpe ratio: (annualized mean return - risk-free rate) / annualized volatility.

    Returns 0 for fewer than 2 returns or zero volatility.
    """
    if len(returns) < 2:
        return 0.0

    volatility = calculate_volatility(returns, annualized=True, periods_per_year=periods_per_year)
    if volatility == 0:
        return 0.0

    return (annualized_mean_return(returns, periods_per_year) - risk_free_rate) / volatility


def sortino_ratio(
    returns: Sequence[float],
    risk_free_rate: float = 0.02,
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Sortino ratio: Sharpe numerator over annualized downside deviation.

    Returns 0 for fewer than 2 returns and NO_DOWNSIDE_SORTINO (100) when
    no return is negative.
    """
    if len(returns) < 2:
        return 0.0

    deviation = downside_deviation(returns) * math.sqrt(periods_per_year)
    if deviation == 0:
        return NO_DOWNSIDE_SORTINO

    return (annualized_mean_return(returns, periods_per_year) - risk_free_rate) / deviation


def calmar_ratio(
    returns: Sequence[float],
    max_drawdown: float,
    periods_per_year: int = TRADING_DAYS_PER_YEAR
) -> float:
    """
    Calmar ratio: annualized mean return / maximum drawdown.

    Returns 0 when max_drawdown is 0.
    """
    if max_drawdown == 0:
        return 0.0
    return annualized_mean_return(returns, periods_per_year) / max_drawdown
