"""
Correlation and linear regression utilities.
"""

import math
from typing import Sequence

import numpy as np

from quant_analysis.calculations.statistics import is_constant
from quant_analysis.models import LinearRegression


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient.

    Returns 0 when the series are empty, differ in length, or either has
    zero variance.
    """
    if len(x) != len(y) or len(x) == 0:
        return 0.0

    if is_constant(x) or is_constant(y):
        return 0.0

    dx = np.asarray(x, dtype=float) - np.mean(x)
    dy = np.asarray(y, dtype=float) - np.mean(y)

    denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denominator == 0:
        return 0.0

    return float(np.sum(dx * dy)) / denominator


def linear_regression(x: Sequence[float], y: Sequence[float]) -> LinearRegression:
    """
    Ordinary least squares regression of y on x.

    slope = sum(dx*dy) / sum(dx^2), intercept = mean(y) - slope*mean(x),
    r_squared = correlation^2.

    The p-value is a surrogate: 1 - |t|/10 clamped to [0, 1], where t is the
    slope t-statistic. It ranks trend significance; it is not a rigorous
    hypothesis test.

    Returns (0, 0, 0, 1) for fewer than 2 points or mismatched lengths.
    """
    n = len(x)
    if n != len(y) or n < 2:
        return LinearRegression()

    mean_x = float(np.mean(x))
    mean_y = float(np.mean(y))
    dx = np.asarray(x, dtype=float) - mean_x
    dy = np.asarray(y, dtype=float) - mean_y

    sum_xy = float(np.sum(dx * dy))
    sum_x2 = float(np.sum(dx * dx))
    sum_y2 = float(np.sum(dy * dy))

    slope = 0.0 if sum_x2 == 0 or is_constant(y) else sum_xy / sum_x2
    intercept = mean_y - slope * mean_x
    r_squared = correlation(x, y) ** 2

    return LinearRegression(
        slope=slope,
        intercept=intercept,
        r_squared=r_squared,
        p_value=_p_value_surrogate(slope, sum_xy, sum_x2, sum_y2, n),
    )


def _p_value_surrogate(slope: float, sum_xy: float, sum_x2: float, sum_y2: float, n: int) -> float:
    if n < 3 or sum_x2 == 0:
        return 1.0

    residual = max(sum_y2 - slope * sum_xy, 0.0)
    std_error = math.sqrt(residual / (n - 2))

    if std_error == 0:
        # Perfect fit: any nonzero slope is maximally significant
        return 0.0 if slope != 0 else 1.0

    t_stat = slope / (std_error / math.sqrt(sum_x2))
    return min(1.0, max(0.0, 1 - abs(t_stat) / 10))
