"""
Descriptive statistics utilities.
Pure functions over numeric series; degenerate input resolves to neutral values.
"""

import math
from typing import List, Sequence

import numpy as np

from quant_analysis.models import DescriptiveStats, DistributionType


def descriptive_stats(data: Sequence[float]) -> DescriptiveStats:
    """
    Calculate descriptive statistics for a series.

    - median uses a sorted copy (input is never reordered)
    - mode counts values rounded to 2 decimals; ties go to the first value seen
    - variance is the population variance (divide by n)

    Args:
        data: Numeric series

    Returns:
        DescriptiveStats (all zeros for empty input)
    """
    if len(data) == 0:
        return DescriptiveStats()

    values = np.asarray(data, dtype=float)
    ordered = np.sort(values)
    n = len(ordered)

    mean = float(values.mean())
    if n % 2 == 0:
        median = float((ordered[n // 2 - 1] + ordered[n // 2]) / 2)
    else:
        median = float(ordered[n // 2])

    variance = float(np.mean((values - mean) ** 2))
    minimum = float(ordered[0])
    maximum = float(ordered[-1])

    return DescriptiveStats(
        mean=mean,
        median=median,
        mode=_mode(data),
        std_dev=math.sqrt(variance),
        variance=variance,
        min=minimum,
        max=maximum,
        range=maximum - minimum,
    )


def _mode(data: Sequence[float]) -> float:
    frequency = {}
    for value in data:
        key = round(float(value), 2)
        frequency[key] = frequency.get(key, 0) + 1

    mode, best = None, 0
    for key, count in frequency.items():
        # Strict comparison keeps the earliest key on ties
        if count > best:
            mode, best = key, count
    return float(mode)


def is_constant(data: Sequence[float]) -> bool:
    """
    True when the series is non-empty and every value is identical.

    Compares raw values; a computed variance of a constant series can be a
    tiny non-zero float.
    """
    if len(data) == 0:
        return False
    return min(data) == max(data)


def skewness(data: Sequence[float]) -> float:
    """
    Bias-adjusted sample skewness.

    Formula: (n / ((n-1)(n-2))) * sum(((x - mean) / sd)^3)

    Returns 0 for fewer than 3 values or zero standard deviation.
    """
    n = len(data)
    if n < 3:
        return 0.0

    if is_constant(data):
        return 0.0

    stats = descriptive_stats(data)

    z = (np.asarray(data, dtype=float) - stats.mean) / stats.std_dev
    return float((n / ((n - 1) * (n - 2))) * np.sum(z ** 3))


def kurtosis(data: Sequence[float]) -> float:
    """
    Small-sample excess kurtosis.

    Formula: n(n+1)/((n-1)(n-2)(n-3)) * sum(z^4) - 3(n-1)^2/((n-2)(n-3))

    Returns 3 (the normal reference value) for fewer than 4 values or zero
    standard deviation.
    """
    n = len(data)
    if n < 4:
        return 3.0

    if is_constant(data):
        return 3.0

    stats = descriptive_stats(data)

    z = (np.asarray(data, dtype=float) - stats.mean) / stats.std_dev
    head = (n * (n + 1)) / ((n - 1) * (n - 2) * (n - 3))
    tail = (3 * (n - 1) ** 2) / ((n - 2) * (n - 3))
    return float(head * np.sum(z ** 4) - tail)


def autocorrelation(data: Sequence[float], max_lag: int = 10) -> List[float]:
    """
    Autocorrelation of a series for lags 1..max_lag.

    Lags at or beyond the series length are omitted. A zero-variance series
    yields max_lag zeros.

    Args:
        data: Numeric series (typically returns)
        max_lag: Largest lag to compute

    Returns:
        List of autocorrelation coefficients, lag 1 first
    """
    if len(data) == 0:
        return [0.0] * max_lag

    values = np.asarray(data, dtype=float)
    if is_constant(data):
        return [0.0] * max_lag

    mean = values.mean()
    variance = float(np.mean((values - mean) ** 2))

    n = len(values)
    centered = values - mean
    result = []
    for lag in range(1, min(max_lag, n - 1) + 1):
        covariance = float(np.sum(centered[lag:] * centered[:-lag]))
        result.append(covariance / ((n - lag) * variance))
    return result


def classify_distribution(skew: float, excess_kurtosis: float, sample_size: int) -> DistributionType:
    """
    Classify the return distribution shape.

    Thresholds:
    - normal: |skew| < 0.5 and |excess kurtosis| < 1
    - skewed: |skew| > 1
    - fat-tailed: excess kurtosis beyond +/-2
    - unknown: anything else, or fewer than 4 observations
    """
    if sample_size < 4:
        return DistributionType.UNKNOWN

    if abs(skew) < 0.5 and abs(excess_kurtosis) < 1:
        return DistributionType.NORMAL
    elif abs(skew) > 1:
        return DistributionType.SKEWED
    elif abs(excess_kurtosis) > 2:
        return DistributionType.FAT_TAILED
    else:
        return DistributionType.UNKNOWN
