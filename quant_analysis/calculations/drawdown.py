"""
Drawdown calculation utilities.
Single forward pass over prices tracking the running peak.
"""

from typing import Sequence

import numpy as np

from quant_analysis.models import DrawdownStats


def drawdown_stats(prices: Sequence[float]) -> DrawdownStats:
    """
    Calculate drawdown statistics for a price series.

    Walks the series once, keeping a running peak:
    - exceeding the peak resets it and closes any open episode
    - at or below the peak, (peak - price) / peak is recorded as a drawdown
      sample; a price equal to the peak records 0 and keeps the episode open

    Args:
        prices: Prices in chronological order

    Returns:
        DrawdownStats with:
        - max_drawdown: largest decline from a peak as positive decimal
        - max_drawdown_duration: longest episode in samples, measured from the
          peak; an episode still open at the end counts up to the last sample
        - current_drawdown: drawdown at the last observation (0 at a new high)
        - average_drawdown: mean of all per-step drawdown samples

        All zeros for fewer than 2 prices.
    """
    if len(prices) < 2:
        return DrawdownStats()

    peak = prices[0]
    peak_idx = 0
    episode_start = None
    max_duration = 0
    samples = []
    current = 0.0

    for i in range(1, len(prices)):
        price = prices[i]

        if price > peak:
            if episode_start is not None:
                max_duration = max(max_duration, i - episode_start)
                episode_start = None
            peak = price
            peak_idx = i
            current = 0.0
            continue

        current = (peak - price) / peak if peak != 0 else 0.0
        samples.append(current)

        if episode_start is None:
            episode_start = peak_idx

    if episode_start is not None:
        max_duration = max(max_duration, len(prices) - 1 - episode_start)

    return DrawdownStats(
        max_drawdown=float(max(samples)) if samples else 0.0,
        max_drawdown_duration=max_duration,
        current_drawdown=float(current),
        average_drawdown=float(np.mean(samples)) if samples else 0.0,
    )
