"""
Technical indicator utilities.
Short or flat history never raises; each indicator falls back to a neutral value.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from quant_analysis.models import (
    PriceSample,
    TechnicalIndicators,
    MACD,
    BollingerBands,
    Stochastic,
    Trend,
    Recommendation
)


NEUTRAL_RSI = 50.0
NEUTRAL_ADX = 25.0
NEUTRAL_STOCHASTIC = 50.0

# Band used to estimate highs/lows when the series only carries closes
ESTIMATED_RANGE = 0.02

# Number of indicator votes in recommend()
MAX_SIGNALS = 7


def rsi(prices: Sequence[float], period: int = 14) -> float:
    """
    Relative Strength Index with Wilder smoothing.

    Average gain/loss are seeded from the first `period` price changes and
    rolled forward as avg = (avg * (period - 1) + current) / period.

    Returns:
        RSI in [0, 100]; 50 when fewer than period + 1 prices,
        100 when the average loss is zero
    """
    if len(prices) < period + 1:
        return NEUTRAL_RSI

    changes = np.diff(np.asarray(prices, dtype=float))

    seed = changes[:period]
    avg_gain = float(np.sum(seed[seed > 0])) / period
    avg_loss = float(-np.sum(seed[seed < 0])) / period

    for change in changes[period:]:
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def sma(prices: Sequence[float], period: int) -> float:
    """Simple moving average of the last `period` prices (last price if shorter)."""
    if len(prices) < period:
        return _last(prices)
    return float(np.mean(prices[-period:]))


def ema(prices: Sequence[float], period: int) -> float:
    """
    Exponential moving average seeded with the SMA of the first `period` prices.

    Multiplier: 2 / (period + 1). Falls back to the last price when shorter
    than `period`.
    """
    if len(prices) < period:
        return _last(prices)

    multiplier = 2 / (period + 1)
    value = float(np.mean(prices[:period]))
    for price in prices[period:]:
        value = (price - value) * multiplier + value
    return value


def macd(prices: Sequence[float]) -> MACD:
    """
    MACD line: EMA(12) - EMA(26).

    The signal is an EMA(9) over the single current MACD value rather than a
    rolling signal line, so it equals the MACD value and the histogram is 0.
    """
    value = ema(prices, 12) - ema(prices, 26)
    signal = ema([value], 9)
    return MACD(value=value, signal=signal, histogram=value - signal)


def bollinger_bands(prices: Sequence[float], period: int = 20, k: float = 2.0) -> BollingerBands:
    """
    Bollinger Bands: SMA(period) +/- k population standard deviations.

    All three bands collapse to the last price when shorter than `period`.
    """
    if len(prices) < period:
        last = _last(prices)
        return BollingerBands(upper=last, middle=last, lower=last)

    window = np.asarray(prices[-period:], dtype=float)
    middle = float(window.mean())
    std_dev = float(np.sqrt(np.mean((window - middle) ** 2)))

    return BollingerBands(
        upper=middle + std_dev * k,
        middle=middle,
        lower=middle - std_dev * k,
    )


def stochastic(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    k_period: int = 14,
    d_period: int = 3
) -> Stochastic:
    """
    Stochastic oscillator.

    %K = (close - lowest low) / (highest high - lowest low) * 100 over the
    trailing k_period window. %D is the mean of the last d_period %K values,
    each recomputed from its own trailing window; flat windows are skipped and
    %D falls back to %K when none remain.

    Returns:
        Stochastic(k, d); 50/50 when history is short or the window is flat
    """
    if len(closes) < k_period:
        return Stochastic(k=NEUTRAL_STOCHASTIC, d=NEUTRAL_STOCHASTIC)

    k = _percent_k(highs, lows, closes, len(closes) - 1, k_period)
    if k is None:
        return Stochastic(k=NEUTRAL_STOCHASTIC, d=NEUTRAL_STOCHASTIC)

    k_values = []
    for i in range(len(closes) - d_period, len(closes)):
        if i >= k_period - 1:
            value = _percent_k(highs, lows, closes, i, k_period)
            if value is not None:
                k_values.append(value)

    d = float(np.mean(k_values)) if k_values else k
    return Stochastic(k=k, d=d)


def _percent_k(highs, lows, closes, end: int, k_period: int) -> Optional[float]:
    start = end - k_period + 1
    highest = max(highs[start:end + 1])
    lowest = min(lows[start:end + 1])
    if highest == lowest:
        return None
    return (closes[end] - lowest) / (highest - lowest) * 100


def adx(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14
) -> float:
    """
    Average Directional Index (Wilder).

    True range and directional movement are Wilder-smoothed over `period`;
    DX = |+DI - -DI| / (+DI + -DI) * 100 is then averaged with the same
    smoothing.

    Returns:
        ADX clamped to [0, 100]; 25 with fewer than 2 * period samples, a
        zero average true range or no directional movement
    """
    n = min(len(highs), len(lows), len(closes))
    if n < period * 2:
        return NEUTRAL_ADX

    true_ranges = []
    plus_dm = []
    minus_dm = []

    for i in range(1, n):
        true_ranges.append(max(
            highs[i] - lows[i],
            abs(highs[i] - closes[i - 1]),
            abs(lows[i] - closes[i - 1]),
        ))

        up_move = highs[i] - highs[i - 1] if highs[i] > highs[i - 1] else 0.0
        down_move = lows[i - 1] - lows[i] if lows[i] < lows[i - 1] else 0.0

        plus_dm.append(up_move if up_move > down_move else 0.0)
        minus_dm.append(down_move if down_move > up_move else 0.0)

    # Wilder sums over the first period, then roll forward
    atr = sum(true_ranges[:period])
    plus_sum = sum(plus_dm[:period])
    minus_sum = sum(minus_dm[:period])
    dx_values = [_dx(plus_sum, minus_sum)]

    for i in range(period, len(true_ranges)):
        atr = atr - atr / period + true_ranges[i]
        plus_sum = plus_sum - plus_sum / period + plus_dm[i]
        minus_sum = minus_sum - minus_sum / period + minus_dm[i]
        dx_values.append(_dx(plus_sum, minus_sum))

    if atr == 0 or plus_sum + minus_sum == 0:
        return NEUTRAL_ADX

    value = float(np.mean(dx_values[:period]))
    for dx in dx_values[period:]:
        value = (value * (period - 1) + dx) / period

    return min(max(value, 0.0), 100.0)


def _dx(plus_sum: float, minus_sum: float) -> float:
    # +DI and -DI share the ATR denominator, so it cancels out of DX
    total = plus_sum + minus_sum
    if total == 0:
        return 0.0
    return abs(plus_sum - minus_sum) / total * 100


def classify_trend(
    current_price: float,
    sma20: float,
    sma50: float,
    sma200: float,
    history: int
) -> Trend:
    """
    Moving-average trend.

    Bullish when price > SMA20 > SMA50 (> SMA200), bearish for the mirror
    ordering. SMA200 only takes part once 200 samples exist; before that it is
    the last-price fallback and carries no information.
    """
    long_up = sma50 > sma200 if history >= 200 else True
    long_down = sma50 < sma200 if history >= 200 else True

    if current_price > sma20 > sma50 and long_up:
        return Trend.BULLISH
    if current_price < sma20 < sma50 and long_down:
        return Trend.BEARISH
    return Trend.NEUTRAL


def recommend(
    current_price: float,
    rsi_value: float,
    macd_value: MACD,
    sma20: float,
    sma50: float,
    bands: BollingerBands,
    stoch: Stochastic,
    adx_value: float,
    trend: Trend
) -> Tuple[Recommendation, float]:
    """
    Vote across seven indicator rules.

    A side needs at least 2 votes and more votes than the other side.
    Confidence is votes / 7 * 100 capped at 95 for buy/sell, and
    max(50 - 10 * |buy - sell|, 20) for hold.

    Returns:
        Tuple of (recommendation, confidence)
    """
    buy = 0
    sell = 0

    if rsi_value < 30:
        buy += 1
    elif rsi_value > 70:
        sell += 1

    if macd_value.histogram > 0 and macd_value.value > macd_value.signal:
        buy += 1
    elif macd_value.histogram < 0 and macd_value.value < macd_value.signal:
        sell += 1

    if trend == Trend.BULLISH:
        buy += 1
    elif trend == Trend.BEARISH:
        sell += 1

    if current_price > sma20 > sma50:
        buy += 1
    elif current_price < sma20 < sma50:
        sell += 1

    if current_price < bands.lower:
        buy += 1
    elif current_price > bands.upper:
        sell += 1

    if stoch.k < 20 and stoch.d < 20:
        buy += 1
    elif stoch.k > 80 and stoch.d > 80:
        sell += 1

    # Strong trend reinforces its direction
    if adx_value > 25:
        if trend == Trend.BULLISH:
            buy += 1
        elif trend == Trend.BEARISH:
            sell += 1

    if buy > sell and buy >= 2:
        return Recommendation.BUY, min(buy / MAX_SIGNALS * 100, 95.0)
    if sell > buy and sell >= 2:
        return Recommendation.SELL, min(sell / MAX_SIGNALS * 100, 95.0)
    return Recommendation.HOLD, float(max(50 - abs(buy - sell) * 10, 20))


def neutral_indicators(last_price: float) -> TechnicalIndicators:
    """Indicator bundle used when history is too short to say anything."""
    return TechnicalIndicators(
        rsi=NEUTRAL_RSI,
        macd=MACD(),
        sma20=last_price,
        sma50=last_price,
        sma200=last_price,
        bollinger=BollingerBands(upper=last_price, middle=last_price, lower=last_price),
        stochastic=Stochastic(),
        adx=NEUTRAL_ADX,
        trend=Trend.NEUTRAL,
        recommendation=Recommendation.HOLD,
        confidence=0.0,
    )


def calculate_indicators(
    samples: Sequence[PriceSample],
    min_samples: int = 50
) -> TechnicalIndicators:
    """
    Calculate every technical indicator and the resulting recommendation.

    Highs and lows come from the samples when the first sample carries them
    (missing values default to the price); otherwise they are estimated as
    price +/- 2%.

    Args:
        samples: Price samples in chronological order
        min_samples: History required before indicators are computed

    Returns:
        TechnicalIndicators; neutral defaults (rsi 50, adx 25, trend neutral,
        hold with confidence 0) when fewer than min_samples samples
    """
    if len(samples) < min_samples:
        last_price = samples[-1].price if samples else 0.0
        return neutral_indicators(last_price)

    prices = [s.price for s in samples]
    current_price = prices[-1]

    rsi_value = rsi(prices, 14)
    macd_value = macd(prices)
    sma20 = sma(prices, 20)
    sma50 = sma(prices, 50)
    sma200 = sma(prices, 200)
    bands = bollinger_bands(prices, 20, 2)

    highs = _highs(samples)
    lows = _lows(samples)

    stoch = stochastic(highs, lows, prices, 14, 3)
    adx_value = adx(highs, lows, prices, 14)

    trend = classify_trend(current_price, sma20, sma50, sma200, len(prices))
    recommendation, confidence = recommend(
        current_price, rsi_value, macd_value, sma20, sma50,
        bands, stoch, adx_value, trend
    )

    return TechnicalIndicators(
        rsi=rsi_value,
        macd=macd_value,
        sma20=sma20,
        sma50=sma50,
        sma200=sma200,
        bollinger=bands,
        stochastic=stoch,
        adx=adx_value,
        trend=trend,
        recommendation=recommendation,
        confidence=confidence,
    )


def _highs(samples: Sequence[PriceSample]) -> List[float]:
    if samples[0].high is not None:
        return [s.high if s.high is not None else s.price for s in samples]
    return [s.price * (1 + ESTIMATED_RANGE) for s in samples]


def _lows(samples: Sequence[PriceSample]) -> List[float]:
    if samples[0].low is not None:
        return [s.low if s.low is not None else s.price for s in samples]
    return [s.price * (1 - ESTIMATED_RANGE) for s in samples]


def _last(prices: Sequence[float]) -> float:
    return float(prices[-1]) if len(prices) > 0 else 0.0
