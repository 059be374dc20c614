"""
Signal synthesizer - combines technical and fundamental scores into a
bounded composite trading signal.
"""

from typing import List, Optional, Tuple

from quant_analysis.models import (
    FinancialMetrics,
    Recommendation,
    TimeHorizon,
    TradingSignals
)


BUY_THRESHOLD = 30.0
SELL_THRESHOLD = -30.0
MIN_CONFIDENCE = 20.0
MAX_CONFIDENCE = 95.0


def technical_signal(
    slope: float,
    sharpe: float,
    current_drawdown: float,
    volume_ratio: float,
    change_percent_24h: float
) -> Tuple[float, List[str]]:
    """
    Technical sub-signal from five capped contributions.

    | input              | bullish        | bearish         | size |
    |--------------------|----------------|-----------------|------|
    | regression slope   | > 0            | < 0             | 30   |
    | Sharpe ratio       | > 1            | < 0             | 20   |
    | current drawdown   | < 10%          | > 30%           | 20   |
    | volume ratio       | > 1.2          | < 0.8           | 20   |
    | 24h change (%)     | > 5            | < -5            | 10   |

    The sum is bounded to [-100, 100] by construction.

    Returns:
        Tuple of (score, reasons)
    """
    score = 0.0
    reasons = []

    if slope > 0:
        score += 30
        reasons.append("Upward price trend")
    elif slope < 0:
        score -= 30
        reasons.append("Downward price trend")

    if sharpe > 1:
        score += 20
        reasons.append("Strong risk-adjusted returns")
    elif sharpe < 0:
        score -= 20
        reasons.append("Negative risk-adjusted returns")

    if current_drawdown < 0.1:
        score += 20
        reasons.append("Trading near recent highs")
    elif current_drawdown > 0.3:
        score -= 20
        reasons.append("Deep drawdown from peak")

    if volume_ratio > 1.2:
        score += 20
        reasons.append("Above-average volume")
    elif volume_ratio < 0.8:
        score -= 20
        reasons.append("Below-average volume")

    if change_percent_24h > 5:
        score += 10
        reasons.append("Strong 24h gain")
    elif change_percent_24h < -5:
        score -= 10
        reasons.append("Sharp 24h loss")

    return score, reasons


def fundamental_signal(metrics: Optional[FinancialMetrics]) -> Tuple[float, List[str]]:
    """
    Fundamental sub-signal from valuation, profitability, growth and leverage.

    | input           | bullish   | bearish   | size |
    |-----------------|-----------|-----------|------|
    | P/E ratio       | 0 < pe < 15 | > 30    | 20   |
    | profit margin   | > 15%     | < 0       | 20   |
    | revenue growth  | > 10%     | < 0       | 20   |
    | debt / equity   | < 1       | > 2       | 10   |

    Missing fundamentals (None, or a field set to None) contribute 0.

    Returns:
        Tuple of (score, reasons)
    """
    if metrics is None:
        return 0.0, []

    score = 0.0
    reasons = []

    pe = metrics.pe_ratio
    if pe is not None and 0 < pe < 15:
        score += 20
        reasons.append("Attractive valuation (low P/E)")
    elif pe is not None and pe > 30:
        score -= 20
        reasons.append("Rich valuation (high P/E)")

    margin = metrics.profit_margin
    if margin is not None and margin > 0.15:
        score += 20
        reasons.append("High profit margin")
    elif margin is not None and margin < 0:
        score -= 20
        reasons.append("Unprofitable")

    growth = metrics.revenue_growth
    if growth is not None and growth > 0.1:
        score += 20
        reasons.append("Strong revenue growth")
    elif growth is not None and growth < 0:
        score -= 20
        reasons.append("Shrinking revenue")

    leverage = metrics.debt_to_equity
    if leverage is not None and leverage < 1:
        score += 10
        reasons.append("Conservative leverage")
    elif leverage is not None and leverage > 2:
        score -= 10
        reasons.append("High leverage")

    return score, reasons


def overall_risk_score(max_drawdown: float, annualized_volatility: float, var_95: float) -> float:
    """
    Risk score in [0, 100], higher is riskier.

    Formula: clamp(50 * max_drawdown + 20 * annualized_volatility + 30 * VaR95, 0, 100)
    """
    raw = max_drawdown * 50 + annualized_volatility * 20 + var_95 * 30
    return min(100.0, max(0.0, raw))


def classify_signal(strength: float) -> Recommendation:
    """Buy above +30, sell below -30, hold in between (boundaries hold)."""
    if strength > BUY_THRESHOLD:
        return Recommendation.BUY
    if strength < SELL_THRESHOLD:
        return Recommendation.SELL
    return Recommendation.HOLD


def synthesize_signals(
    technical: float,
    fundamental: float,
    risk_score: float,
    reasons: Optional[List[str]] = None,
    high_risk_threshold: float = 70.0
) -> TradingSignals:
    """
    Combine sub-signals into the composite trading signal.

    strength = clamp(technical + fundamental, -100, 100);
    confidence = clamp(|strength|, 20, 95).

    Args:
        technical: Technical sub-signal
        fundamental: Fundamental sub-signal
        risk_score: Overall risk score (0-100)
        reasons: Human-readable contributing factors
        high_risk_threshold: Risk score above which a warning is attached

    Returns:
        TradingSignals with exactly one of buy/sell/hold set
    """
    strength = max(-100.0, min(100.0, technical + fundamental))
    action = classify_signal(strength)

    warnings = []
    if risk_score > high_risk_threshold:
        warnings.append("High risk detected")

    return TradingSignals(
        signal_strength=strength,
        technical_signal=technical,
        fundamental_signal=fundamental,
        sentiment_signal=0.0,
        risk_signal=-risk_score,
        confidence=min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, abs(strength))),
        buy_signal=action == Recommendation.BUY,
        sell_signal=action == Recommendation.SELL,
        hold_signal=action == Recommendation.HOLD,
        action=action,
        reasons=tuple(reasons or ()),
        warnings=tuple(warnings),
        time_horizon=TimeHorizon.MEDIUM,
    )
