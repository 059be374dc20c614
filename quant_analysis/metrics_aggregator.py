"""
Metrics aggregator - composes all calculations into a QuantitativeAnalysis.
Pure function of its inputs; every call builds a fresh snapshot.
"""

import logging
import warnings
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from quant_analysis.config import AnalysisConfig, load_config
from quant_analysis.models import (
    AssetType,
    DistributionType,
    FinancialMetrics,
    Patterns,
    PriceAnalysis,
    PriceSample,
    QuantitativeAnalysis,
    RiskMetrics,
    StatisticalAnalysis,
    TrendLine,
    VolumeAnalysis,
    VolumeTrend
)
from quant_analysis.guardrails import (
    DataQualityWarning,
    validate_price_data_integrity,
    validate_price_samples
)
from quant_analysis.calculations.statistics import (
    autocorrelation,
    classify_distribution,
    descriptive_stats,
    is_constant,
    kurtosis,
    skewness
)
from quant_analysis.calculations.returns import calculate_period_changes, calculate_returns
from quant_analysis.calculations.volatility import calculate_volatility, downside_deviation, semi_variance
from quant_analysis.calculations.regression import correlation, linear_regression
from quant_analysis.calculations.drawdown import drawdown_stats
from quant_analysis.calculations.tail_risk import conditional_value_at_risk, value_at_risk
from quant_analysis.calculations.ratios import calmar_ratio, sharpe_ratio, sortino_ratio
from quant_analysis.calculations.indicators import calculate_indicators
from quant_analysis.calculations.support_resistance import support_resistance
from quant_analysis.signals import (
    fundamental_signal,
    overall_risk_score,
    synthesize_signals,
    technical_signal
)

logger = logging.getLogger(__name__)


def analyze(
    price_data: Sequence[PriceSample],
    financial_metrics: Optional[FinancialMetrics] = None,
    asset_type: Union[AssetType, str] = AssetType.STOCK,
    *,
    symbol: str = '',
    name: Optional[str] = None,
    config: Optional[AnalysisConfig] = None,
    as_of: Optional[datetime] = None
) -> QuantitativeAnalysis:
    """
    Run the full quantitative analysis on a price series.

    Args:
        price_data: Price samples ordered oldest to newest
        financial_metrics: Optional fundamentals; absence never fails
        asset_type: "stock" or "crypto"
        symbol: Asset symbol recorded on the snapshot
        name: Display name (defaults to the symbol)
        config: Analysis configuration (defaults to load_config())
        as_of: Snapshot timestamp (defaults to now, UTC)

    Returns:
        Immutable QuantitativeAnalysis

    Raises:
        InsufficientDataError: If fewer than 2 samples
        DataQualityError: If prices are not finite or samples are out of order
    """
    validate_price_samples(price_data)

    if config is None:
        config = load_config()

    asset_type = AssetType(asset_type)
    days = config.trading_days_per_year

    for warning in validate_price_data_integrity(price_data):
        logger.warning(f"{symbol or 'series'}: {warning}")

    if len(price_data) < config.min_indicator_samples:
        warnings.warn(
            f"Only {len(price_data)} samples; technical indicators use neutral defaults "
            f"below {config.min_indicator_samples}",
            DataQualityWarning
        )

    prices = [s.price for s in price_data]
    returns = calculate_returns(prices)

    # Statistics
    statistical = _statistical_analysis(price_data, prices, returns, config)

    # Risk
    drawdown = drawdown_stats(prices)
    conf_a, conf_b = config.var_confidence_levels
    var_a = value_at_risk(returns, conf_a)
    var_b = value_at_risk(returns, conf_b)
    cvar_a = conditional_value_at_risk(returns, conf_a)
    cvar_b = conditional_value_at_risk(returns, conf_b)
    sharpe = sharpe_ratio(returns, config.risk_free_rate, days)
    semi_var = semi_variance(returns)
    risk_score = overall_risk_score(drawdown.max_drawdown, statistical.annualized_volatility, var_a)

    risk = RiskMetrics(
        volatility=statistical.volatility,
        annualized_volatility=statistical.annualized_volatility,
        max_drawdown=drawdown.max_drawdown,
        max_drawdown_duration=drawdown.max_drawdown_duration,
        current_drawdown=drawdown.current_drawdown,
        average_drawdown=drawdown.average_drawdown,
        var_95=var_a,
        var_99=var_b,
        cvar_95=cvar_a,
        cvar_99=cvar_b,
        sharpe_ratio=sharpe,
        sortino_ratio=sortino_ratio(returns, config.risk_free_rate, days),
        calmar_ratio=calmar_ratio(returns, drawdown.max_drawdown, days),
        downside_deviation=downside_deviation(returns),
        semi_variance=semi_var,
        lower_partial_moment=semi_var,
        tail_ratio=var_b / var_a if var_a != 0 else 0.0,
        tail_risk=cvar_b,
        overall_risk_score=risk_score,
    )

    price_analysis = _price_analysis(prices)
    volume_analysis = _volume_analysis(price_data, statistical.price_volume_correlation)
    indicators = calculate_indicators(price_data, config.min_indicator_samples)

    # Signals
    technical, technical_reasons = technical_signal(
        statistical.linear_regression.slope,
        sharpe,
        drawdown.current_drawdown,
        volume_analysis.volume_ratio,
        price_analysis.price_change_percent_24h,
    )
    fundamental, fundamental_reasons = fundamental_signal(financial_metrics)
    signals = synthesize_signals(
        technical,
        fundamental,
        risk_score,
        reasons=technical_reasons + fundamental_reasons,
        high_risk_threshold=config.high_risk_threshold,
    )

    analysis = QuantitativeAnalysis(
        symbol=symbol,
        name=name or symbol,
        asset_type=asset_type,
        timestamp=as_of or datetime.now(timezone.utc),
        financial_metrics=financial_metrics,
        statistical_analysis=statistical,
        risk_metrics=risk,
        technical_indicators=indicators,
        trading_signals=signals,
        price_analysis=price_analysis,
        volume_analysis=volume_analysis,
        patterns=_patterns(prices, statistical),
    )

    logger.info(
        f"Analyzed {symbol or 'series'}: {len(prices)} samples, "
        f"signal {signals.signal_strength:+.0f} ({signals.action.value}), "
        f"risk score {risk_score:.0f}"
    )

    return analysis


def _statistical_analysis(
    samples: Sequence[PriceSample],
    prices: List[float],
    returns: List[float],
    config: AnalysisConfig
) -> StatisticalAnalysis:
    """Descriptive, correlation, regression and distribution statistics."""
    stats = descriptive_stats(prices)
    skew = skewness(returns)
    kurt = kurtosis(returns)

    # Price/volume correlation only when every sample carries a positive volume
    volumes = _positive_volumes(samples)
    price_volume = correlation(prices, volumes) if len(volumes) == len(prices) else 0.0

    price_change = correlation(returns[:-1], returns[1:]) if len(returns) > 1 else 0.0

    regression = linear_regression(list(range(len(prices))), prices)

    volatility = calculate_volatility(returns, annualized=False)
    annualized = calculate_volatility(returns, annualized=True, periods_per_year=config.trading_days_per_year)

    # The kurtosis sentinel of 3 would otherwise read as fat tails
    if is_constant(returns):
        distribution = DistributionType.UNKNOWN
    else:
        distribution = classify_distribution(skew, kurt, len(returns))

    return StatisticalAnalysis(
        mean=stats.mean,
        median=stats.median,
        mode=stats.mode,
        std_dev=stats.std_dev,
        variance=stats.variance,
        skewness=skew,
        kurtosis=kurt,
        min=stats.min,
        max=stats.max,
        range=stats.range,
        price_volume_correlation=price_volume,
        price_change_correlation=price_change,
        linear_regression=regression,
        autocorrelation=tuple(autocorrelation(returns, config.autocorrelation_lags)),
        trend_strength=abs(regression.slope) / stats.mean if stats.mean != 0 else 0.0,
        volatility=volatility,
        annualized_volatility=annualized,
        realized_volatility=annualized,
        distribution_type=distribution,
        is_normal=distribution == DistributionType.NORMAL,
    )


def _price_analysis(prices: List[float]) -> PriceAnalysis:
    """Current price, 24h change and longer period changes."""
    current = prices[-1]
    previous = prices[-2]

    change_24h = current - previous
    change_pct_24h = (change_24h / previous) * 100 if previous != 0 else 0.0

    periods = calculate_period_changes(prices)

    high = max(prices)
    low = min(prices)

    return PriceAnalysis(
        current_price=current,
        price_change_24h=change_24h,
        price_change_percent_24h=change_pct_24h,
        price_change_percent_7d=periods['7d'],
        price_change_percent_30d=periods['30d'],
        price_change_percent_90d=periods['90d'],
        price_change_percent_1y=periods['1y'],
        all_time_high=high,
        all_time_low=low,
        distance_from_ath=((current - high) / high) * 100 if high != 0 else 0.0,
        distance_from_atl=((current - low) / low) * 100 if low != 0 else 0.0,
    )


def _volume_analysis(samples: Sequence[PriceSample], price_volume_correlation: float) -> VolumeAnalysis:
    """Average volume, latest-vs-average ratio and short-term direction."""
    volumes = _positive_volumes(samples)

    average = sum(volumes) / len(volumes) if volumes else 0.0
    current = volumes[-1] if volumes else 0.0
    ratio = current / average if average > 0 else 1.0

    if len(volumes) >= 3 and volumes[-1] > volumes[-3]:
        trend = VolumeTrend.INCREASING
    elif len(volumes) >= 3 and volumes[-1] < volumes[-3]:
        trend = VolumeTrend.DECREASING
    else:
        trend = VolumeTrend.STABLE

    return VolumeAnalysis(
        average_volume=average,
        volume_ratio=ratio,
        volume_trend=trend,
        volume_price_divergence=price_volume_correlation,
    )


def _patterns(prices: List[float], statistical: StatisticalAnalysis) -> Patterns:
    """Support/resistance levels and the fitted regression trend line."""
    supports, resistances = support_resistance(prices)
    regression = statistical.linear_regression

    trend_line = TrendLine(
        start=regression.intercept,
        end=regression.intercept + regression.slope * (len(prices) - 1),
        slope=regression.slope,
    )

    return Patterns(
        support_levels=tuple(supports),
        resistance_levels=tuple(resistances),
        trend_lines=(trend_line,),
    )


def _positive_volumes(samples: Sequence[PriceSample]) -> List[float]:
    return [float(s.volume) for s in samples if s.volume is not None and s.volume > 0]
