"""
Typed result model for the quantitative analysis engine.
Every record is immutable; a new snapshot is built for each analysis.
"""

import re
from dataclasses import dataclass, field, fields, asdict
from datetime import date, datetime
from enum import Enum
from typing import Dict, Any, Optional, Tuple, Union


class AssetType(str, Enum):
    """Kind of asset being analyzed."""
    STOCK = 'stock'
    CRYPTO = 'crypto'


class Trend(str, Enum):
    """Moving-average trend classification."""
    BULLISH = 'bullish'
    BEARISH = 'bearish'
    NEUTRAL = 'neutral'


class Recommendation(str, Enum):
    """Indicator vote outcome."""
    BUY = 'buy'
    SELL = 'sell'
    HOLD = 'hold'


class DistributionType(str, Enum):
    """Shape of the return distribution."""
    NORMAL = 'normal'
    SKEWED = 'skewed'
    FAT_TAILED = 'fat-tailed'
    UNKNOWN = 'unknown'


class VolumeTrend(str, Enum):
    """Direction of recent traded volume."""
    INCREASING = 'increasing'
    DECREASING = 'decreasing'
    STABLE = 'stable'


class TimeHorizon(str, Enum):
    """Holding horizon a signal is meant for."""
    SHORT = 'short'
    MEDIUM = 'medium'
    LONG = 'long'


@dataclass(frozen=True)
class PriceSample:
    """One observation of the price series (oldest first)."""
    date: Union[datetime, date]
    price: float
    high: Optional[float] = None
    low: Optional[float] = None
    volume: Optional[float] = None


@dataclass(frozen=True)
class FinancialMetrics:
    """Externally supplied fundamentals. Every field is optional."""
    # Valuation
    pe_ratio: Optional[float] = None
    eps: Optional[float] = None
    price_to_book: Optional[float] = None
    price_to_sales: Optional[float] = None
    ev_to_ebitda: Optional[float] = None

    # Profitability
    profit_margin: Optional[float] = None
    operating_margin: Optional[float] = None
    roa: Optional[float] = None
    roe: Optional[float] = None
    roic: Optional[float] = None

    # Growth
    revenue_growth: Optional[float] = None
    earnings_growth: Optional[float] = None
    revenue_growth_yoy: Optional[float] = None
    earnings_growth_yoy: Optional[float] = None

    # Financial health
    debt_to_equity: Optional[float] = None
    current_ratio: Optional[float] = None
    quick_ratio: Optional[float] = None
    debt_to_assets: Optional[float] = None

    # Market
    market_cap: Optional[float] = None
    enterprise_value: Optional[float] = None
    shares_outstanding: Optional[float] = None
    dividend_yield: Optional[float] = None

    # Crypto
    total_supply: Optional[float] = None
    circulating_supply: Optional[float] = None
    max_supply: Optional[float] = None
    network_hash_rate: Optional[float] = None
    active_addresses: Optional[float] = None
    transaction_volume: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FinancialMetrics':
        """
        Build from a provider dictionary.

        Accepts snake_case or camelCase keys (``peRatio``, ``revenueGrowthYoY``).
        Unknown keys and None values are ignored.
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _snake_case(key)
            if name in known and value is not None:
                values[name] = float(value)
        return cls(**values)

    def is_empty(self) -> bool:
        """True when no field carries a value."""
        return all(getattr(self, f.name) is None for f in fields(self))


def _snake_case(key: str) -> str:
    # revenueGrowthYoY -> revenue_growth_yoy, peRatio -> pe_ratio
    key = re.sub(r'YoY$', 'Yoy', key)
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


@dataclass(frozen=True)
class DescriptiveStats:
    mean: float = 0.0
    median: float = 0.0
    mode: float = 0.0
    std_dev: float = 0.0
    variance: float = 0.0
    min: float = 0.0
    max: float = 0.0
    range: float = 0.0


@dataclass(frozen=True)
class LinearRegression:
    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = 0.0
    # Approximation derived from the t-statistic, not a rigorous test
    p_value: float = 1.0


@dataclass(frozen=True)
class DrawdownStats:
    max_drawdown: float = 0.0
    max_drawdown_duration: int = 0
    current_drawdown: float = 0.0
    average_drawdown: float = 0.0


@dataclass(frozen=True)
class StatisticalAnalysis:
    """Descriptive, correlation, regression and distribution analysis."""
    mean: float
    median: float
    mode: float
    std_dev: float
    variance: float
    skewness: float
    kurtosis: float
    min: float
    max: float
    range: float
    price_volume_correlation: float
    price_change_correlation: float
    linear_regression: LinearRegression
    autocorrelation: Tuple[float, ...]
    trend_strength: float
    volatility: float
    annualized_volatility: float
    realized_volatility: float
    distribution_type: DistributionType
    is_normal: bool


@dataclass(frozen=True)
class RiskMetrics:
    """Volatility, drawdown, tail-risk and risk-adjusted return metrics."""
    volatility: float
    annualized_volatility: float
    max_drawdown: float
    max_drawdown_duration: int
    current_drawdown: float
    average_drawdown: float
    var_95: float
    var_99: float
    cvar_95: float
    cvar_99: float
    sharpe_ratio: float
    sortino_ratio: float
    calmar_ratio: float
    downside_deviation: float
    semi_variance: float
    lower_partial_moment: float
    tail_ratio: float
    tail_risk: float
    overall_risk_score: float


@dataclass(frozen=True)
class MACD:
    value: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0


@dataclass(frozen=True)
class BollingerBands:
    upper: float = 0.0
    middle: float = 0.0
    lower: float = 0.0


@dataclass(frozen=True)
class Stochastic:
    k: float = 50.0
    d: float = 50.0


@dataclass(frozen=True)
class TechnicalIndicators:
    rsi: float
    macd: MACD
    sma20: float
    sma50: float
    sma200: float
    bollinger: BollingerBands
    stochastic: Stochastic
    adx: float
    trend: Trend
    recommendation: Recommendation
    confidence: float


@dataclass(frozen=True)
class TradingSignals:
    """Composite signal; exactly one of buy/sell/hold is set."""
    signal_strength: float
    technical_signal: float
    fundamental_signal: float
    sentiment_signal: float
    risk_signal: float
    confidence: float
    buy_signal: bool
    sell_signal: bool
    hold_signal: bool
    action: Recommendation
    reasons: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    time_horizon: TimeHorizon = TimeHorizon.MEDIUM


@dataclass(frozen=True)
class PriceAnalysis:
    """Current price and period-over-period changes (percentages as floats)."""
    current_price: float
    price_change_24h: float
    price_change_percent_24h: float
    price_change_percent_7d: Optional[float]
    price_change_percent_30d: Optional[float]
    price_change_percent_90d: Optional[float]
    price_change_percent_1y: Optional[float]
    all_time_high: float
    all_time_low: float
    distance_from_ath: float
    distance_from_atl: float


@dataclass(frozen=True)
class VolumeAnalysis:
    average_volume: float
    volume_ratio: float
    volume_trend: VolumeTrend
    volume_price_divergence: float


@dataclass(frozen=True)
class TrendLine:
    start: float
    end: float
    slope: float


@dataclass(frozen=True)
class Patterns:
    support_levels: Tuple[float, ...] = ()
    resistance_levels: Tuple[float, ...] = ()
    trend_lines: Tuple[TrendLine, ...] = ()


@dataclass(frozen=True)
class QuantitativeAnalysis:
    """Root snapshot produced by a single analysis request."""
    symbol: str
    name: str
    asset_type: AssetType
    timestamp: datetime
    financial_metrics: Optional[FinancialMetrics]
    statistical_analysis: StatisticalAnalysis
    risk_metrics: RiskMetrics
    technical_indicators: TechnicalIndicators
    trading_signals: TradingSignals
    price_analysis: PriceAnalysis
    volume_analysis: VolumeAnalysis
    patterns: Patterns = field(default_factory=Patterns)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dictionary (enums as values, timestamps as ISO strings)."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
