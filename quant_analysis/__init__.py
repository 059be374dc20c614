"""
Quantitative Analysis Engine

Turns a price/volume history into one immutable analysis snapshot:
- Descriptive statistics, skewness, kurtosis, autocorrelation
- Returns, volatility, regression and correlation
- Drawdown, VaR/CVaR, Sharpe/Sortino/Calmar
- Technical indicators (RSI, MACD, Bollinger, Stochastic, ADX)
- Support/resistance levels
- Composite trading signal
"""

from quant_analysis.guardrails import DataQualityError, InsufficientDataError
from quant_analysis.metrics_aggregator import analyze
from quant_analysis.models import FinancialMetrics, PriceSample, QuantitativeAnalysis

__version__ = "0.1.0"

__all__ = [
    'analyze',
    'DataQualityError',
    'FinancialMetrics',
    'InsufficientDataError',
    'PriceSample',
    'QuantitativeAnalysis',
]
