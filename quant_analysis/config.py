"""
Analysis configuration.
Defaults follow the daily-bar conventions; overrides come from the environment.
"""

import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class ConfigError(ValueError):
    """Raised when configuration values are invalid."""
    pass


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for a quantitative analysis run."""
    risk_free_rate: float = 0.02
    trading_days_per_year: int = 252
    var_confidence_levels: Tuple[float, float] = (0.95, 0.99)
    min_indicator_samples: int = 50
    autocorrelation_lags: int = 10
    high_risk_threshold: float = 70.0

    def __post_init__(self):
        """Validate values."""
        if self.trading_days_per_year <= 0:
            raise ConfigError("trading_days_per_year must be positive")

        if len(self.var_confidence_levels) != 2:
            raise ConfigError("var_confidence_levels must hold exactly two levels")

        for level in self.var_confidence_levels:
            if not 0 < level < 1:
                raise ConfigError(f"VaR confidence must be in (0, 1), got {level}")

        if self.min_indicator_samples < 2:
            raise ConfigError("min_indicator_samples must be at least 2")

        if self.autocorrelation_lags < 1:
            raise ConfigError("autocorrelation_lags must be at least 1")

        if not 0 <= self.high_risk_threshold <= 100:
            raise ConfigError("high_risk_threshold must be between 0 and 100")


def load_config() -> AnalysisConfig:
    """
    Build configuration from environment variables.

    Environment:
        QUANT_RISK_FREE_RATE: Annual risk-free rate as decimal (default 0.02)
        QUANT_TRADING_DAYS: Trading days per year (default 252)
        QUANT_VAR_CONFIDENCE: Two comma-separated levels (default "0.95,0.99")
        QUANT_MIN_INDICATOR_SAMPLES: History needed for indicators (default 50)
        QUANT_AUTOCORR_LAGS: Autocorrelation lags (default 10)
        QUANT_HIGH_RISK_THRESHOLD: Risk score that triggers a warning (default 70)

    Raises:
        ConfigError: If a value cannot be parsed or is out of range
    """
    try:
        levels = tuple(
            float(part) for part in
            os.getenv('QUANT_VAR_CONFIDENCE', '0.95,0.99').split(',')
            if part.strip()
        )

        return AnalysisConfig(
            risk_free_rate=float(os.getenv('QUANT_RISK_FREE_RATE', '0.02')),
            trading_days_per_year=int(os.getenv('QUANT_TRADING_DAYS', '252')),
            var_confidence_levels=levels,
            min_indicator_samples=int(os.getenv('QUANT_MIN_INDICATOR_SAMPLES', '50')),
            autocorrelation_lags=int(os.getenv('QUANT_AUTOCORR_LAGS', '10')),
            high_risk_threshold=float(os.getenv('QUANT_HIGH_RISK_THRESHOLD', '70')),
        )
    except ValueError as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"Invalid analysis configuration: {e}") from e
