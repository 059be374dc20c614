"""
Tests for volatility calculation utilities.
Uses synthetic returns with known standard deviation.
"""

import math

import pytest
import numpy as np

from quant_analysis.calculations.volatility import (
    calculate_volatility,
    downside_deviation,
    semi_variance,
    TRADING_DAYS_PER_YEAR
)


class TestCalculateVolatility:
    """Tests for calculate_volatility function."""

    def test_known_std(self):
        """Test population std on alternating returns."""
        returns = [0.01, -0.01] * 10

        daily = calculate_volatility(returns, annualized=False)
        annual = calculate_volatility(returns, annualized=True)

        assert daily == pytest.approx(0.01)
        assert annual == pytest.approx(0.01 * math.sqrt(252))

    def test_constant_returns_zero(self):
        """Test constant returns have zero volatility."""
        assert calculate_volatility([0.005] * 30) == 0.0

    def test_constant_non_representable_returns_exact_zero(self):
        """Test constant returns with rounding error in the mean are exactly 0."""
        assert calculate_volatility([0.01] * 20) == 0.0
        assert calculate_volatility([0.01] * 20, annualized=False) == 0.0

    def test_fewer_than_two_returns(self):
        """Test fewer than 2 returns resolve to 0."""
        assert calculate_volatility([]) == 0.0
        assert calculate_volatility([0.05]) == 0.0

    def test_matches_numpy_population_std(self):
        """Test agreement with numpy population std on random returns."""
        rng = np.random.RandomState(42)
        returns = rng.normal(0.001, 0.02, 250).tolist()

        expected = np.std(returns, ddof=0) * np.sqrt(TRADING_DAYS_PER_YEAR)

        assert calculate_volatility(returns) == pytest.approx(expected)

    def test_custom_periods_per_year(self):
        """Test annualization factor is configurable."""
        returns = [0.01, -0.01] * 10

        assert calculate_volatility(returns, periods_per_year=365) == pytest.approx(0.01 * math.sqrt(365))


class TestDownsideRisk:
    """Tests for semi_variance and downside_deviation."""

    def test_semi_variance(self):
        """Test mean of squared negative returns."""
        returns = [0.01, -0.02, 0.03, -0.04]

        assert semi_variance(returns) == pytest.approx((0.0004 + 0.0016) / 2)
        assert downside_deviation(returns) == pytest.approx(math.sqrt(0.001))

    def test_no_negative_returns(self):
        """Test zero downside when every return is non-negative."""
        assert semi_variance([0.01, 0.0, 0.02]) == 0.0
        assert downside_deviation([0.01, 0.0, 0.02]) == 0.0
