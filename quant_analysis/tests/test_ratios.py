"""
Tests for risk-adjusted return ratios.
"""

import math

import pytest
import numpy as np

from quant_analysis.calculations.ratios import (
    annualized_mean_return,
    calmar_ratio,
    sharpe_ratio,
    sortino_ratio,
    NO_DOWNSIDE_SORTINO
)


RETURNS = [0.01, -0.01, 0.02, 0.0]


class TestSharpeRatio:
    """Tests for sharpe_ratio function."""

    def test_sharpe_formula(self):
        """Test Sharpe against the annualized formula."""
        mean = np.mean(RETURNS) * 252
        vol = np.std(RETURNS, ddof=0) * math.sqrt(252)

        assert sharpe_ratio(RETURNS, 0.02) == pytest.approx((mean - 0.02) / vol)

    def test_sharpe_zero_volatility(self):
        """Test zero volatility resolves to 0."""
        assert sharpe_ratio([0.0] * 20) == 0.0

    def test_sharpe_constant_non_zero_returns(self):
        """Test constant positive returns fall back to 0 rather than exploding."""
        assert sharpe_ratio([0.01] * 20) == 0.0
        assert sharpe_ratio([0.005] * 30, 0.02) == 0.0

    def test_sharpe_too_few_returns(self):
        """Test fewer than 2 returns resolve to 0."""
        assert sharpe_ratio([0.05]) == 0.0

    def test_sharpe_risk_free_rate(self):
        """Test a higher risk-free rate lowers the ratio."""
        assert sharpe_ratio(RETURNS, 0.05) < sharpe_ratio(RETURNS, 0.0)


class TestSortinoRatio:
    """Tests for sortino_ratio function."""

    def test_sortino_formula(self):
        """Test Sortino over the annualized downside deviation."""
        mean = np.mean(RETURNS) * 252
        downside = math.sqrt(0.01 ** 2) * math.sqrt(252)

        assert sortino_ratio(RETURNS, 0.02) == pytest.approx((mean - 0.02) / downside)

    def test_sortino_no_downside_sentinel(self):
        """Test no negative returns resolves to the 100 sentinel."""
        assert sortino_ratio([0.01, 0.02, 0.0]) == NO_DOWNSIDE_SORTINO == 100.0

    def test_sortino_too_few_returns(self):
        """Test fewer than 2 returns resolve to 0."""
        assert sortino_ratio([-0.01]) == 0.0


class TestCalmarRatio:
    """Tests for calmar_ratio function."""

    def test_calmar_formula(self):
        """Test annualized mean return over max drawdown."""
        assert calmar_ratio(RETURNS, 0.25) == pytest.approx(0.005 * 252 / 0.25)

    def test_calmar_no_drawdown(self):
        """Test zero max drawdown resolves to 0."""
        assert calmar_ratio(RETURNS, 0.0) == 0.0

    def test_annualized_mean_return(self):
        """Test annualized mean and empty input."""
        assert annualized_mean_return(RETURNS) == pytest.approx(1.26)
        assert annualized_mean_return([]) == 0.0
