"""
Tests for correlation and linear regression utilities.
"""

import pytest
import numpy as np

from quant_analysis.calculations.regression import correlation, linear_regression
from quant_analysis.models import LinearRegression


class TestCorrelation:
    """Tests for correlation function."""

    def test_perfect_positive(self):
        """Test perfectly linear series."""
        assert correlation([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        """Test perfectly inverse series."""
        assert correlation([1, 2, 3, 4], [8, 6, 4, 2]) == pytest.approx(-1.0)

    def test_degenerate_inputs(self):
        """Test empty, mismatched and zero-variance inputs resolve to 0."""
        assert correlation([], []) == 0.0
        assert correlation([1, 2, 3], [1, 2]) == 0.0
        assert correlation([1, 2, 3], [5, 5, 5]) == 0.0
        assert correlation(list(range(20)), [0.01] * 20) == 0.0

    def test_matches_numpy(self):
        """Test agreement with numpy corrcoef."""
        rng = np.random.RandomState(3)
        x = rng.normal(size=50)
        y = x * 0.5 + rng.normal(size=50)

        assert correlation(x.tolist(), y.tolist()) == pytest.approx(np.corrcoef(x, y)[0, 1])


class TestLinearRegression:
    """Tests for linear_regression function."""

    def test_exact_line(self):
        """Test a perfect fit: slope, intercept, r-squared, surrogate p-value."""
        result = linear_regression([0, 1, 2, 3], [1, 3, 5, 7])

        assert result.slope == pytest.approx(2.0)
        assert result.intercept == pytest.approx(1.0)
        assert result.r_squared == pytest.approx(1.0)
        assert result.p_value == 0.0

    def test_flat_series(self):
        """Test a flat series has zero slope and p-value 1."""
        result = linear_regression([0, 1, 2, 3], [5, 5, 5, 5])

        assert result.slope == 0.0
        assert result.intercept == pytest.approx(5.0)
        assert result.r_squared == 0.0
        assert result.p_value == 1.0

    def test_flat_non_representable_series(self):
        """Test a flat series of 0.1 values has exactly zero slope."""
        result = linear_regression(list(range(30)), [0.1] * 30)

        assert result.slope == 0.0
        assert result.p_value == 1.0

    def test_too_few_points(self):
        """Test fewer than 2 points returns (0, 0, 0, 1)."""
        assert linear_regression([1], [1]) == LinearRegression(0.0, 0.0, 0.0, 1.0)
        assert linear_regression([], []) == LinearRegression()

    def test_two_points_p_value(self):
        """Test two points fit exactly but carry no significance."""
        result = linear_regression([0, 1], [10, 12])

        assert result.slope == pytest.approx(2.0)
        assert result.p_value == 1.0

    def test_noisy_p_value_bounds(self):
        """Test surrogate p-value stays in [0, 1] on noisy data."""
        rng = np.random.RandomState(11)
        x = list(range(60))
        y = (rng.normal(size=60) * 5).tolist()

        result = linear_regression(x, y)

        assert 0.0 <= result.p_value <= 1.0
        assert 0.0 <= result.r_squared <= 1.0
