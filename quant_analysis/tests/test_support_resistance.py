"""
Tests for support and resistance detection.
"""

import math

from quant_analysis.calculations.support_resistance import support_resistance, MAX_LEVELS


def w_shape():
    """Down, up, down, up: troughs at 80 and 70, middle peak at 100 (41 samples)."""
    return (
        [100.0 - 2 * i for i in range(11)]
        + [80.0 + 2 * i for i in range(1, 11)]
        + [100.0 - 3 * i for i in range(1, 11)]
        + [70.0 + 3 * i for i in range(1, 11)]
    )


class TestSupportResistance:
    """Tests for support_resistance function."""

    def test_w_shape(self):
        """Test W-shaped series yields two supports and one resistance."""
        supports, resistances = support_resistance(w_shape())

        assert supports == [70.0, 80.0]
        assert resistances == [100.0]

    def test_too_short(self):
        """Test fewer than 20 samples yields no levels."""
        assert support_resistance([100.0 + (i % 3) for i in range(19)]) == ([], [])

    def test_levels_ordered_and_capped(self):
        """Test supports ascend, resistances descend, at most 5 of each."""
        prices = [100 + 10 * math.sin(i / 2) + i * 0.01 for i in range(200)]

        supports, resistances = support_resistance(prices)

        assert len(supports) <= MAX_LEVELS
        assert len(resistances) <= MAX_LEVELS
        assert supports == sorted(supports)
        assert resistances == sorted(resistances, reverse=True)

    def test_levels_deduplicated(self):
        """Test repeated equal extremes appear once."""
        prices = [100.0, 90.0, 100.0, 90.0] * 10

        supports, resistances = support_resistance(prices)

        assert supports == [90.0]
        assert resistances == [100.0]

    def test_monotonic_series_no_levels(self):
        """Test a strictly rising series has no interior extremes."""
        assert support_resistance([float(i) for i in range(50)]) == ([], [])
