"""
Tests for guardrails and data quality validation.
"""

import dataclasses
from datetime import date, datetime, timedelta, timezone

import pytest

from quant_analysis.config import AnalysisConfig
from quant_analysis.guardrails import (
    validate_numeric_outputs,
    validate_price_data_integrity,
    validate_price_samples,
    run_all_guardrails,
    DataQualityError,
    InsufficientDataError
)
from quant_analysis.metrics_aggregator import analyze
from quant_analysis.models import PriceSample


def _samples(prices, volume=None):
    start = date(2024, 1, 1)
    return [
        PriceSample(date=start + timedelta(days=i), price=p, volume=volume)
        for i, p in enumerate(prices)
    ]


class TestValidatePriceSamples:
    """Tests for validate_price_samples function."""

    def test_valid_series(self):
        """Test ordered finite series passes."""
        validate_price_samples(_samples([100.0, 101.0, 102.0]))

    def test_empty_series(self):
        """Test empty series is insufficient."""
        with pytest.raises(InsufficientDataError, match="have 0 samples"):
            validate_price_samples([])

    def test_single_sample(self):
        """Test one sample is insufficient."""
        with pytest.raises(InsufficientDataError, match="need at least 2"):
            validate_price_samples(_samples([100.0]))

    def test_insufficient_is_data_quality_error(self):
        """Test insufficient data is a subclass of DataQualityError."""
        with pytest.raises(DataQualityError):
            validate_price_samples([])

    @pytest.mark.parametrize("bad", [float('nan'), float('inf'), float('-inf')])
    def test_non_finite_price(self, bad):
        """Test NaN and infinite prices are rejected."""
        with pytest.raises(DataQualityError, match="Non-finite price at index 1"):
            validate_price_samples(_samples([100.0, bad, 102.0]))

    def test_out_of_order_dates(self):
        """Test samples must be ordered oldest to newest."""
        samples = [
            PriceSample(date=date(2024, 1, 2), price=100.0),
            PriceSample(date=date(2024, 1, 1), price=101.0),
        ]

        with pytest.raises(DataQualityError, match="oldest to newest"):
            validate_price_samples(samples)

    def test_mixed_date_and_datetime(self):
        """Test date and datetime samples compare at day resolution."""
        samples = [
            PriceSample(date=date(2024, 1, 1), price=100.0),
            PriceSample(date=datetime(2024, 1, 1, 16, 0), price=100.5),
            PriceSample(date=date(2024, 1, 2), price=101.0),
        ]

        validate_price_samples(samples)

    def test_naive_mixed_with_aware_datetimes(self):
        """Test naive and timezone-aware datetimes are rejected as a data quality problem."""
        samples = [
            PriceSample(date=datetime(2024, 1, 1), price=100.0),
            PriceSample(date=datetime(2024, 1, 2, tzinfo=timezone.utc), price=101.0),
        ]

        with pytest.raises(DataQualityError, match="Cannot compare sample dates"):
            validate_price_samples(samples)

    def test_aware_datetimes_respect_offsets(self):
        """Test aware timestamps are ordered by instant rather than wall clock."""
        plus_five = timezone(timedelta(hours=5))
        samples = [
            PriceSample(date=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc), price=100.0),
            PriceSample(date=datetime(2024, 1, 1, 14, 0, tzinfo=plus_five), price=101.0),
        ]

        # 14:00+05:00 is 09:00 UTC, earlier than the previous sample
        with pytest.raises(DataQualityError, match="oldest to newest"):
            validate_price_samples(samples)


class TestPriceIntegrity:
    """Tests for validate_price_data_integrity function."""

    def test_clean_series(self):
        """Test clean series has no warnings."""
        assert validate_price_data_integrity(_samples([100.0, 101.0, 99.0], volume=1000.0)) == []

    def test_large_move(self):
        """Test moves above 20% are reported."""
        warnings = validate_price_data_integrity(_samples([100.0, 130.0, 131.0]))

        assert len(warnings) == 1
        assert "Large price movement" in warnings[0]
        assert "30.0%" in warnings[0]

    def test_high_below_low(self):
        """Test inverted high/low is reported."""
        samples = [
            PriceSample(date=date(2024, 1, 1), price=100.0, high=99.0, low=101.0),
            PriceSample(date=date(2024, 1, 2), price=100.0, high=101.0, low=99.0),
        ]

        warnings = validate_price_data_integrity(samples)

        assert warnings == ["High below low on 1 samples"]

    def test_zero_volume(self):
        """Test zero-volume samples are reported."""
        warnings = validate_price_data_integrity(_samples([100.0, 100.5], volume=0.0))

        assert warnings == ["Zero volume detected on 2 samples"]


class TestNumericOutputs:
    """Tests for validate_numeric_outputs function."""

    def test_finite_analysis_passes(self):
        """Test a real analysis has only finite numbers."""
        analysis = analyze(_samples([100.0 + i for i in range(60)]), config=AnalysisConfig())

        validate_numeric_outputs(analysis)

    def test_nan_detected(self):
        """Test NaN inside a nested record is reported with its path."""
        analysis = analyze(_samples([100.0 + i for i in range(60)]), config=AnalysisConfig())
        broken_risk = dataclasses.replace(analysis.risk_metrics, sharpe_ratio=float('nan'))
        broken = dataclasses.replace(analysis, risk_metrics=broken_risk)

        with pytest.raises(DataQualityError, match="risk_metrics.sharpe_ratio"):
            validate_numeric_outputs(broken)

    def test_inf_in_tuple_detected(self):
        """Test infinite values inside tuples are reported."""
        analysis = analyze(_samples([100.0 + i for i in range(60)]), config=AnalysisConfig())
        broken_stats = dataclasses.replace(
            analysis.statistical_analysis, autocorrelation=(0.1, float('inf'))
        )
        broken = dataclasses.replace(analysis, statistical_analysis=broken_stats)

        with pytest.raises(DataQualityError, match="Infinite value"):
            validate_numeric_outputs(broken)


class TestRunAllGuardrails:
    """Tests for run_all_guardrails function."""

    def test_all_checks_pass(self):
        """Test results compile checks, warnings and recommendations."""
        samples = _samples([100.0 + i for i in range(60)], volume=1000.0)
        analysis = analyze(samples, config=AnalysisConfig())

        results = run_all_guardrails(samples, analysis)

        assert results['checks']['sample_validation'] == 'passed'
        assert results['checks']['numeric_validation'] == 'passed'
        assert results['warnings'] == []
        assert results['errors'] == []
        # 60 samples: short of SMA200 and 1y history
        assert len(results['recommendations']) == 2

    def test_short_history_recommendations(self):
        """Test short close-only history triggers every recommendation."""
        results = run_all_guardrails(_samples([100.0, 101.0, 102.0]))

        assert results['checks']['numeric_validation'] is None
        assert len(results['recommendations']) == 4

    def test_failure_reraised(self):
        """Test critical issues are raised."""
        with pytest.raises(InsufficientDataError):
            run_all_guardrails(_samples([100.0]))
