"""
Guardrails for the analysis engine - validation and safety checks.
Hard failures for unusable input, warnings for suspicious data.
"""

import logging
import math
from dataclasses import fields, is_dataclass
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Sequence

from quant_analysis.models import PriceSample, QuantitativeAnalysis

logger = logging.getLogger(__name__)


class DataQualityError(Exception):
    """Raised when data quality issues require user intervention."""
    pass


class InsufficientDataError(DataQualityError):
    """Raised when there are too few samples to analyze."""
    pass


class DataQualityWarning(UserWarning):
    """Raised when data quality issues should be noted but don't block execution."""
    pass


def validate_price_samples(samples: Sequence[PriceSample], min_samples: int = 2) -> None:
    """
    Validate a price series before analysis.

    Args:
        samples: Price samples, oldest first
        min_samples: Minimum number of samples required

    Raises:
        InsufficientDataError: If fewer than min_samples samples
        DataQualityError: If a price is not finite or dates are out of order
            or cannot be compared (naive mixed with timezone-aware datetimes)
    """
    if len(samples) < min_samples:
        raise InsufficientDataError(
            f"Insufficient data for quantitative analysis: have {len(samples)} "
            f"samples, need at least {min_samples}"
        )

    for i, sample in enumerate(samples):
        if sample.price is None or not math.isfinite(sample.price):
            raise DataQualityError(f"Non-finite price at index {i}: {sample.price}")

    for i in range(1, len(samples)):
        previous, current = samples[i - 1].date, samples[i].date
        if previous is None or current is None:
            continue
        try:
            out_of_order = _precedes(current, previous)
        except TypeError as e:
            raise DataQualityError(
                f"Cannot compare sample dates {previous} and {current}: {e}"
            ) from e
        if out_of_order:
            raise DataQualityError(
                f"Samples must be ordered oldest to newest: {current} follows {previous}"
            )


def _precedes(current, previous) -> bool:
    # Two datetimes compare directly so aware timestamps respect their offsets
    if isinstance(current, datetime) and isinstance(previous, datetime):
        return current < previous
    return _comparable(current) < _comparable(previous)


def _comparable(value):
    # Mixed date/datetime series compare at day resolution first
    if isinstance(value, datetime):
        return (value.date(), value.time())
    if isinstance(value, date):
        return (value, time.min)
    return value


def validate_price_data_integrity(samples: Sequence[PriceSample]) -> List[str]:
    """
    Detect anomalies in a price series.

    Args:
        samples: Price samples, oldest first

    Returns:
        List of integrity warnings
    """
    warnings = []

    # Large daily moves (>20%)
    for i in range(1, len(samples)):
        previous = samples[i - 1].price
        current = samples[i].price
        if previous == 0:
            continue
        change = abs((current / previous) - 1)
        if change > 0.20:
            warnings.append(
                f"Large price movement on {samples[i].date}: "
                f"{change:.1%} change ({previous:.2f} -> {current:.2f})"
            )

    # High/low consistency
    inverted = [
        s for s in samples
        if s.high is not None and s.low is not None and s.high < s.low
    ]
    if inverted:
        warnings.append(f"High below low on {len(inverted)} samples")

    # Zero volume days
    zero_volume = [s.date for s in samples if s.volume is not None and s.volume == 0]
    if zero_volume:
        warnings.append(f"Zero volume detected on {len(zero_volume)} samples")

    return warnings


def validate_numeric_outputs(analysis: QuantitativeAnalysis) -> None:
    """
    Validate that every numeric field of an analysis is finite.

    Args:
        analysis: Finished analysis snapshot

    Raises:
        DataQualityError: If NaN or infinite values found
    """
    def check(value: Any, path: str):
        if value is None or isinstance(value, (bool, str)):
            return

        if isinstance(value, (int, float)):
            if math.isnan(value):
                raise DataQualityError(f"NaN value found in {path}")
            if math.isinf(value):
                raise DataQualityError(f"Infinite value found in {path}")
            return

        if is_dataclass(value):
            for f in fields(value):
                check(getattr(value, f.name), f"{path}.{f.name}")
        elif isinstance(value, (list, tuple)):
            for i, item in enumerate(value):
                check(item, f"{path}[{i}]")

    for f in fields(analysis):
        check(getattr(analysis, f.name), f.name)


def run_all_guardrails(
    samples: Sequence[PriceSample],
    analysis: Optional[QuantitativeAnalysis] = None
) -> Dict[str, Any]:
    """
    Run all guardrail checks and compile results.

    Args:
        samples: Price samples
        analysis: Analysis computed from the samples (optional)

    Returns:
        Dictionary with check results, warnings, errors and recommendations

    Raises:
        DataQualityError: If critical issues found that require user intervention
    """
    results = {
        'checks': {
            'sample_validation': None,
            'price_integrity': None,
            'numeric_validation': None
        },
        'warnings': [],
        'errors': [],
        'recommendations': []
    }

    try:
        # 1. Input validation
        validate_price_samples(samples)
        results['checks']['sample_validation'] = 'passed'

        # 2. Integrity warnings
        integrity_warnings = validate_price_data_integrity(samples)
        results['checks']['price_integrity'] = integrity_warnings
        results['warnings'].extend(integrity_warnings)

        # 3. Output validation
        if analysis is not None:
            validate_numeric_outputs(analysis)
            results['checks']['numeric_validation'] = 'passed'

        results['recommendations'] = _generate_recommendations(samples)

        for warning in results['warnings']:
            logger.warning(warning)

        return results

    except DataQualityError as e:
        results['errors'].append(str(e))
        logger.error(f"Guardrail check failed: {e}")
        raise


def _generate_recommendations(samples: Sequence[PriceSample]) -> List[str]:
    """Generate actionable recommendations based on history length."""
    recommendations = []
    count = len(samples)

    if count < 50:
        recommendations.append(
            "Collect at least 50 samples for technical indicators (RSI, MACD, Bollinger, ADX)"
        )

    if count < 200:
        recommendations.append(
            "Collect 200+ samples so the long-term moving average (SMA200) takes part in trend detection"
        )

    if count < 252:
        recommendations.append(
            "Collect 1+ year of history for the 1y price change"
        )

    if all(s.volume is None or s.volume <= 0 for s in samples):
        recommendations.append(
            "Supply volume data to enable volume analysis and price-volume correlation"
        )

    return recommendations
