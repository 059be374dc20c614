"""
Orchestrated analysis job - DataFrame to analysis JSON.
Converts tabular history into PriceSamples, runs the analysis, persists JSON.
"""

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from quant_analysis.config import AnalysisConfig
from quant_analysis.metrics_aggregator import analyze
from quant_analysis.models import FinancialMetrics, PriceSample

logger = logging.getLogger(__name__)


class AnalysisJobError(Exception):
    """Raised when analysis job input cannot be interpreted."""
    pass


def samples_from_frame(price_df: pd.DataFrame, price_column: Optional[str] = None) -> List[PriceSample]:
    """
    Convert a price DataFrame into ordered PriceSamples.

    - dates are parsed and sorted oldest first
    - duplicate dates keep the last row (latest correction)
    - the price column is `price_column`, else 'price', else 'close'
    - optional 'high', 'low', 'volume' columns are carried; NaN becomes None

    Args:
        price_df: DataFrame with a 'date' column and a price column
        price_column: Explicit price column name

    Returns:
        List of PriceSample, oldest first

    Raises:
        AnalysisJobError: If required columns are missing
    """
    if 'date' not in price_df.columns:
        raise AnalysisJobError("Price data must have a 'date' column")

    if price_column is None:
        if 'price' in price_df.columns:
            price_column = 'price'
        elif 'close' in price_df.columns:
            price_column = 'close'
        else:
            raise AnalysisJobError("Price data must have a 'price' or 'close' column")
    elif price_column not in price_df.columns:
        raise AnalysisJobError(f"Price column '{price_column}' not found")

    df = price_df.copy()
    df['date'] = pd.to_datetime(df['date'])
    df = df.drop_duplicates(subset='date', keep='last')
    df = df.sort_values('date').reset_index(drop=True)

    samples = []
    for row in df.to_dict('records'):
        samples.append(PriceSample(
            date=row['date'].to_pydatetime(),
            price=float(row[price_column]),
            high=_optional_float(row.get('high')),
            low=_optional_float(row.get('low')),
            volume=_optional_float(row.get('volume')),
        ))

    return samples


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    return None if math.isnan(value) else value


def analyze_frame(
    price_df: pd.DataFrame,
    symbol: str,
    output_path: Optional[Path] = None,
    financial_metrics: Optional[FinancialMetrics] = None,
    asset_type: str = 'stock',
    name: Optional[str] = None,
    config: Optional[AnalysisConfig] = None
) -> Dict[str, Any]:
    """
    Run complete analysis for one symbol and optionally save the JSON snapshot.

    Args:
        price_df: Price history for the symbol
        symbol: Asset symbol
        output_path: Path to save the analysis JSON (optional)
        financial_metrics: Fundamentals (optional)
        asset_type: "stock" or "crypto"
        name: Display name
        config: Analysis configuration

    Returns:
        Dictionary with job status and summary; failures are reported in the
        dictionary rather than raised
    """
    start_time = datetime.now()

    try:
        samples = samples_from_frame(price_df)

        analysis = analyze(
            samples,
            financial_metrics,
            asset_type,
            symbol=symbol,
            name=name,
            config=config
        )

        payload = analysis.to_dict()

        if output_path is not None:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w') as f:
                json.dump(payload, f, indent=2, default=str)

        signals = analysis.trading_signals

        return {
            'symbol': symbol,
            'status': 'completed',
            'output_path': str(output_path) if output_path is not None else None,
            'price_data_points': len(samples),
            'signal_strength': signals.signal_strength,
            'action': signals.action.value,
            'overall_risk_score': analysis.risk_metrics.overall_risk_score,
            'analysis': payload,
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }

    except Exception as e:
        logger.error(f"Analysis failed for {symbol}: {e}")
        return {
            'symbol': symbol,
            'status': 'failed',
            'error_message': str(e),
            'output_path': None,
            'price_data_points': len(price_df),
            'duration_seconds': (datetime.now() - start_time).total_seconds()
        }


def batch_analyze(
    frames: Mapping[str, pd.DataFrame],
    output_dir: Optional[Path] = None,
    financial_metrics: Optional[Mapping[str, FinancialMetrics]] = None,
    asset_type: str = 'stock',
    config: Optional[AnalysisConfig] = None
) -> Dict[str, Any]:
    """
    Run analysis for multiple symbols.

    Args:
        frames: Mapping of symbol to price DataFrame
        output_dir: Directory to save one JSON file per symbol (optional)
        financial_metrics: Mapping of symbol to fundamentals (optional)
        asset_type: Asset type shared by all symbols
        config: Analysis configuration

    Returns:
        Summary of batch analysis results
    """
    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

    financial_metrics = financial_metrics or {}
    results = []
    start_time = datetime.now()

    for symbol, price_df in frames.items():
        output_path = output_dir / f'{symbol}.json' if output_dir is not None else None

        result = analyze_frame(
            price_df,
            symbol=symbol,
            output_path=output_path,
            financial_metrics=financial_metrics.get(symbol),
            asset_type=asset_type,
            config=config
        )

        results.append(result)

    completed = [r for r in results if r['status'] == 'completed']
    failed = [r for r in results if r['status'] == 'failed']

    logger.info(f"Batch analysis finished: {len(completed)} completed, {len(failed)} failed")

    return {
        'total_symbols': len(results),
        'completed': len(completed),
        'failed': len(failed),
        'success_rate': len(completed) / len(results) if results else 0,
        'duration_seconds': (datetime.now() - start_time).total_seconds(),
        'results': results
    }
