#!/usr/bin/env python3
"""
CLI tool for analyzing a price history file.
Usage: python -m quant_analysis.cli PRICES_CSV --symbol SYMBOL [options]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from quant_analysis.analysis_job import analyze_frame
from quant_analysis.models import FinancialMetrics


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Run quantitative analysis on a price history CSV',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m quant_analysis.cli prices.csv --symbol AAPL
  python -m quant_analysis.cli btc.csv --symbol BTC --asset-type crypto
  python -m quant_analysis.cli prices.csv --symbol MSFT --fundamentals msft.json --output out/MSFT.json
        """
    )

    parser.add_argument('prices', help='CSV file with date and price (or close) columns')
    parser.add_argument('--symbol', required=True, help='Asset symbol (e.g., AAPL)')
    parser.add_argument('--name', help='Display name (default: symbol)')
    parser.add_argument('--asset-type',
                        choices=['stock', 'crypto'],
                        default='stock',
                        help='Asset type (default: stock)')
    parser.add_argument('--fundamentals',
                        help='JSON file with financial metrics (camelCase or snake_case keys)')
    parser.add_argument('--output',
                        help='Output JSON file path (default: print to stdout)')
    parser.add_argument('--quiet', '-q',
                        action='store_true',
                        help='Minimal output (just success/failure)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    prices_path = Path(args.prices)
    if not prices_path.exists():
        print(f"ERROR: Price file not found: {prices_path}", file=sys.stderr)
        return 1

    try:
        price_df = pd.read_csv(prices_path)
    except Exception as e:
        print(f"ERROR: Could not read {prices_path}: {e}", file=sys.stderr)
        return 1

    financial_metrics = None
    if args.fundamentals:
        try:
            with open(args.fundamentals, 'r') as f:
                financial_metrics = FinancialMetrics.from_dict(json.load(f))
        except (OSError, ValueError, TypeError) as e:
            print(f"ERROR: Could not read fundamentals: {e}", file=sys.stderr)
            return 1

    result = analyze_frame(
        price_df,
        symbol=args.symbol,
        output_path=Path(args.output) if args.output else None,
        financial_metrics=financial_metrics,
        asset_type=args.asset_type,
        name=args.name
    )

    if result['status'] != 'completed':
        print(f"ERROR: Analysis failed for {args.symbol}: {result['error_message']}", file=sys.stderr)
        return 1

    if args.output is None:
        print(json.dumps(result['analysis'], indent=2, default=str))
    elif args.quiet:
        print(f"{args.symbol} analysis complete: {result['output_path']}")
    else:
        _show_quick_summary(result)

    return 0


def _show_quick_summary(result: dict):
    """Show quick summary of the analysis."""
    analysis = result['analysis']
    price = analysis['price_analysis']
    risk = analysis['risk_metrics']
    signals = analysis['trading_signals']
    indicators = analysis['technical_indicators']

    print(f"Analysis completed for {result['symbol']}")
    print(f"   Samples: {result['price_data_points']}")
    print(f"   Current Price: {price['current_price']:.2f} ({price['price_change_percent_24h']:+.2f}% 24h)")
    print(f"   Volatility (annualized): {risk['annualized_volatility'] * 100:.1f}%")
    print(f"   Max Drawdown: {risk['max_drawdown'] * 100:.1f}%")
    print(f"   Sharpe: {risk['sharpe_ratio']:.2f}")
    print(f"   RSI: {indicators['rsi']:.1f} | Trend: {indicators['trend']}")
    print(f"   Signal: {signals['signal_strength']:+.0f} -> {signals['action']} "
          f"(confidence {signals['confidence']:.0f})")
    print(f"   Risk Score: {risk['overall_risk_score']:.0f}/100")
    for warning in signals['warnings']:
        print(f"   WARNING: {warning}")
    print(f"   Results saved to: {result['output_path']}")


if __name__ == '__main__':
    sys.exit(main())
