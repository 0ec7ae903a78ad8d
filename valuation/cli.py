#!/usr/bin/env python3
"""
CLI for equity estimates and index coverage.

Usage:
    python -m valuation.cli estimate --region Brampton --type Detached \\
        --year 1993 --month 6 --price 150000
    python -m valuation.cli coverage --region Pickering --type Detached
    python -m valuation.cli options

Index data is read from HPI_DATA_FILE (or DATA_DIR/market_hpi.json).
Without it, every estimate uses historic averages.
"""

import argparse
import json
import sys
from typing import List, Optional

from utils.config import Config, configure_logging
from utils.formatting import format_currency, format_percent

from .bridge import EquityBridge
from .cache import BenchmarkCache
from .estimator import EquityEstimator
from .index_store import InMemoryIndexStore
from .models import EstimationError
from .regions import KNOWN_REGIONS, PROPERTY_CATEGORIES, resolve_lookup_keys
from .validation import validate_estimate_request


def build_estimator(config: Config, store: InMemoryIndexStore = None) -> EquityEstimator:
    """Composition root for the CLI."""
    index_store = store if store is not None else InMemoryIndexStore.from_file(config.hpi_data_path)
    bridge = EquityBridge(index_store, benchmark_cache=BenchmarkCache())
    return EquityEstimator(bridge)


def cmd_estimate(args, estimator: EquityEstimator = None):
    """Estimate current value, mortgage position and net equity."""
    request = {
        "region": args.region,
        "property_type": args.type,
        "purchase_year": args.year,
        "purchase_month": args.month,
        "purchase_price": args.price,
        "down_payment_amount": args.down_payment,
        "down_payment_percent": args.down_payment_percent,
        "interest_rate": args.rate,
        "amortization_years": args.amortization,
    }

    validation = validate_estimate_request(request)
    if not validation.valid:
        for field_name, reason in validation.errors.items():
            print(f"Error: {field_name}: {reason}", file=sys.stderr)
        return 1

    estimator = estimator or build_estimator(Config.load())
    result = estimator.estimate_request(request)

    if isinstance(result, EstimationError):
        print(f"Error: {result.message} ({result.code})", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    valuation = result.appreciation
    record = result.record
    print(f"{record.region} {record.property_category}, purchased {record.year_month}")
    print(f"  Data source:        {valuation.data_source}")
    if valuation.bridge_note:
        print(f"  Note:               {valuation.bridge_note}")
    print(f"  Appreciation:       x{valuation.appreciation_factor:.3f} ({format_percent(valuation.roi_percent)})")
    print(f"  Estimated value:    {format_currency(valuation.estimated_value)}")
    print(f"  Equity gained:      {format_currency(valuation.equity_gained)}")
    for scenario in valuation.scenarios:
        print(f"  {scenario.label + ':':<20}{format_currency(scenario.value)}")
    print(f"  Remaining mortgage: {format_currency(result.mortgage.remaining_balance)}")
    print(f"  Net equity:         {format_currency(result.net_equity)}")
    if valuation.warnings:
        print(f"  Warnings:           {', '.join(valuation.warnings)}")
    return 0


def cmd_coverage(args, store: InMemoryIndexStore = None):
    """Show the months of index data available for a region and category."""
    index_store = store if store is not None else InMemoryIndexStore.from_file(
        Config.load().hpi_data_path
    )
    date_range = index_store.get_date_range(resolve_lookup_keys(args.region), args.type)

    if date_range is None:
        print(f"No index data for {args.region} / {args.type}")
        return 1

    earliest, latest = date_range
    print(f"{args.region} / {args.type}: {earliest} to {latest}")
    return 0


def cmd_options(args):
    """List selectable regions and property types."""
    print("Regions:")
    for region in KNOWN_REGIONS:
        print(f"  {region}")
    print("Property types:")
    for category in PROPERTY_CATEGORIES:
        print(f"  {category}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="GTA Equity Engine - home value and equity estimates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m valuation.cli estimate --region Brampton --type Detached --year 1993 --month 6 --price 150000
    python -m valuation.cli coverage --region Pickering --type Detached
    python -m valuation.cli options
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Estimate command
    est_parser = subparsers.add_parser("estimate", help="Estimate value and equity for a purchase")
    est_parser.add_argument("--region", required=True, help="GTA region, e.g. Brampton")
    est_parser.add_argument("--type", required=True, help="Property type, e.g. Detached")
    est_parser.add_argument("--year", type=int, required=True, help="Purchase year")
    est_parser.add_argument("--month", type=int, required=True, help="Purchase month (1-12)")
    est_parser.add_argument("--price", type=float, required=True, help="Purchase price")
    down = est_parser.add_mutually_exclusive_group()
    down.add_argument("--down-payment", type=float, help="Down payment amount")
    down.add_argument("--down-payment-percent", type=float, help="Down payment percent")
    est_parser.add_argument("--rate", type=float, help="Mortgage rate (default: historical rate)")
    est_parser.add_argument("--amortization", type=int, help="Amortization years (15, 20, 25, 30)")
    est_parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    est_parser.set_defaults(func=cmd_estimate)

    # Coverage command
    cov_parser = subparsers.add_parser("coverage", help="Show index data coverage")
    cov_parser.add_argument("--region", required=True)
    cov_parser.add_argument("--type", required=True)
    cov_parser.set_defaults(func=cmd_coverage)

    # Options command
    opt_parser = subparsers.add_parser("options", help="List regions and property types")
    opt_parser.set_defaults(func=cmd_options)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    configure_logging(Config.load())
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
