"""
Command Line Entry Point

Usage:
    dealer-insights performance --orders sales.csv --displays displays.json --customer C10001
    dealer-insights momentum --orders sales.csv --displays displays.json --view raw --limit 15
    dealer-insights asset-health --orders sales.csv --displays displays.json --customer C10001
    dealer-insights leaderboard --orders sales.csv --displays displays.json
    dealer-insights insights --orders sales.csv --displays displays.json --customer C10001
"""

import argparse
import json
import sys
from datetime import date
from typing import List, Optional

import structlog

from dealer_insights.config import get_settings
from dealer_insights.config.logging import configure_logging
from dealer_insights.engine import InsightsEngine
from dealer_insights.ingestion import (
    InMemoryDisplaySource,
    InMemoryOrderSource,
    LoadStatus,
    SalesExportLoader,
    SalesFileConfig,
    load_displays,
)
from dealer_insights.models import to_dict

logger = structlog.get_logger(__name__)

CUSTOMER_COMMANDS = {"performance", "asset-health", "insights"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dealer-insights", description="Dealer performance analytics")
    parser.add_argument(
        "command",
        choices=["performance", "momentum", "asset-health", "leaderboard", "insights"],
        help="Report to compute",
    )
    parser.add_argument("--orders", required=True, help="Sales export CSV")
    parser.add_argument("--displays", help="Displays JSON document")
    parser.add_argument("--customer", help="Customer id (required for customer reports)")
    parser.add_argument("--period", default="L12M", help="L12M, L6M, YTD or ALL (default: L12M)")
    parser.add_argument("--as-of", type=date.fromisoformat, help="Reference date YYYY-MM-DD")
    parser.add_argument("--view", default="groups", choices=["groups", "raw"], help="Momentum view")
    parser.add_argument("--limit", type=int, help="Maximum momentum entries in the raw view")
    parser.add_argument("--order-number-column", help="Sales export column holding the order number")
    parser.add_argument("--log-level", help="Override log level")
    return parser


def run(args: argparse.Namespace) -> dict:
    """Load inputs and compute the requested report"""
    orders, result = SalesExportLoader().load(
        SalesFileConfig(file_path=args.orders, order_number_column=args.order_number_column)
    )
    if result.status == LoadStatus.FAILED:
        raise RuntimeError(f"Could not load orders: {result.error_message}")

    displays = []
    if args.displays:
        displays, display_result = load_displays(args.displays)
        if display_result.status == LoadStatus.FAILED:
            raise RuntimeError(f"Could not load displays: {display_result.error_message}")

    engine = InsightsEngine(
        InMemoryOrderSource(orders),
        InMemoryDisplaySource(displays),
        as_of=args.as_of,
    )

    if args.command == "performance":
        report = engine.compute_collection_performance(args.customer, args.period)
    elif args.command == "momentum":
        report = engine.compute_momentum_groups(view=args.view, customer_id=args.customer, limit=args.limit)
    elif args.command == "asset-health":
        report = engine.compute_asset_health(args.customer, args.period)
    elif args.command == "leaderboard":
        report = engine.compute_velocity_leaderboard(args.customer)
    else:
        report = engine.build_customer_insights(args.customer, args.period)
    return to_dict(report)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command in CUSTOMER_COMMANDS and not args.customer:
        parser.error(f"--customer is required for {args.command}")

    configure_logging(log_level=args.log_level)
    logger.info("Running report", command=args.command, app=get_settings().app_name)

    try:
        output = run(args)
    except (RuntimeError, ValueError) as e:
        logger.error("Report failed", command=args.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1

    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
