"""
Command-line entry point for a one-off ingestion run.
"""

import argparse
import sys
from typing import List, Optional

from order_ingestion.config import Config
from order_ingestion.core.bisector import ABANDON_POLICIES
from order_ingestion.pipeline import run_ingestion
from order_ingestion.utils.logging_utils import log_error, log_section_complete


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="order-ingestion",
        description="Ingest orders from the order search API into PostgreSQL.",
    )
    parser.add_argument(
        "--start-date",
        help=f"Ingestion epoch in ISO format (default: {Config.INGESTION_START_DATE})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        help=f"Maximum bisection depth (default: {Config.MAX_BISECT_DEPTH})",
    )
    parser.add_argument(
        "--abandon-policy",
        choices=ABANDON_POLICIES,
        type=str.upper,
        help="What to do with a window that cannot be drained (default: LOG)",
    )
    parser.add_argument(
        "--init-schema",
        action="store_true",
        help="Create the orders and products tables if missing",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Print the stored orders after ingesting",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        start = Config.get_start_datetime(args.start_date) if args.start_date else None
        stats = run_ingestion(
            start=start,
            max_depth=args.max_depth,
            abandon_policy=args.abandon_policy,
            init_schema=args.init_schema,
            report=args.report,
        )
    except Exception as e:
        log_error("Order Ingestion CLI", str(e))
        return 1

    log_section_complete("Data fetching", f"{stats.orders_ingested} orders ingested")
    return 0


if __name__ == "__main__":
    sys.exit(main())
