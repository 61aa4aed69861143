#!/usr/bin/env python3
"""
Print a weighted average cost financial summary.

Reads stock history either from a CSV export or from the database and
prints opening inventory, period movement and ending inventory for an
inclusive date range.

Usage:
    python3 scripts/wac_summary.py --csv history.csv --from 2024-01-01 --to 2024-01-31
    python3 scripts/wac_summary.py --database-url postgresql://... \\
        --from 2024-01-01 --to 2024-03-31 --supplier acme --json

Exit codes:
    0  summary printed
    1  data or database error
    2  invalid arguments or request
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

W = 60

_ROWS = (
    ("Opening inventory", "opening_qty", "opening_value"),
    ("Purchases (net)", "purchases_qty", "purchases_cost"),
    ("Customer returns", "returns_in_qty", "returns_in_cost"),
    ("Cost of goods sold", "cogs_qty", "cogs_cost"),
    ("Write-offs", "write_off_qty", "write_off_cost"),
    ("Ending inventory", "ending_qty", "ending_value"),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Weighted average cost financial summary")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", type=Path, help="Stock history CSV export")
    source.add_argument("--database-url", help="Database URL holding stock_history")
    parser.add_argument("--from", dest="from_date", required=True, help="First day (YYYY-MM-DD)")
    parser.add_argument("--to", dest="to_date", required=True, help="Last day (YYYY-MM-DD)")
    parser.add_argument("--supplier", default=None, help="Restrict to one supplier")
    parser.add_argument("--config", type=Path, default=None, help="Analytics YAML override")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    parser.add_argument("--verbose", action="store_true", help="Emit structured logs to stderr")
    return parser


def print_summary(data: dict, summary) -> None:
    print("=" * W)
    print(f"  {data['method']} SUMMARY  {data['from_date']} .. {data['to_date']}")
    print("=" * W)
    print(f"  {'':<24}{'Qty':>12}{'Value':>20}")
    print("-" * W)
    for label, qty_key, value_key in _ROWS:
        print(f"  {label:<24}{data[qty_key]:>12}{data[value_key]:>20}")
    print("-" * W)
    if summary.has_anomalies:
        anomalies = summary.anomalies
        print(f"  WARNING: {len(anomalies)} issue(s) overdrew stock and were clamped")
        for a in anomalies:
            print(
                f"    {a.occurred_at.isoformat()}  {a.item_id}  {a.reason.value}"
                f"  requested={a.requested} available={a.available}"
            )
    print()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from inventory_config import get_active_config
    from inventory_kernel.exceptions import InvalidRequestError, InventoryKernelError
    from inventory_kernel.logging_config import configure_logging
    from inventory_services import CsvStockEventSource, FinancialAnalyticsService

    if args.verbose:
        configure_logging(level=logging.DEBUG)
    else:
        logging.disable(logging.WARNING)

    try:
        config = get_active_config(args.config)
    except (OSError, KeyError, ValueError, yaml.YAMLError) as exc:
        print(f"  ERROR: Invalid configuration: {exc}", file=sys.stderr)
        return 2

    session = None
    if args.csv is not None:
        source = CsvStockEventSource(args.csv)
        try:
            source.check_columns()
        except (InventoryKernelError, OSError) as exc:
            code = getattr(exc, "code", type(exc).__name__)
            print(f"  ERROR [{code}]: {exc}", file=sys.stderr)
            return 1
    else:
        from inventory_kernel.db import get_session, init_engine_from_url
        from inventory_kernel.selectors import StockEventSelector

        try:
            init_engine_from_url(args.database_url, echo=False)
        except Exception as exc:
            print(f"  ERROR: Could not connect: {exc}", file=sys.stderr)
            return 1
        session = get_session()
        source = StockEventSelector(session)

    try:
        service = FinancialAnalyticsService(source, config=config)
        summary = service.get_financial_summary_wac(args.from_date, args.to_date, args.supplier)
    except InvalidRequestError as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 2
    except (InventoryKernelError, OSError) as exc:
        code = getattr(exc, "code", type(exc).__name__)
        print(f"  ERROR [{code}]: {exc}", file=sys.stderr)
        return 1
    finally:
        if session is not None:
            session.close()

    data = summary.to_dict(service.display_scale)
    if args.json:
        print(json.dumps(data, indent=2))
    else:
        print_summary(data, summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
