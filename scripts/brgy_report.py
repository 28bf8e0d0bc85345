#!/usr/bin/env python3
"""
Print the analytics report for a barangay.

Reads from Supabase by default, or from a JSON fixture whose top-level keys
are collection names (bookings, published_listings, users, ...) holding
lists of records.

Usage:
    python scripts/brgy_report.py TALOLONG
    python scripts/brgy_report.py TALOLONG --format csv
    python scripts/brgy_report.py TALOLONG --fixture data/sample_db.json --format json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from brgy_analytics.core.store import InMemoryRecordStore
from brgy_analytics.services.analytics_export import dumps, to_csv, to_text
from brgy_analytics.services.analytics_service import compute_analytics


def load_fixture(path: Path) -> InMemoryRecordStore:
    """Load a JSON fixture into an in-memory store."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return InMemoryRecordStore.from_lists(**{name: rows for name, rows in data.items() if isinstance(rows, list)})


def main():
    parser = argparse.ArgumentParser(description="Print barangay analytics")
    parser.add_argument("barangay", help="Barangay name, e.g. TALOLONG")
    parser.add_argument(
        "--format",
        default="text",
        choices=["text", "csv", "json"],
        help="Output format"
    )
    parser.add_argument("--fixture", type=Path, help="JSON fixture to read instead of Supabase")
    parser.add_argument("--verbose", action="store_true", help="Show INFO logs")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    store = None
    if args.fixture:
        if not args.fixture.exists():
            print(f"Fixture not found: {args.fixture}", file=sys.stderr)
            sys.exit(1)
        store = load_fixture(args.fixture)

    snapshot = asyncio.run(compute_analytics(args.barangay, store=store))

    if args.format == "csv":
        print(to_csv(snapshot), end="")
    elif args.format == "json":
        print(dumps(snapshot))
    else:
        print(to_text(snapshot), end="")


if __name__ == "__main__":
    main()
