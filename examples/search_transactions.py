"""
Minimal script that pages through settled transactions with the public API.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import Iterable, Tuple

from bt_gateway import (
    ConfigError,
    GatewayError,
    Search,
    create_gateway_client,
    load_gateway_config,
    transactions,
)


def _override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _build_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List settled transactions page by page")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing BT_* settings",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=7,
        help="Look back this many days for settled transactions",
    )
    parser.add_argument(
        "--min-amount",
        help="Only list transactions of at least this amount (e.g. 10.00)",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        config = load_gateway_config(
            env_file=args.env_file,
            overrides=_build_overrides(args.set or ()),
        )
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    client = create_gateway_client(config=config)

    query = Search()
    query.add_multi("status").items = ["settled"]
    query.add_time("settled-at").min = datetime.now(timezone.utc) - timedelta(days=args.days)
    if args.min_amount:
        query.add_range("amount").min = args.min_amount

    search = transactions(client)
    try:
        cursor = search.fetch_ids(query)
        for page in search.iter_pages(cursor, query):
            logging.info("Page %d of %d", page.page, cursor.page_count)
            for tx in page.items:
                print(f"{tx.id}\t{tx.amount}\t{tx.currency_iso_code}")
    except GatewayError as exc:
        logging.error("Search failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
