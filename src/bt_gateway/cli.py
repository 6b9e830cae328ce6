"""
Command-line interface for signing, verifying and decoding webhooks.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Sequence, Tuple

from .api import webhook_key
from .core.config import ConfigError, GatewayConfig, load_gateway_config
from .core.exceptions import GatewayError
from .core.webhook import Notification, parse_notification, sample_notification


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bt-gateway",
        description="Sign, verify and decode gateway webhook notifications",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing BT_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    sample = commands.add_parser(
        "sample-webhook",
        help="Print a signed sample notification as bt_signature / bt_payload",
    )
    sample.add_argument("--kind", required=True, help="Notification kind, e.g. disbursement")
    sample.add_argument("--id", required=True, dest="subject_id", help="Subject id to embed")

    parse = commands.add_parser(
        "parse-webhook",
        help="Verify a notification and print its kind, timestamp and subject",
    )
    parse.add_argument("--signature", required=True, help="Value of the bt_signature field")
    parse.add_argument("--payload", required=True, help="Value of the bt_payload field")

    challenge = commands.add_parser(
        "verify-challenge",
        help="Answer the gateway's webhook endpoint challenge",
    )
    challenge.add_argument("challenge")
    return parser


def _describe(notification: Notification) -> str:
    timestamp = notification.timestamp.isoformat() if notification.timestamp else "-"
    subject = type(notification.subject).__name__ if notification.subject is not None else "-"
    return f"kind={notification.kind} timestamp={timestamp} subject={subject}"


def _run_command(args: argparse.Namespace, config: GatewayConfig) -> int:
    key = webhook_key(config)

    if args.command == "sample-webhook":
        signature, payload = sample_notification(key, args.kind, args.subject_id)
        print(f"bt_signature={signature}")
        print(f"bt_payload={payload}")
        return 0

    if args.command == "verify-challenge":
        print(key.verify_challenge(args.challenge))
        return 0

    try:
        notification = parse_notification(key, args.signature, args.payload)
    except GatewayError as exc:
        logging.error("Notification rejected: %s", exc)
        return 1
    print(_describe(notification))
    return 0


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_gateway_config(env_file=args.env_file, overrides=overrides)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    return _run_command(args, config)


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
