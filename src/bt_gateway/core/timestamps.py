"""
Fixed textual formats for timestamps and date-only fields.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from .exceptions import DocumentError

__all__ = [
    "DATE_FORMAT",
    "DATETIME_FORMAT",
    "format_date",
    "format_timestamp",
    "parse_date",
    "parse_timestamp",
]

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
DATE_FORMAT = "%Y-%m-%d"


def to_utc(value: datetime) -> datetime:
    # naive values are already UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return to_utc(value).strftime(DATETIME_FORMAT)


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_timestamp(text: str) -> datetime:
    raw = text.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise DocumentError(f"invalid timestamp {text!r}") from exc
    return to_utc(parsed)


def parse_date(text: str) -> date:
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise DocumentError(f"invalid date {text!r}") from exc
