"""
Exact fixed-point amounts as exchanged with the gateway.

A :class:`Decimal` is ``unscaled * 10 ** -scale``. Values are never
normalized: ``Decimal(100, 2)`` and ``Decimal(1000, 3)`` keep their own
representation but compare equal.
"""

from __future__ import annotations

import decimal
import functools
import logging
import re
from dataclasses import dataclass
from typing import Union

from .exceptions import GatewayError

__all__ = ["Decimal", "DecimalParseError"]

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_DIGITS = re.compile(r"[+-]?[0-9]+")


class DecimalParseError(GatewayError, ValueError):
    """Raised when text cannot be decoded into a :class:`Decimal`."""


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Decimal:
    unscaled: int = 0
    scale: int = 0

    @classmethod
    def parse(cls, text: Union[str, bytes]) -> "Decimal":
        """
        Decode ``text`` such as ``"2.50"`` into ``Decimal(250, 2)``.

        The digits after the point set the scale. Empty text yields a zero
        value instead of an error, which older callers rely on.
        """
        if isinstance(text, bytes):
            text = text.decode("ascii", errors="replace")
        if text == "":
            logging.debug("Decoding empty amount text as zero")
            return cls()

        digits = text
        scale = 0
        point = text.find(".")
        if point != -1:
            scale = len(text) - point - 1
            digits = text[:point] + text[point + 1 :]

        if not _DIGITS.fullmatch(digits):
            raise DecimalParseError(f"invalid decimal {text!r}")
        unscaled = int(digits)
        if not _INT64_MIN <= unscaled <= _INT64_MAX:
            raise DecimalParseError(f"decimal {text!r} is out of range")
        return cls(unscaled=unscaled, scale=scale)

    @classmethod
    def from_number(cls, value: Union["Decimal", decimal.Decimal, int, str]) -> "Decimal":
        if isinstance(value, Decimal):
            return value
        if isinstance(value, bool):
            raise TypeError("booleans are not amounts")
        if isinstance(value, int):
            return cls(unscaled=value, scale=0)
        if isinstance(value, decimal.Decimal):
            sign, digits, exponent = value.as_tuple()
            if not isinstance(exponent, int):
                raise DecimalParseError(f"{value} is not a finite amount")
            unscaled = int("".join(str(d) for d in digits) or "0")
            return cls(unscaled=-unscaled if sign else unscaled, scale=-exponent)
        return cls.parse(value)

    def format(self) -> str:
        if self.scale <= 0:
            return str(self.unscaled) + "0" * -self.scale

        sign = "-" if self.unscaled < 0 else ""
        digits = str(abs(self.unscaled)).rjust(self.scale + 1, "0")
        return f"{sign}{digits[: -self.scale]}.{digits[-self.scale :]}"

    def compare(self, other: "Decimal") -> int:
        """Return -1, 0 or 1 after aligning both operands to the larger scale."""
        x, y = self.unscaled, other.unscaled
        if self.scale > other.scale:
            y *= 10 ** (self.scale - other.scale)
        elif other.scale > self.scale:
            x *= 10 ** (other.scale - self.scale)
        return (x > y) - (x < y)

    def to_decimal(self) -> decimal.Decimal:
        # exact at any scale, unlike arithmetic under the default context
        return decimal.Decimal(f"{self.unscaled}E{-self.scale}")

    def __str__(self) -> str:
        return self.format()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Decimal):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Decimal):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash(self.to_decimal())
