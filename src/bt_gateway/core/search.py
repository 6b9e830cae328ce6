"""
Search queries for the ``advanced_search`` endpoints.

A :class:`Search` is an ordered set of named fields. Adding a field under a
name that is already present replaces the earlier field in its original
slot, so the serialized order always follows first insertion::

    query = Search()
    query.add_text("customer-first-name").starts_with = "A"
    query.add_range("amount").min = Decimal(1000, 2)
    query.add_multi("status").items = ["settled", "authorized"]
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Union
from xml.etree.ElementTree import Element, SubElement

from .decimals import Decimal
from .documents import to_xml
from .timestamps import format_timestamp

__all__ = [
    "MultiField",
    "RangeField",
    "RangeValue",
    "Search",
    "TextField",
    "TimeField",
]

RangeValue = Union[Decimal, decimal.Decimal, int, float, str]


def _range_text(value: RangeValue) -> str:
    if isinstance(value, bool):
        raise TypeError("booleans are not range values")
    if isinstance(value, decimal.Decimal):
        return str(Decimal.from_number(value))
    return str(value)


@dataclass
class TextField:
    name: str
    is_: Optional[str] = None
    is_not: Optional[str] = None
    starts_with: Optional[str] = None
    ends_with: Optional[str] = None
    contains: Optional[str] = None

    def to_element(self) -> Element:
        element = Element(self.name)
        for tag, value in (
            ("is", self.is_),
            ("is-not", self.is_not),
            ("starts-with", self.starts_with),
            ("ends-with", self.ends_with),
            ("contains", self.contains),
        ):
            if value:
                SubElement(element, tag).text = value
        return element


@dataclass
class RangeField:
    name: str
    is_: Optional[RangeValue] = None
    min: Optional[RangeValue] = None
    max: Optional[RangeValue] = None

    def to_element(self) -> Element:
        element = Element(self.name)
        for tag, value in (("is", self.is_), ("min", self.min), ("max", self.max)):
            if value is not None:
                SubElement(element, tag).text = _range_text(value)
        return element


@dataclass
class TimeField:
    """Timestamp bounds; each of ``is_``, ``min`` and ``max`` is omitted while unset."""

    name: str
    is_: Optional[datetime] = None
    min: Optional[datetime] = None
    max: Optional[datetime] = None

    def to_element(self) -> Element:
        element = Element(self.name)
        for tag, value in (("is", self.is_), ("min", self.min), ("max", self.max)):
            if value is not None:
                SubElement(element, tag, {"type": "datetime"}).text = format_timestamp(value)
        return element


@dataclass
class MultiField:
    name: str
    items: List[str] = field(default_factory=list)

    def to_element(self) -> Element:
        element = Element(self.name, {"type": "array"})
        for item in self.items:
            SubElement(element, "item").text = item
        return element


SearchField = Union[TextField, RangeField, TimeField, MultiField]


class Search:
    def __init__(self) -> None:
        # dict insertion order is the serialization order; rebinding an
        # existing key keeps its position
        self._fields: Dict[str, SearchField] = {}

    def _add(self, search_field: SearchField) -> SearchField:
        self._fields[search_field.name] = search_field
        return search_field

    def add_text(self, name: str) -> TextField:
        return self._add(TextField(name))  # type: ignore[return-value]

    def add_range(self, name: str) -> RangeField:
        return self._add(RangeField(name))  # type: ignore[return-value]

    def add_time(self, name: str) -> TimeField:
        return self._add(TimeField(name))  # type: ignore[return-value]

    def add_multi(self, name: str) -> MultiField:
        return self._add(MultiField(name))  # type: ignore[return-value]

    def get(self, name: str) -> Optional[SearchField]:
        return self._fields.get(name)

    def names(self) -> List[str]:
        return list(self._fields)

    def shallow_copy(self) -> "Search":
        """
        Return a new query whose slots can be replaced independently.

        The field objects themselves are shared; replace a field with one of
        the ``add_*`` methods rather than mutating a shared one.
        """
        copy = Search()
        copy._fields = dict(self._fields)
        return copy

    def to_element(self) -> Element:
        root = Element("search")
        for search_field in self._fields.values():
            root.append(search_field.to_element())
        return root

    def to_xml(self) -> bytes:
        return to_xml(self.to_element())

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[SearchField]:
        return iter(self._fields.values())
