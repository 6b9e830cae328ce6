from __future__ import annotations

import decimal
from datetime import datetime, timedelta, timezone

import pytest

from bt_gateway.core.decimals import Decimal
from bt_gateway.core.search import MultiField, Search, TextField


def test_empty_search() -> None:
    assert Search().to_xml() == b"<search />"
    assert len(Search()) == 0


def test_text_field() -> None:
    query = Search()
    field = query.add_text("customer-first-name")
    field.is_ = "Jane"
    field.is_not = "John"
    field.starts_with = "J"
    field.ends_with = "e"
    field.contains = "an"

    assert query.to_xml() == (
        b"<search><customer-first-name>"
        b"<is>Jane</is><is-not>John</is-not><starts-with>J</starts-with>"
        b"<ends-with>e</ends-with><contains>an</contains>"
        b"</customer-first-name></search>"
    )


def test_text_field_omits_empty_operators() -> None:
    query = Search()
    query.add_text("order-id").is_ = ""
    assert query.to_xml() == b"<search><order-id /></search>"


def test_range_field() -> None:
    query = Search()
    field = query.add_range("amount")
    field.is_ = Decimal(1501, 2)
    field.min = 10.01
    field.max = "20.01"

    assert query.to_xml() == (
        b"<search><amount><is>15.01</is><min>10.01</min><max>20.01</max></amount></search>"
    )


def test_range_field_emits_zero_and_omits_unset() -> None:
    query = Search()
    query.add_range("amount").min = 0
    query.add_range("price").max = decimal.Decimal("2.50")

    assert query.to_xml() == (
        b"<search><amount><min>0</min></amount><price><max>2.50</max></price></search>"
    )


def test_range_field_rejects_booleans() -> None:
    query = Search()
    query.add_range("amount").min = True
    with pytest.raises(TypeError):
        query.to_xml()


def test_time_field() -> None:
    query = Search()
    field = query.add_time("created-at")
    field.min = datetime(2016, 9, 11, 0, 0, 0, tzinfo=timezone.utc)
    field.max = datetime(2016, 9, 12, 2, 30, 5, tzinfo=timezone(timedelta(hours=2)))

    assert query.to_xml() == (
        b'<search><created-at>'
        b'<min type="datetime">2016-09-11T00:00:00Z</min>'
        b'<max type="datetime">2016-09-12T00:30:05Z</max>'
        b"</created-at></search>"
    )


def test_multi_field() -> None:
    query = Search()
    query.add_multi("status").items = ["authorized", "settled"]
    query.add_multi("ids")

    assert query.to_xml() == (
        b'<search><status type="array"><item>authorized</item><item>settled</item></status>'
        b'<ids type="array" /></search>'
    )


def test_fields_serialize_in_insertion_order() -> None:
    query = Search()
    query.add_multi("status").items = ["settled"]
    query.add_text("order-id").is_ = "1"
    query.add_range("amount").min = 5

    assert query.names() == ["status", "order-id", "amount"]
    assert [child.tag for child in query.to_element()] == ["status", "order-id", "amount"]


def test_readding_a_name_replaces_in_place() -> None:
    query = Search()
    first = query.add_text("x")
    first.is_ = "old"
    query.add_text("y").is_ = "y"
    second = query.add_text("x")
    second.is_ = "new"

    assert query.names() == ["x", "y"]
    assert len(query) == 2
    assert query.get("x") is second
    assert query.to_xml() == b"<search><x><is>new</is></x><y><is>y</is></y></search>"


def test_readding_with_a_different_kind_replaces_the_field() -> None:
    query = Search()
    query.add_text("ids").is_ = "abc"
    query.add_multi("ids").items = ["abc", "def"]

    assert isinstance(query.get("ids"), MultiField)
    assert query.names() == ["ids"]


def test_shallow_copy_is_independent_by_slot() -> None:
    original = Search()
    original.add_text("order-id").is_ = "1"
    original.add_multi("ids").items = ["a"]

    copy = original.shallow_copy()
    copy.add_multi("ids").items = ["b"]
    copy.add_text("email").contains = "@"

    assert original.names() == ["order-id", "ids"]
    assert original.get("ids").items == ["a"]
    assert copy.names() == ["order-id", "ids", "email"]
    assert copy.get("ids").items == ["b"]
    assert copy.get("order-id") is original.get("order-id")


def test_membership_and_iteration() -> None:
    query = Search()
    query.add_text("a")
    query.add_multi("b")

    assert "a" in query
    assert "c" not in query
    assert [type(field) for field in query] == [TextField, MultiField]
    assert query.get("c") is None
