from __future__ import annotations

import pytest

from bt_gateway.core.documents import parse_document
from bt_gateway.core.validation import ErrorResponse, ValidationErrors, to_pascal_case

ERROR_RESPONSE = b"""<?xml version="1.0" encoding="UTF-8"?>
<api-error-response>
  <errors>
    <errors type="array"/>
    <transaction>
      <errors type="array">
        <error>
          <code>91560</code>
          <attribute type="symbol">base</attribute>
          <message>Tx could not be held in escrow.</message>
        </error>
        <error>
          <code>81502</code>
          <attribute type="symbol">amount</attribute>
          <message>Amount is required.</message>
        </error>
        <error>
          <code>91526</code>
          <attribute type="symbol">custom_fields</attribute>
          <message>Custom field is invalid: store_me.</message>
        </error>
        <error>
          <code>91513</code>
          <attribute type="symbol">merchant_account_id</attribute>
          <message>Merchant account ID is invalid.</message>
        </error>
        <error>
          <code>915157</code>
          <attribute type="symbol">line_items</attribute>
          <message>Too many line items.</message>
        </error>
      </errors>
      <credit-card>
        <errors type="array">
          <error>
            <code>91708</code>
            <attribute type="symbol">base</attribute>
            <message>Cannot provide expiration_date if you are also providing expiration_month and expiration_year.</message>
          </error>
          <error>
            <code>81714</code>
            <attribute type="symbol">number</attribute>
            <message>Credit card number is required.</message>
          </error>
          <error>
            <code>81725</code>
            <attribute type="symbol">base</attribute>
            <message>Credit card must include either number or venmo_sdk_payment_method_code.</message>
          </error>
          <error>
            <code>81703</code>
            <attribute type="symbol">number</attribute>
            <message>Credit card type is not accepted by this merchant account.</message>
          </error>
        </errors>
      </credit-card>
      <customer>
        <errors type="array">
          <error>
            <code>81606</code>
            <attribute type="symbol">email</attribute>
            <message>Email is an invalid format.</message>
          </error>
        </errors>
      </customer>
      <line-items>
        <index-1>
          <errors type="array">
            <error>
              <code>95801</code>
              <attribute type="symbol">commodity_code</attribute>
              <message>Commodity code is too long.</message>
            </error>
          </errors>
        </index-1>
        <index-3>
          <errors type="array">
            <error>
              <code>95803</code>
              <attribute type="symbol">description</attribute>
              <message>Description is too long.</message>
            </error>
            <error>
              <code>95809</code>
              <attribute type="symbol">product_code</attribute>
              <message>Product code is too long.</message>
            </error>
          </errors>
        </index-3>
      </line-items>
    </transaction>
  </errors>
  <message>Everything is broken!</message>
</api-error-response>"""


@pytest.fixture
def response() -> ErrorResponse:
    return ErrorResponse.from_element(parse_document(ERROR_RESPONSE))


def test_message(response: ErrorResponse) -> None:
    assert response.message == "Everything is broken!"
    assert response.merchant_account is None
    assert response.transaction is None


def test_all_deep_collects_every_leaf(response: ErrorResponse) -> None:
    codes = [error.code for error in response.errors.all_deep()]
    assert len(codes) == 13
    assert codes[:6] == ["91560", "81502", "91526", "91513", "915157", "91708"]
    assert codes[-3:] == ["95801", "95803", "95809"]


def test_top_level_has_no_direct_errors(response: ErrorResponse) -> None:
    assert response.errors.all() == []


def test_nested_accessors(response: ErrorResponse) -> None:
    transaction = response.errors.for_("Transaction")
    credit_card = transaction.for_("CreditCard")

    assert credit_card.object_name == "CreditCard"
    assert len(credit_card.all()) == 4
    assert len(credit_card.on("Number")) == 2
    assert len(transaction.for_("Customer").all()) == 1
    assert len(transaction.on("LineItems")) == 1
    assert len(transaction.all()) == 5
    assert len(transaction.on("Base")) == 1
    assert len(transaction.for_("LineItems").for_index(3).on("Description")) == 1


def test_indexed_line_item(response: ErrorResponse) -> None:
    errors = response.errors.for_("Transaction").for_("LineItems").for_index(1).on("CommodityCode")
    assert len(errors) == 1
    assert errors[0].code == "95801"
    assert errors[0].attribute == "CommodityCode"
    assert errors[0].message == "Commodity code is too long."


def test_lookups_accept_wire_names(response: ErrorResponse) -> None:
    transaction = response.errors.for_("transaction")
    assert len(transaction.for_("credit-card").on("number")) == 2
    assert len(transaction.on("merchant_account_id")) == 1


def test_missing_lookups_return_empty_nodes(response: ErrorResponse) -> None:
    missing = response.errors.for_("Nope").for_("Deeper").for_index(7)
    assert isinstance(missing, ValidationErrors)
    assert missing.all() == []
    assert missing.all_deep() == []
    assert missing.on("Anything") == []
    assert not missing
    assert response.errors.for_("Transaction").on("Nothing") == []


def test_empty_envelope() -> None:
    response = ErrorResponse.from_element(
        parse_document(b"<api-error-response><message>Nope</message></api-error-response>")
    )
    assert response.message == "Nope"
    assert response.errors.all_deep() == []


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("amount", "Amount"),
        ("index_1", "Index1"),
        ("index_123", "Index123"),
        ("commodity_code", "CommodityCode"),
        ("description", "Description"),
        ("line-items", "LineItems"),
        ("index-1", "Index1"),
        ("index-123", "Index123"),
        ("commodity-code", "CommodityCode"),
        ("CreditCard", "CreditCard"),
    ],
)
def test_to_pascal_case(raw: str, expected: str) -> None:
    assert to_pascal_case(raw) == expected
