from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from bt_gateway import create_gateway_client
from bt_gateway.core.client import USER_AGENT, GatewayClient
from bt_gateway.core.config import SANDBOX_URL, GatewayConfig
from bt_gateway.core.exceptions import APIError, HTTPError, InvalidResponseError
from bt_gateway.core.search import Search


@pytest.fixture
def config() -> GatewayConfig:
    return GatewayConfig(
        base_url=SANDBOX_URL,
        merchant_id="merchant",
        public_key="public",
        private_key="private",
        timeout_seconds=15,
    )


def _session(status_code: int, content: bytes) -> MagicMock:
    session = MagicMock()
    session.request.return_value = MagicMock(status_code=status_code, content=content)
    return session


def test_post_sends_document(config: GatewayConfig) -> None:
    session = _session(200, b'<transaction><id>abc</id><order-id nil="true"/></transaction>')
    client = GatewayClient(config, session=session)
    query = Search()
    query.add_text("order-id").is_ = "o-1"

    reply = client.post("/transactions/advanced_search_ids", query.to_element())

    args, kwargs = session.request.call_args
    assert args == ("POST", f"{SANDBOX_URL}/merchants/merchant/transactions/advanced_search_ids")
    assert kwargs["data"] == b"<search><order-id><is>o-1</is></order-id></search>"
    assert kwargs["timeout"] == 15
    headers = kwargs["headers"]
    assert headers["User-Agent"] == USER_AGENT
    assert headers["Content-Type"] == "application/xml"
    assert headers["X-ApiVersion"] == "3"
    assert headers["Authorization"].startswith("Basic ")

    assert reply.find("id").text == "abc"
    assert reply.find("order-id") is None


def test_get_without_body(config: GatewayConfig) -> None:
    session = _session(200, b"")
    client = GatewayClient(config, session=session)

    assert client.get("transactions/abc") is None
    _, kwargs = session.request.call_args
    assert kwargs["data"] is None


def test_api_error_response(config: GatewayConfig) -> None:
    session = _session(
        422,
        b"""<api-error-response>
  <errors>
    <errors type="array"/>
    <transaction>
      <errors type="array">
        <error>
          <code>81502</code>
          <attribute type="symbol">amount</attribute>
          <message>Amount is required.</message>
        </error>
      </errors>
    </transaction>
  </errors>
  <message>Amount is required.</message>
</api-error-response>""",
    )
    client = GatewayClient(config, session=session)

    with pytest.raises(APIError) as excinfo:
        client.post("transactions", None)

    error = excinfo.value
    assert error.status_code == 422
    assert error.message == "Amount is required."
    assert [leaf.code for leaf in error.for_("Transaction").on("Amount")] == ["81502"]
    assert len(error.all()) == 1


@pytest.mark.parametrize(
    ("status_code", "message"),
    [(404, "Not Found (404)"), (500, "Internal Server Error (500)"), (599, "Unknown Status (599)")],
)
def test_http_error(config: GatewayConfig, status_code: int, message: str) -> None:
    client = GatewayClient(config, session=_session(status_code, b""))

    with pytest.raises(HTTPError) as excinfo:
        client.delete("customers/abc")
    assert excinfo.value.status_code == status_code
    assert str(excinfo.value) == message


def test_failing_status_with_non_xml_body(config: GatewayConfig) -> None:
    body = b"<html><body>Down for maintenance<br></body></html>"
    client = GatewayClient(config, session=_session(503, body))

    with pytest.raises(HTTPError) as excinfo:
        client.get("transactions/abc")
    assert excinfo.value.status_code == 503
    assert str(excinfo.value) == "Service Unavailable (503)"


def test_request_document_is_not_logged(config: GatewayConfig, caplog: pytest.LogCaptureFixture) -> None:
    client = GatewayClient(config, session=_session(200, b""))
    query = Search()
    query.add_text("credit-card-number").is_ = "4111111111111111"

    with caplog.at_level(logging.DEBUG):
        client.post("transactions/advanced_search_ids", query.to_element())

    assert "4111111111111111" not in caplog.text
    assert "transactions/advanced_search_ids" in caplog.text


def test_undecodable_reply(config: GatewayConfig) -> None:
    client = GatewayClient(config, session=_session(200, b"<transaction>"))

    with pytest.raises(InvalidResponseError) as excinfo:
        client.get("transactions/abc")
    assert excinfo.value.status_code == 200
    assert excinfo.value.body == b"<transaction>"


def test_bearer_header_for_access_token() -> None:
    config = GatewayConfig(
        base_url=SANDBOX_URL,
        merchant_id="merchant",
        access_token="access_token$sandbox$merchant$abc",
    )
    assert GatewayClient(config, session=MagicMock()).headers()["Authorization"] == (
        "Bearer access_token$sandbox$merchant$abc"
    )


def test_create_gateway_client_from_overrides() -> None:
    session = MagicMock()
    client = create_gateway_client(
        env_file=None,
        base={},
        overrides={"BT_MERCHANT_ID": "m", "BT_PUBLIC_KEY": "p", "BT_PRIVATE_KEY": "s"},
        session=session,
    )

    assert client.session is session
    assert client.config.merchant_url == f"{SANDBOX_URL}/merchants/m"


def test_create_gateway_client_rejects_mixed_arguments(config: GatewayConfig) -> None:
    with pytest.raises(ValueError):
        create_gateway_client(config=config, overrides={"BT_MERCHANT_ID": "m"})
