"""
HTTP client helpers for the gateway.

The client only sends a document and returns the decoded reply; retries,
TLS settings and pooling are left to the ``requests.Session`` the caller
passes in.
"""

from __future__ import annotations

import logging
from typing import Optional
from xml.etree.ElementTree import Element

import requests

from .config import GatewayConfig
from .documents import parse_document, strip_nil_elements, to_xml
from .exceptions import APIError, DocumentError, HTTPError, InvalidResponseError
from .validation import ErrorResponse

__all__ = [
    "GatewayClient",
    "raise_for_document",
]

USER_AGENT = "bt-gateway-python"
APPLICATION_XML = "application/xml"


def raise_for_document(status_code: int, document: Optional[Element]) -> None:
    """
    Raise :class:`APIError` for an error envelope, :class:`HTTPError` for any
    other failing status.
    """
    if document is not None and document.tag == "api-error-response":
        response = ErrorResponse.from_element(document)
        if response.message:
            raise APIError(response, status_code=status_code)
    if status_code > 299:
        raise HTTPError(status_code)


class GatewayClient:
    """
    Thin convenience wrapper around the merchant endpoints.
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()

    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": USER_AGENT,
            "Content-Type": APPLICATION_XML,
            "Accept": APPLICATION_XML,
            "Accept-Encoding": "gzip",
            "X-ApiVersion": str(self.config.api_version),
            "Authorization": self.config.authorization_header(),
        }

    def request(
        self,
        method: str,
        path: str,
        document: Optional[Element] = None,
    ) -> Optional[Element]:
        """
        Send ``document`` to ``path`` and return the normalized reply.

        ``None`` is returned for an empty body. Gzip bodies are decompressed
        by ``requests`` before the nil elements are stripped.
        """
        url = f"{self.config.merchant_url}/{path.lstrip('/')}"
        body = to_xml(document) if document is not None else None

        # request documents can carry card data; only their size is logged
        logging.info("Sending %s %s (%d bytes)", method, url, len(body or b""))

        response = self.session.request(
            method,
            url,
            data=body,
            headers=self.headers(),
            timeout=self.config.timeout_seconds,
        )
        logging.debug("Gateway answered %s with %d bytes", response.status_code, len(response.content))

        try:
            stripped = strip_nil_elements(response.content)
            reply = parse_document(stripped) if stripped.strip() else None
        except DocumentError as exc:
            if response.status_code > 299:
                raise HTTPError(response.status_code) from exc
            raise InvalidResponseError(response.status_code, response.content) from exc
        raise_for_document(response.status_code, reply)
        return reply

    def get(self, path: str) -> Optional[Element]:
        return self.request("GET", path)

    def post(self, path: str, document: Optional[Element] = None) -> Optional[Element]:
        return self.request("POST", path, document)

    def put(self, path: str, document: Optional[Element] = None) -> Optional[Element]:
        return self.request("PUT", path, document)

    def delete(self, path: str) -> Optional[Element]:
        return self.request("DELETE", path)
