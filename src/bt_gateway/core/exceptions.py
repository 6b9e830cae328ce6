"""
Exception types raised by the gateway helpers.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .validation import ErrorResponse, ValidationError, ValidationErrors

__all__ = [
    "APIError",
    "DocumentError",
    "GatewayError",
    "HTTPError",
    "InvalidResponseError",
    "PageOutOfBoundsError",
    "SignatureError",
]


class GatewayError(Exception):
    """Base class for every error raised by this package."""


class DocumentError(GatewayError, ValueError):
    """Raised when a document is truncated, unterminated or otherwise malformed."""


class SignatureError(GatewayError):
    """Raised when a webhook signature cannot be parsed or does not verify."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or "Invalid Signature")
        self.message = message or "Invalid Signature"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignatureError):
            return NotImplemented
        return self.message == other.message

    def __hash__(self) -> int:
        return hash(self.message)


class PageOutOfBoundsError(GatewayError, IndexError):
    """Raised before any round trip when a requested page does not exist."""

    def __init__(self, page: int, page_count: int) -> None:
        super().__init__(
            f"page {page} out of bounds, page numbers start at 1 "
            f"and page count is {page_count}"
        )
        self.page = page
        self.page_count = page_count


class HTTPError(GatewayError):
    def __init__(self, status_code: int) -> None:
        try:
            reason = HTTPStatus(status_code).phrase
        except ValueError:
            reason = "Unknown Status"
        super().__init__(f"{reason} ({status_code})")
        self.status_code = status_code


class InvalidResponseError(GatewayError):
    """Raised when a reply body cannot be decoded."""

    def __init__(self, status_code: int, body: bytes = b"") -> None:
        super().__init__(f"gateway returned invalid response ({status_code})")
        self.status_code = status_code
        self.body = body


class APIError(GatewayError):
    """
    A failure reported by the service inside an ``api-error-response`` envelope.

    The decoded envelope is kept on :attr:`response`; its validation errors
    form a tree that mirrors the shape of the request that failed.
    """

    def __init__(self, response: "ErrorResponse", status_code: Optional[int] = None) -> None:
        super().__init__(response.message)
        self.response = response
        self.status_code = status_code

    @property
    def message(self) -> str:
        return self.response.message

    @property
    def errors(self) -> "ValidationErrors":
        return self.response.errors

    def all(self) -> List["ValidationError"]:
        return self.response.errors.all_deep()

    def for_(self, name: str) -> "ValidationErrors":
        return self.response.errors.for_(name)
