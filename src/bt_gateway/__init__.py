"""
Public facade for the gateway client package.

The module re-exports the most useful pieces for integrators so they can
``from bt_gateway import ...`` without navigating the package.
"""

from .api import create_gateway_client, parse_webhook, webhook_key
from .core import (
    APIError,
    ConfigError,
    Decimal,
    DecimalParseError,
    DocumentError,
    ErrorResponse,
    GatewayClient,
    GatewayConfig,
    GatewayError,
    GatewayParameters,
    HTTPError,
    Key,
    Notification,
    PageCursor,
    PageOutOfBoundsError,
    PageResult,
    ResourceSearch,
    Search,
    SignatureError,
    ValidationError,
    ValidationErrors,
    customers,
    disbursement_transactions,
    load_gateway_config,
    parse_notification,
    sample_notification,
    strip_nil_elements,
    subscriptions,
    transactions,
)

__all__ = (
    "APIError",
    "ConfigError",
    "Decimal",
    "DecimalParseError",
    "DocumentError",
    "ErrorResponse",
    "GatewayClient",
    "GatewayConfig",
    "GatewayError",
    "GatewayParameters",
    "HTTPError",
    "Key",
    "Notification",
    "PageCursor",
    "PageOutOfBoundsError",
    "PageResult",
    "ResourceSearch",
    "Search",
    "SignatureError",
    "ValidationError",
    "ValidationErrors",
    "create_gateway_client",
    "customers",
    "disbursement_transactions",
    "load_gateway_config",
    "parse_notification",
    "parse_webhook",
    "sample_notification",
    "strip_nil_elements",
    "subscriptions",
    "transactions",
    "webhook_key",
)
