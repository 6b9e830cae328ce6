"""
Core primitives shared by every gateway resource operation.
"""

from .client import GatewayClient
from .config import (
    ConfigError,
    GatewayConfig,
    GatewayParameters,
    load_gateway_config,
)
from .decimals import Decimal, DecimalParseError
from .documents import parse_document, strip_nil_elements, to_xml
from .environment import GatewayEnvironment, build_environment, load_env_file
from .exceptions import (
    APIError,
    DocumentError,
    GatewayError,
    HTTPError,
    InvalidResponseError,
    PageOutOfBoundsError,
    SignatureError,
)
from .pagination import (
    PageCursor,
    PageResult,
    ResourceSearch,
    customers,
    disbursement_transactions,
    subscriptions,
    transactions,
)
from .search import MultiField, RangeField, Search, TextField, TimeField
from .validation import ErrorResponse, ValidationError, ValidationErrors
from .webhook import (
    Key,
    Notification,
    parse_notification,
    parse_request_form,
    sample_notification,
)

__all__ = [
    "APIError",
    "ConfigError",
    "Decimal",
    "DecimalParseError",
    "DocumentError",
    "ErrorResponse",
    "GatewayClient",
    "GatewayConfig",
    "GatewayEnvironment",
    "GatewayError",
    "GatewayParameters",
    "HTTPError",
    "InvalidResponseError",
    "Key",
    "MultiField",
    "Notification",
    "PageCursor",
    "PageOutOfBoundsError",
    "PageResult",
    "RangeField",
    "ResourceSearch",
    "Search",
    "SignatureError",
    "TextField",
    "TimeField",
    "ValidationError",
    "ValidationErrors",
    "build_environment",
    "customers",
    "disbursement_transactions",
    "load_env_file",
    "load_gateway_config",
    "parse_document",
    "parse_notification",
    "parse_request_form",
    "sample_notification",
    "strip_nil_elements",
    "subscriptions",
    "to_xml",
    "transactions",
]
