"""
Configuration objects and helpers for the gateway client.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .environment import build_environment

__all__ = [
    "AccessToken",
    "ConfigError",
    "GatewayConfig",
    "GatewayParameters",
    "load_gateway_config",
    "url_for_environment",
]

DEVELOPMENT_URL = "http://localhost:3000"
SANDBOX_URL = "https://api.sandbox.braintreegateway.com:443"
PRODUCTION_URL = "https://api.braintreegateway.com:443"

_ENVIRONMENT_URLS = {
    "development": DEVELOPMENT_URL,
    "dev": DEVELOPMENT_URL,
    "sandbox": SANDBOX_URL,
    "production": PRODUCTION_URL,
    "prod": PRODUCTION_URL,
}

_PARAMETER_TO_ENV_KEY = {
    "environment": "BT_ENVIRONMENT",
    "merchant_id": "BT_MERCHANT_ID",
    "public_key": "BT_PUBLIC_KEY",
    "private_key": "BT_PRIVATE_KEY",
    "access_token": "BT_ACCESS_TOKEN",
    "base_url": "BT_BASE_URL",
    "timeout_seconds": "BT_TIMEOUT_SECONDS",
    "api_version": "BT_API_VERSION",
}


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


def url_for_environment(name: str) -> str:
    try:
        return _ENVIRONMENT_URLS[name.strip().lower()]
    except KeyError as exc:
        raise ConfigError(f"bad environment {name!r}") from exc


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class GatewayParameters:
    """
    Explicit parameter bundle for constructing :class:`GatewayConfig`.

    Callers can either instantiate this helper or pass the individual keyword
    arguments directly to :func:`load_gateway_config`.
    """

    environment: Optional[str] = None
    merchant_id: Optional[str] = None
    public_key: Optional[str] = None
    private_key: Optional[str] = None
    access_token: Optional[str] = None
    base_url: Optional[str] = None
    timeout_seconds: Optional[int | str] = None
    api_version: Optional[int | str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = _stringify(value)
        return overrides


def _parse_int(values: Mapping[str, str], key: str, default: str) -> int:
    raw = values.get(key, default)
    try:
        parsed = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc
    if parsed <= 0:
        raise ConfigError(f"{key} must be greater than zero")
    return parsed


def _required(values: Mapping[str, str], key: str) -> str:
    value = (values.get(key) or "").strip()
    if not value:
        raise ConfigError(f"{key} must be provided")
    return value


@dataclass(frozen=True)
class AccessToken:
    raw: str
    environment: str
    merchant_id: str

    @classmethod
    def parse(cls, raw: str) -> "AccessToken":
        parts = raw.strip().split("$")
        if len(parts) < 3 or parts[0] != "access_token":
            raise ConfigError("access token is not of expected format")
        url_for_environment(parts[1])
        return cls(raw=raw.strip(), environment=parts[1], merchant_id=parts[2])


@dataclass(frozen=True)
class GatewayConfig:
    base_url: str
    merchant_id: str
    public_key: str = ""
    private_key: str = ""
    access_token: Optional[str] = None
    environment: str = "sandbox"
    timeout_seconds: int = 60
    api_version: int = 3

    def __repr__(self) -> str:
        return (
            f"GatewayConfig(base_url={self.base_url!r}, merchant_id={self.merchant_id!r}, "
            f"public_key={self.public_key!r}, environment={self.environment!r})"
        )

    @property
    def merchant_url(self) -> str:
        return f"{self.base_url}/merchants/{self.merchant_id}"

    @property
    def is_production(self) -> bool:
        return self.base_url == PRODUCTION_URL

    def authorization_header(self) -> str:
        if self.access_token:
            return f"Bearer {self.access_token}"
        credentials = f"{self.public_key}:{self.private_key}".encode("utf-8")
        return "Basic " + base64.b64encode(credentials).decode("ascii")

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "GatewayConfig":
        timeout_seconds = _parse_int(values, "BT_TIMEOUT_SECONDS", "60")
        api_version = _parse_int(values, "BT_API_VERSION", "3")

        raw_token = (values.get("BT_ACCESS_TOKEN") or "").strip()
        if raw_token:
            token = AccessToken.parse(raw_token)
            base_url = values.get("BT_BASE_URL") or url_for_environment(token.environment)
            return cls(
                base_url=base_url.rstrip("/"),
                merchant_id=token.merchant_id,
                access_token=token.raw,
                environment=token.environment,
                timeout_seconds=timeout_seconds,
                api_version=api_version,
            )

        environment = values.get("BT_ENVIRONMENT", "sandbox").strip().lower()
        base_url = values.get("BT_BASE_URL") or url_for_environment(environment)

        return cls(
            base_url=base_url.rstrip("/"),
            merchant_id=_required(values, "BT_MERCHANT_ID"),
            public_key=_required(values, "BT_PUBLIC_KEY"),
            private_key=_required(values, "BT_PRIVATE_KEY"),
            environment=environment,
            timeout_seconds=timeout_seconds,
            api_version=api_version,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[GatewayParameters] = None,
    ) -> "GatewayConfig":
        merged_overrides = dict(overrides or {})
        if parameters is not None:
            merged_overrides.update(parameters.as_overrides())

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_gateway_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[GatewayParameters] = None,
    environment: Optional[str] = None,
    merchant_id: Optional[str] = None,
    public_key: Optional[str] = None,
    private_key: Optional[str] = None,
    access_token: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout_seconds: Optional[int | str] = None,
    api_version: Optional[int | str] = None,
) -> GatewayConfig:
    """
    Convenience wrapper that mirrors :meth:`GatewayConfig.from_env`.

    The configuration can be provided entirely through environment variables,
    a ``.env`` file, direct keyword arguments, or any combination of the three.
    Keyword arguments win over ``parameters``, which win over ``overrides``.
    """
    explicit = GatewayParameters(
        environment=environment,
        merchant_id=merchant_id,
        public_key=public_key,
        private_key=private_key,
        access_token=access_token,
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        api_version=api_version,
    )
    merged_overrides = dict(overrides or {})
    if parameters is not None:
        merged_overrides.update(parameters.as_overrides())
    merged_overrides.update(explicit.as_overrides())

    return GatewayConfig.from_env(
        env_file=env_file,
        overrides=merged_overrides,
        base=base,
    )
