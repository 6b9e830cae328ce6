"""
Public, high-level helpers for talking to the gateway.
"""

from __future__ import annotations

from typing import Mapping, Optional

import requests

from .core.client import GatewayClient
from .core.config import GatewayConfig, GatewayParameters, load_gateway_config
from .core.webhook import Key, Notification, parse_notification

__all__ = [
    "create_gateway_client",
    "parse_webhook",
    "webhook_key",
]


def _resolve_config(
    config: Optional[GatewayConfig],
    *,
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
    base: Optional[Mapping[str, str]],
    parameters: Optional[GatewayParameters],
) -> GatewayConfig:
    if config is not None:
        if any(item is not None and item != {} for item in (overrides, base, parameters)):
            raise ValueError(
                "Provide either a pre-built GatewayConfig or individual parameters, not both."
            )
        return config
    return load_gateway_config(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
    )


def create_gateway_client(
    *,
    config: Optional[GatewayConfig] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[GatewayParameters] = None,
) -> GatewayClient:
    """
    Construct a :class:`GatewayClient`.

    Callers can either supply a ready-made :class:`GatewayConfig` or let the
    helper assemble one from environment data.
    """
    cfg = _resolve_config(
        config, env_file=env_file, overrides=overrides, base=base, parameters=parameters
    )
    return GatewayClient(cfg, session=session)


def webhook_key(config: GatewayConfig) -> Key:
    return Key(public_key=config.public_key, private_key=config.private_key)


def parse_webhook(
    signature: str,
    payload: str,
    *,
    config: Optional[GatewayConfig] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[GatewayParameters] = None,
) -> Notification:
    """
    Verify and decode a webhook using the configured key pair.
    """
    cfg = _resolve_config(
        config, env_file=env_file, overrides=overrides, base=base, parameters=parameters
    )
    return parse_notification(webhook_key(cfg), signature, payload)
