"""Application configuration.

The config is a JSON document::

    {
        "krakenApiKey": "...",
        "krakenPrivateKey": "...",
        "orderAmountInCents": 2500,
        "enableLogging": true,
        "queryOrderInfo": true
    }

The document itself, the API key and the private key may each be a Parameter
Store reference (see :mod:`dca.secrets`).  The private key is base64-decoded
when it is valid base64 and used as-is otherwise.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dca.errors import ConfigError, ValidationError
from dca.secrets import ParamStore, has_param_store_prefix
from dca.validators import validate_amount

logger = logging.getLogger("dca.config")

CONFIG_ENV_VAR = "CONFIG_FILE"


@dataclass(frozen=True)
class AppConfig:
    """Validated, resolved configuration."""

    kraken_api_key: str
    kraken_private_key: bytes
    order_amount_in_cents: int
    enable_logging: bool = True
    query_order_info: bool = True

    def __repr__(self) -> str:
        return (
            f"AppConfig(kraken_api_key='***', kraken_private_key=b'***', "
            f"order_amount_in_cents={self.order_amount_in_cents}, "
            f"enable_logging={self.enable_logging}, query_order_info={self.query_order_info})"
        )


def decode_secret_key(value: str) -> bytes:
    """Base64-decode *value*, falling back to its raw UTF-8 bytes."""
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return value.encode("utf-8")


def _flag(document: Dict[str, Any], key: str, default: bool) -> bool:
    value = document.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def _resolve(value: str, store: ParamStore) -> str:
    if has_param_store_prefix(value):
        return store.get_value(value).decode("utf-8")
    return value


def _read_document(filename: str, store: ParamStore) -> Dict[str, Any]:
    if has_param_store_prefix(filename):
        raw = store.get_value(filename)
    else:
        try:
            raw = Path(filename).read_bytes()
        except OSError as exc:
            raise ConfigError(f"failed to read config file {filename}: {exc}") from exc
    try:
        document = json.loads(raw)
    except ValueError as exc:
        raise ConfigError(f"config {filename} is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise ConfigError(f"config {filename} must be a JSON object")
    return document


def parse_config(document: Dict[str, Any], store: Optional[ParamStore] = None) -> AppConfig:
    """Validate a decoded config document and resolve its secret references."""
    store = store or ParamStore()

    try:
        amount = validate_amount(document.get("orderAmountInCents", 0))
    except ValidationError:
        raise ConfigError("orderAmountInCents cannot be less than or equal to zero")

    api_key = document.get("krakenApiKey") or ""
    if not api_key:
        raise ConfigError("krakenApiKey is required")
    api_key = _resolve(str(api_key), store)

    private_key = document.get("krakenPrivateKey") or ""
    if not private_key:
        raise ConfigError("krakenPrivateKey is required")
    private_key = _resolve(str(private_key), store)

    return AppConfig(
        kraken_api_key=api_key,
        kraken_private_key=decode_secret_key(private_key),
        order_amount_in_cents=amount,
        enable_logging=_flag(document, "enableLogging", True),
        query_order_info=_flag(document, "queryOrderInfo", True),
    )


def load_config(filename: Optional[str], store: Optional[ParamStore] = None) -> AppConfig:
    """Load and validate the config at *filename* (a path or SSM reference)."""
    if not filename:
        raise ConfigError(
            f"must specify a config file path using either {CONFIG_ENV_VAR} "
            "environment variable or the --config flag"
        )
    store = store or ParamStore()
    logger.debug("Loading config from %s", filename)
    return parse_config(_read_document(filename, store), store)
