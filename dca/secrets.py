"""AWS Systems Manager Parameter Store references.

A config value such as ``awsssm://dca/kraken-key`` (plaintext) or
``awsssme://dca/kraken-secret`` (SecureString, decrypted on read) is
replaced with the stored parameter value.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from dca.errors import ConfigError

logger = logging.getLogger("dca.secrets")

PARAM_STORE_PREFIX = "awsssm"
PARAM_STORE_PLAINTEXT_PREFIX = "awsssm://"
PARAM_STORE_ENCRYPTED_PREFIX = "awsssme://"

# Seconds allowed for connecting to and reading from SSM
SSM_TIMEOUT = 5


def has_param_store_prefix(value: str) -> bool:
    return value.startswith(PARAM_STORE_PREFIX)


def has_plaintext_prefix(value: str) -> bool:
    return value.startswith(PARAM_STORE_PLAINTEXT_PREFIX)


def has_encrypted_prefix(value: str) -> bool:
    return value.startswith(PARAM_STORE_ENCRYPTED_PREFIX)


def strip_param_store_prefix(value: str) -> str:
    """Remove a full plaintext or encrypted prefix; other values pass through."""
    if has_encrypted_prefix(value):
        return value[len(PARAM_STORE_ENCRYPTED_PREFIX):]
    if has_plaintext_prefix(value):
        return value[len(PARAM_STORE_PLAINTEXT_PREFIX):]
    return value


class ParamStore:
    """Reads parameters through a boto3 SSM client.

    The client is created on first use so that configs without secret
    references never need AWS credentials (or boto3) at all.
    """

    def __init__(self, client: Optional[Any] = None) -> None:
        self._client = client

    def _ssm(self) -> Any:
        if self._client is None:
            import boto3
            from botocore.config import Config

            self._client = boto3.client(
                "ssm",
                config=Config(connect_timeout=SSM_TIMEOUT, read_timeout=SSM_TIMEOUT),
            )
        return self._client

    def get_value(self, key: str) -> bytes:
        """Return the value referenced by *key*.

        Raises
        ------
        ConfigError
            If the prefix is incomplete or SSM cannot return the parameter.
        """
        if has_plaintext_prefix(key):
            encrypted = False
        elif has_encrypted_prefix(key):
            encrypted = True
        else:
            raise ConfigError(f"AWS Param Store key {key} has an invalid prefix")

        name = strip_param_store_prefix(key)
        logger.debug("Fetching parameter %s (decrypt=%s)", name, encrypted)
        try:
            out = self._ssm().get_parameter(Name=name, WithDecryption=encrypted)
            value = out["Parameter"]["Value"]
        except Exception as exc:
            raise ConfigError(f"failed to retrieve parameter {name} from ssm: {exc}") from exc
        return value.encode("utf-8")
