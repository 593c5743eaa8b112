"""Error taxonomy and Kraken error classification.

Every failure raised by the ``dca`` package derives from ``DCAError``.  Layers
add a short label with :func:`error_context` while the exception travels up,
so callers can still test ``isinstance(exc, OrderTooSmallError)`` after the
message has been decorated with where it happened.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Type


class DCAError(Exception):
    """Base class for all errors raised by the purchase pipeline."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.context: List[str] = []

    def add_context(self, label: str) -> "DCAError":
        """Prepend *label* to the context chain and return ``self``."""
        self.context.insert(0, label)
        return self

    def __str__(self) -> str:
        return ": ".join(self.context + [self.message])


class TransportError(DCAError):
    """Connection, DNS, timeout or non-API HTTP failure."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(DCAError):
    """Malformed response body or a missing field."""


class OrderInfoParseError(DecodeError):
    """A settlement field of a queried order is not a decimal number."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"failed to parse order info field '{field}': {value!r}")
        self.field = field
        self.value = value


class ValidationError(DCAError):
    """Raised when an amount or a computed volume is not usable."""


class ConfigError(ValidationError):
    """Raised when the application configuration is missing or invalid."""


class ProviderRejection(DCAError):
    """Kraken answered with a non-empty ``error`` list."""

    description = "provider rejected request"

    def __init__(self, provider_message: str) -> None:
        super().__init__(f"{self.description} ({provider_message})")
        self.provider_message = provider_message


class OrderTooSmallError(ProviderRejection):
    """The order volume is below the pair's minimum."""

    description = "order is too small"


class InvalidAuthError(ProviderRejection):
    """The API key or signature was refused."""

    description = "invalid auth"


class OpaqueProviderError(ProviderRejection):
    """Any Kraken error without a dedicated type."""

    def __init__(self, provider_message: str) -> None:
        DCAError.__init__(self, provider_message)
        self.provider_message = provider_message


# Exact Kraken error strings. Update here when Kraken changes its wording.
KNOWN_PROVIDER_ERRORS: Dict[str, Type[ProviderRejection]] = {
    "EGeneral:Invalid arguments:volume minimum not met": OrderTooSmallError,
    "EAPI:Invalid key": InvalidAuthError,
}


def classify(message: str) -> ProviderRejection:
    """Map a Kraken error string to its typed rejection."""
    error_type = KNOWN_PROVIDER_ERRORS.get(message, OpaqueProviderError)
    return error_type(message)


def raise_for_provider_errors(errors: object) -> None:
    """Raise the classified first entry of a Kraken ``error`` list, if any."""
    if not errors:
        return
    if not isinstance(errors, list):
        raise DecodeError(f"unexpected error field: {errors!r}")
    raise classify(str(errors[0]))


@contextmanager
def error_context(label: str) -> Iterator[None]:
    """Label any ``DCAError`` raised inside the block with *label*."""
    try:
        yield
    except DCAError as exc:
        exc.add_context(label)
        raise
