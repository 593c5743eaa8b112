"""Kraken private-API authentication.

Two pieces live here: the nonce sequencers that number every private call,
and the ``API-Sign`` computation.

The signature is::

    base64(HMAC-SHA512(secret, path + SHA256(str(nonce) + form_body)))

where ``form_body`` is the url-encoded parameters sorted by key.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Union
from urllib.parse import urlencode


# ----------------------------------------------------------------------
# Nonces
# ----------------------------------------------------------------------


class NonceSequencer(ABC):
    """Strategy producing strictly increasing nonces for one client."""

    @abstractmethod
    def next(self) -> int:
        """Return a value greater than every value returned before."""


class ClockNonceSequencer(NonceSequencer):
    """Nanosecond clock reading, bumped past the last value when needed.

    Safe to share between threads: two concurrent callers never receive
    equal or out-of-order values.
    """

    def __init__(self, clock: Callable[[], int] = time.time_ns) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self._last = max(self._clock(), self._last + 1)
            return self._last


class CountingNonceSequencer(NonceSequencer):
    """Deterministic counter: ``start``, ``start + 1``, ..."""

    def __init__(self, start: int = 1) -> None:
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value


# ----------------------------------------------------------------------
# Signatures
# ----------------------------------------------------------------------


def encode_form(params: Dict[str, Any]) -> str:
    """URL-encode *params* with keys in sorted order."""
    return urlencode(sorted((key, str(value)) for key, value in params.items()))


def sign(
    path: str,
    params: Dict[str, Any],
    nonce: int,
    secret_key: Union[str, bytes],
) -> str:
    """Compute the ``API-Sign`` header value for a private request.

    Parameters
    ----------
    path : str
        URI path, e.g. ``/0/private/AddOrder``.
    params : dict
        Form parameters, including ``nonce``.
    nonce : int
        The nonce sent with the request.
    secret_key : str or bytes
        Kraken private key, already base64-decoded by the caller.

    Returns
    -------
    str
        Standard base64 of the HMAC-SHA512 digest.
    """
    if isinstance(secret_key, str):
        secret_key = secret_key.encode("utf-8")
    digest = hashlib.sha256((str(nonce) + encode_form(params)).encode("utf-8")).digest()
    mac = hmac.new(secret_key, path.encode("utf-8") + digest, hashlib.sha512)
    return base64.b64encode(mac.digest()).decode("ascii")
