"""Low-level Kraken REST client.

Handles authentication (nonce + HMAC-SHA512 signing), request construction,
response parsing, and error translation for the three calls a purchase
needs: the public ticker, ``AddOrder`` and ``QueryOrders``.  All outgoing
requests and incoming responses are logged for debugging.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional, Tuple, Union

import requests

from dca.errors import (
    DecodeError,
    OrderInfoParseError,
    TransportError,
    ValidationError,
    error_context,
    raise_for_provider_errors,
)
from dca.models import OrderInfo, PlacementResult
from dca.signing import ClockNonceSequencer, NonceSequencer, encode_form, sign
from dca.validators import compute_volume, format_volume, parse_quote, validate_amount, validate_volume

logger = logging.getLogger("dca.client")

# Kraken REST base URL
BASE_URL = "https://api.kraken.com"

# Pair used in requests and the key Kraken answers with
BTC_USD_PAIR = "XBTUSD"
BTC_USD_RESULT_KEY = "XXBTZUSD"

TICKER_PATH = "/0/public/Ticker"
TIME_PATH = "/0/public/Time"
ADD_ORDER_PATH = "/0/private/AddOrder"
QUERY_ORDERS_PATH = "/0/private/QueryOrders"

# (connect, read) timeouts in seconds
REQUEST_TIMEOUT = (5, 10)

# Total seconds allowed for one call, from sending to the last body byte
REQUEST_DEADLINE = 30.0

# Body is read a byte at a time so the deadline is checked between socket reads
READ_CHUNK_SIZE = 1


class KrakenClient:
    """Thin wrapper around the Kraken spot REST API.

    Parameters
    ----------
    api_key : str, optional
        Kraken API key.  Only private calls need credentials.
    secret_key : str or bytes, optional
        Kraken private key, already base64-decoded.
    nonces : NonceSequencer, optional
        Nonce strategy; defaults to a clock-seeded counter.
    base_url : str, optional
        Override the default base URL.
    session : requests.Session, optional
        Session to send requests with.
    timeout : tuple, optional
        ``(connect, read)`` timeout passed to every request.
    deadline : float, optional
        Total seconds one call may take, body included.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        secret_key: Union[str, bytes, None] = None,
        nonces: Optional[NonceSequencer] = None,
        base_url: str = BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = REQUEST_TIMEOUT,
        deadline: float = REQUEST_DEADLINE,
    ) -> None:
        if deadline <= 0:
            raise ValueError("deadline must be positive.")
        self._api_key = api_key
        self._secret_key = secret_key
        self._nonces = nonces or ClockNonceSequencer()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._deadline = deadline
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    # ------------------------------------------------------------------
    # Generic HTTP helpers
    # ------------------------------------------------------------------

    def _read_body(self, response: Any, started: float, method: str, path: str) -> bytes:
        """Read the streamed body, aborting once the call deadline passes."""
        body = bytearray()
        try:
            for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
                if time.monotonic() - started > self._deadline:
                    raise TransportError(
                        f"{method.upper()} {path} exceeded {self._deadline}s deadline",
                        status_code=response.status_code,
                    )
                body.extend(chunk)
        except requests.RequestException as exc:
            raise TransportError(f"{method.upper()} {path} failed: {exc}") from exc
        finally:
            response.close()
        return bytes(body)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Send an HTTP request and return the ``result`` member.

        Raises
        ------
        TransportError
            On network-level failures, an exceeded deadline and non-JSON
            error statuses.
        DecodeError
            If the body is not a JSON object.
        ProviderRejection
            If Kraken reports an error.
        """
        url = f"{self._base_url}{path}"
        logger.debug("REQUEST  %s %s params=%s", method.upper(), url, params)

        started = time.monotonic()
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=self._timeout,
                stream=True,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{method.upper()} {path} failed: {exc}") from exc

        raw = self._read_body(response, started, method, path)
        text = raw.decode("utf-8", errors="replace")

        logger.debug(
            "RESPONSE %s %s status=%s body=%s",
            method.upper(),
            url,
            response.status_code,
            text[:2000],
        )

        try:
            body = json.loads(raw)
        except ValueError as exc:
            if response.status_code >= 400:
                raise TransportError(
                    f"HTTP {response.status_code}: {text[:200]}",
                    status_code=response.status_code,
                ) from exc
            raise DecodeError(f"failed to decode response body: {exc}") from exc

        if not isinstance(body, dict):
            raise DecodeError(f"unexpected response body: {body!r}")

        raise_for_provider_errors(body.get("error"))

        if response.status_code >= 400:
            raise TransportError(f"HTTP {response.status_code}", status_code=response.status_code)

        result = body.get("result")
        if not isinstance(result, dict):
            raise DecodeError(f"response has no result object: {body!r}")
        return result

    def _private(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Sign and POST *params* (which must include ``nonce``) to *path*."""
        if not self._api_key or not self._secret_key:
            raise ValidationError("API key and secret are required for private calls.")
        nonce = int(params["nonce"])
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "API-Key": self._api_key,
            "API-Sign": sign(path, params, nonce, self._secret_key),
        }
        return self._request("POST", path, data=encode_form(params), headers=headers)

    # ------------------------------------------------------------------
    # Public endpoints
    # ------------------------------------------------------------------

    def ping(self) -> int:
        """Fetch Kraken's server time; returns the unix timestamp."""
        with error_context("kraken.client.ping"):
            result = self._request("GET", TIME_PATH)
            try:
                unixtime = int(result["unixtime"])
            except (KeyError, TypeError, ValueError):
                raise DecodeError(f"unexpected time result: {result!r}")
        logger.info("Ping successful: server time %s", unixtime)
        return unixtime

    def fetch_ask_price(self) -> float:
        """Return the current best ask price for BTC/USD."""
        with error_context("kraken.client.fetch_ask_price"):
            result = self._request("GET", TICKER_PATH, params={"pair": BTC_USD_PAIR})
            try:
                asks = result[BTC_USD_RESULT_KEY]["a"]
            except (KeyError, TypeError):
                raise DecodeError(f"ticker result has no ask price: {result!r}")
            return parse_quote(_first(asks, "ask price"))

    def fetch_buy_volume(self, amount_in_cents: int) -> float:
        """Find the amount of BTC that *amount_in_cents* US cents buys."""
        with error_context("kraken.client.fetch_buy_volume"):
            amount = validate_amount(amount_in_cents)
            logger.info("Fetching buy volume for %s cents", amount)
            quote = self.fetch_ask_price()
            volume = compute_volume(amount, quote)
        logger.info("Ask price %s -> volume %s", quote, format_volume(volume))
        return volume

    # ------------------------------------------------------------------
    # Trading endpoints
    # ------------------------------------------------------------------

    def add_order(self, volume: float) -> PlacementResult:
        """Place a market buy order for *volume* BTC (POST /0/private/AddOrder)."""
        with error_context("kraken.client.add_order"):
            volume = validate_volume(volume)
            params = {
                "pair": BTC_USD_PAIR,
                "type": "buy",
                "volume": format_volume(volume),
                "ordertype": "market",
                "nonce": self._nonces.next(),
            }
            logger.info("Placing market buy order: pair=%s volume=%s", BTC_USD_PAIR, params["volume"])
            result = self._private(ADD_ORDER_PATH, params)
            try:
                placement = PlacementResult(
                    transaction_id=str(_first(result["txid"], "txid")),
                    description=str(result["descr"]["order"]),
                )
            except (KeyError, TypeError):
                raise DecodeError(f"unexpected add order result: {result!r}")
        logger.info("Order placed: txid=%s descr=%s", placement.transaction_id, placement.description)
        return placement

    def query_order(self, transaction_id: str) -> OrderInfo:
        """Fetch settlement details of *transaction_id* (POST /0/private/QueryOrders)."""
        with error_context("kraken.client.query_order"):
            params = {
                "txid": transaction_id,
                "trades": "true",
                "nonce": self._nonces.next(),
            }
            result = self._private(QUERY_ORDERS_PATH, params)
            order = result.get(transaction_id)
            if not isinstance(order, dict):
                raise DecodeError(f"order {transaction_id} missing from query result")
            info = OrderInfo(
                price=_parse_field(order, "price"),
                cost=_parse_field(order, "cost"),
                fee=_parse_field(order, "fee"),
                volume_purchased=_parse_field(order, "vol"),
            )
        logger.info(
            "Order info: txid=%s price=%s cost=%s fee=%s vol=%s",
            transaction_id,
            info.price,
            info.cost,
            info.fee,
            info.volume_purchased,
        )
        return info


def _parse_field(order: Dict[str, Any], field: str) -> float:
    value = order.get(field)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise OrderInfoParseError(field, value)


def _first(values: Any, name: str) -> Any:
    """First element of a non-empty JSON array, else ``DecodeError``."""
    if not isinstance(values, list) or not values:
        raise DecodeError(f"expected a non-empty list for {name}, got {values!r}")
    return values[0]
