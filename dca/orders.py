"""Order placement logic.

Bridges a validated ``PurchaseRequest`` and the low-level ``KrakenClient``:
price lookup, volume conversion, market buy and, optionally, the settlement
query.  Any failure aborts the whole call; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Optional

from dca.client import KrakenClient
from dca.errors import error_context
from dca.models import OrderInfo, OrderResult, PurchaseRequest

logger = logging.getLogger("dca.orders")


def place_order(
    client: KrakenClient,
    request: PurchaseRequest,
    query_info: bool = True,
) -> OrderResult:
    """Buy roughly ``request.amount_in_cents`` worth of BTC.

    Parameters
    ----------
    client : KrakenClient
        Authenticated client instance.
    request : PurchaseRequest
        Validated purchase amount.
    query_info : bool
        Also fetch the executed price, cost, fee and volume.

    Returns
    -------
    OrderResult
        Volume requested, the placement and (if queried) its settlement.

    Raises
    ------
    dca.errors.DCAError
        On any failure, labelled with ``kraken.place_order``.
    """
    with error_context("kraken.place_order"):
        volume = client.fetch_buy_volume(request.amount_in_cents)
        placement = client.add_order(volume)

        info: Optional[OrderInfo] = None
        if query_info:
            info = client.query_order(placement.transaction_id)

    logger.info(
        "Order complete: txid=%s volume=%s%s",
        placement.transaction_id,
        volume,
        f" cost={info.cost} fee={info.fee}" if info else "",
    )
    return OrderResult(volume=volume, placement=placement, info=info)
