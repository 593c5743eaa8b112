"""Runs one purchase from a loaded ``AppConfig``.

Shared by the CLI and the scheduled handler.
"""

from __future__ import annotations

import logging
from typing import Optional

from dca.client import KrakenClient
from dca.config import AppConfig
from dca.logging_config import disable_logging
from dca.models import BuildInfo, OrderResult
from dca.orders import place_order
from dca.validators import validate_purchase

logger = logging.getLogger("dca.app")


def build_client(config: AppConfig) -> KrakenClient:
    return KrakenClient(api_key=config.kraken_api_key, secret_key=config.kraken_private_key)


def run(config: AppConfig, build_info: BuildInfo, client: Optional[KrakenClient] = None) -> OrderResult:
    """Place the configured market buy and return its result."""
    if not config.enable_logging:
        disable_logging()

    logger.info(
        "Starting process: version=%s commit=%s date=%s",
        build_info.version,
        build_info.commit,
        build_info.date,
    )

    client = client or build_client(config)
    request = validate_purchase(config.order_amount_in_cents)
    result = place_order(client, request, query_info=config.query_order_info)

    logger.info("Order successfully placed: %s", result)
    return result
