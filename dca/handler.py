"""Scheduled (serverless) entry point.

Configure the function handler as ``dca.handler.handle_request`` and point
``CONFIG_FILE`` at a config file or a Parameter Store reference.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from dca.app import run
from dca.config import CONFIG_ENV_VAR, load_config
from dca.errors import ConfigError, DCAError
from dca.logging_config import setup_logging
from dca.models import BuildInfo

logger = logging.getLogger("dca.handler")

BUILD_INFO = BuildInfo.current()


def handle_request(event: Any, context: Any = None) -> str:
    """Run one purchase; raise on any failure so the scheduler records it."""
    setup_logging(log_file=None)
    logger.info("Processing scheduled event: %s", event)

    config_file = os.getenv(CONFIG_ENV_VAR, "")
    if not config_file:
        raise ConfigError("no configuration file provided")

    try:
        config = load_config(config_file)
        run(config, BUILD_INFO)
    except DCAError as exc:
        logger.error("Error running purchase: %s", exc)
        raise

    return "Successfully processed messages"
