"""Logging configuration for the DCA bot.

Sets up dual logging: a rotating file handler for persistent logs and a
console handler for real-time feedback.  Serverless runs pass
``log_file=None`` and get the console handler only.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "logs")
LOG_FILE = os.path.join(LOG_DIR, "dca.log")

# Maximum log file size: 5 MB, keep 3 backups
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int = logging.DEBUG, log_file: Optional[str] = LOG_FILE) -> logging.Logger:
    """Initialise and return the ``dca`` package logger.

    Parameters
    ----------
    level : int
        Logging level for the file handler.  The console handler always
        uses INFO to avoid flooding the terminal.
    log_file : str or None
        Rotating log file path; ``None`` disables file logging.

    Returns
    -------
    logging.Logger
        Configured logger for the ``dca`` package.
    """
    logger = logging.getLogger("dca")
    logger.setLevel(level)

    # Prevent duplicate handlers on repeated calls
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_file:
        os.makedirs(os.path.dirname(log_file), exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def disable_logging() -> None:
    """Silence the ``dca`` package and its child loggers (``enableLogging: false``)."""
    logging.getLogger("dca").setLevel(logging.CRITICAL + 1)
