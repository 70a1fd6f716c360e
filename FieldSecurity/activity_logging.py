"""
CRYPTO ACTIVITY LOGGING
=======================
Structured logging for degraded reads and crypto failures.

FLOW:
- configure_crypto_logging() is called once by the bootstrap.
- Modules log through the "security.crypto" logger.

WHY:
- Degraded reads return data without raising; the log is the only signal.

HOW:
- Writes to <log_dir>/security.log with a rotating file handler.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler


LOGGER_NAME = "security.crypto"


def get_crypto_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def configure_crypto_logging(log_dir: str | None) -> logging.Logger:
    logger = get_crypto_logger()
    logger.setLevel(logging.INFO)
    if not log_dir:
        return logger

    log_path = os.path.abspath(os.path.join(log_dir, "security.log"))
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == log_path:
            return logger

    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(log_path, maxBytes=2_000_000, backupCount=3)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    return logger
