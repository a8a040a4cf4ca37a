"""
Logging setup for shopcart.

Usage:
    from shopcart.logging import get_logger
    logger = get_logger(__name__)

The root logger is configured once, on first import, unless the host
application already installed handlers. LOG_LEVEL picks the level and
LOG_FORMAT=simple drops timestamps.
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Libraries whose request-level chatter stays below WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "upstash_redis")


def configure_logging(level: str | None = None) -> None:
    """Install a stdout handler on the root logger if it has none."""
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    simple = os.environ.get("LOG_FORMAT", "").lower() == "simple"
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if simple else LOG_FORMAT))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _escape(value: str) -> str:
    """Neutralize characters that could forge log lines (CWE-117)."""
    return value.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t").replace("\x00", "")


def sanitize_id_for_logging(id_value: str | None) -> str:
    """
    First 8 characters of an identifier such as a VAT number or order id.

    Returns "N/A" for empty values.
    """
    if not id_value:
        return "N/A"
    return _escape(str(id_value))[:8]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """SKU or path from a product page, escaped and truncated to max_length."""
    if not value:
        return "N/A"
    safe_value = _escape(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
