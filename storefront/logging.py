"""
Logging setup for the storefront client.

Everything under the ``storefront`` namespace logs through one stdout handler
installed on first import. Applications that configure logging themselves
(any handler already on the root logger) are left alone.

Usage:
    from storefront.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Cart synced: %d line(s)", count)
    logger.warning("Catalog lookup for %s failed", sanitize_id_for_logging(product_id))
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Chatty transport loggers, raised to WARNING so cart traffic stays readable
_QUIET_LOGGERS = ("httpx", "httpcore")

# Control characters are rendered visibly or dropped (CWE-117)
_LOG_ESCAPES = {ord("\n"): "\\n", ord("\r"): "\\r", ord("\t"): "\\t"}
_LOG_ESCAPES.update({code: None for code in range(32) if code not in _LOG_ESCAPES})
_LOG_ESCAPES[0x7F] = None


def _level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> None:
    """Install the stdout handler unless the host application already did."""
    root = logging.getLogger()
    if root.handlers:
        return

    level = _level_from_env()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    # Release builds log without timestamps; the platform adds its own
    production = os.environ.get("STOREFRONT_ENV") == "production"
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if production else LOG_FORMAT))
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass ``__name__``."""
    return logging.getLogger(name)


def _escape(value) -> str:
    return str(value).translate(_LOG_ESCAPES)


def sanitize_id_for_logging(id_value: str | None, length: int = 8) -> str:
    """
    Shorten a product or user id before it goes into a log line.

    Ids come from the server, so they are escaped as well as truncated.

    Returns:
        First ``length`` characters of the escaped id, or "N/A"
    """
    if not id_value:
        return "N/A"
    return _escape(id_value)[:length]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """
    Escape and truncate free-form text (server messages, error strings).

    Returns:
        Escaped text, cut at ``max_length`` with a trailing "...", or "N/A"
    """
    if not value:
        return "N/A"
    safe = _escape(value)
    if len(safe) > max_length:
        return safe[:max_length] + "..."
    return safe


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
