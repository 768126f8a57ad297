"""
Logging for storecart.

Every module logs through get_logger(__name__). The root handler is set up
once on import: LOG_LEVEL picks the level, and STORECART_ENV=production drops
timestamps for hosts that add their own.

Item and customer names come straight from the storefront form, so they go
through sanitize_string_for_logging before reaching a log line.

Usage:
    from storecart.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Cart loaded")
    logger.error("Failed to save cart", exc_info=True)
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

NAME_LOG_LIMIT = 50


def _level_from_env() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _configure_root_logger() -> None:
    """Attach the stdout handler unless the host already configured logging."""
    root = logging.getLogger()
    if root.handlers:
        return

    level = _level_from_env()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    production = os.environ.get("STORECART_ENV") == "production"
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if production else LOG_FORMAT))
    root.addHandler(handler)

    # Upstash and webhook submission go through httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


_configure_root_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    """Logger for a storecart module (pass __name__)."""
    return logging.getLogger(name)


def _escape_control_chars(value: str) -> str:
    # A newline in a product name must not start a fake log entry
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_string_for_logging(value: str | None, max_length: int = NAME_LOG_LIMIT) -> str:
    """
    Make a storefront-supplied name safe to log.

    Control characters are escaped and long names are cut to max_length
    with a trailing "...". Empty values log as "N/A".
    """
    if not value:
        return "N/A"
    safe_value = _escape_control_chars(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "get_logger",
    "sanitize_string_for_logging",
]
