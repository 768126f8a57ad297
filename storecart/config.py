"""
Runtime configuration.

All settings come from environment variables; defaults are the storefront's
standard behaviour (10 hour order TTL, one-minute expiration check, flat
30 EGP delivery fee).
"""
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation


# TTL constants (milliseconds unless noted)
class TTL:
    """Time-to-live constants for the order lifecycle."""

    ORDER = 36_000_000  # 10 hours
    EXPIRATION_CHECK_SECONDS = 60  # periodic check, seconds


DEFAULT_DELIVERY_FEE = Decimal("30")
DEFAULT_CURRENCY_LABEL = "EGP"
DEFAULT_ORDER_ID_PREFIX = "ORD-"
DEFAULT_KEY_PREFIX = "yakebda_"
DEFAULT_STORE_FILE = ".storecart.json"

BACKENDS = ("memory", "file", "redis")


@dataclass(frozen=True)
class Settings:
    """Resolved storecart settings."""
    backend: str = "file"
    store_file: str = DEFAULT_STORE_FILE
    key_prefix: str = DEFAULT_KEY_PREFIX
    redis_url: str = ""
    redis_token: str = ""
    order_ttl_ms: int = TTL.ORDER
    expiration_check_interval: float = TTL.EXPIRATION_CHECK_SECONDS
    delivery_fee: Decimal = DEFAULT_DELIVERY_FEE
    currency_label: str = DEFAULT_CURRENCY_LABEL
    order_id_prefix: str = DEFAULT_ORDER_ID_PREFIX
    order_webhook_url: str = ""


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if not value.is_finite() or value < 0:
        raise ValueError(f"{name} must be a non-negative number")
    return value


def load_settings() -> Settings:
    """
    Build settings from the environment.

    Raises:
        ValueError: If a numeric variable is malformed or the backend is unknown
    """
    backend = os.environ.get("STORECART_BACKEND", "file").lower()
    if backend not in BACKENDS:
        raise ValueError(f"STORECART_BACKEND must be one of {', '.join(BACKENDS)}")

    return Settings(
        backend=backend,
        store_file=os.environ.get("STORECART_FILE", DEFAULT_STORE_FILE),
        key_prefix=os.environ.get("STORECART_KEY_PREFIX", DEFAULT_KEY_PREFIX),
        redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
        redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
        order_ttl_ms=_env_int("ORDER_TTL_MS", TTL.ORDER),
        expiration_check_interval=_env_float(
            "EXPIRATION_CHECK_INTERVAL", TTL.EXPIRATION_CHECK_SECONDS
        ),
        delivery_fee=_env_decimal("DELIVERY_FEE", DEFAULT_DELIVERY_FEE),
        currency_label=os.environ.get("CURRENCY_LABEL", DEFAULT_CURRENCY_LABEL),
        order_id_prefix=os.environ.get("ORDER_ID_PREFIX", DEFAULT_ORDER_ID_PREFIX),
        order_webhook_url=os.environ.get("ORDER_WEBHOOK_URL", ""),
    )
