"""
storecart - storefront shopping cart core

This package contains:
- store: persistent key-value backends (Redis, file, memory)
- cart: line items and the persisted cart state
- expiration: order TTL eviction
- checkout: validation, finalization, webhook submission
- session: the facade the storefront UI calls
- app: FastAPI surface

Note: Imports are lazy so importing the package does not pull in FastAPI.
"""

__all__ = [
    "CartSession",
    "CartState",
    "LineItem",
    "Order",
    "load_settings",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "CartSession":
        from storecart.session import CartSession
        return CartSession
    elif name == "CartState":
        from storecart.cart import CartState
        return CartState
    elif name == "LineItem":
        from storecart.cart import LineItem
        return LineItem
    elif name == "Order":
        from storecart.checkout import Order
        return Order
    elif name == "load_settings":
        from storecart.config import load_settings
        return load_settings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
