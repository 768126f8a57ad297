"""Checkout package: validation, finalization and order submission."""
from .models import NO_NOTES, CustomerInfo, Order, OrderItem
from .validator import validate_checkout
from .finalizer import OrderFinalizer, make_order_id
from .submit import OrderSubmitter

__all__ = [
    "NO_NOTES",
    "CustomerInfo",
    "Order",
    "OrderItem",
    "validate_checkout",
    "OrderFinalizer",
    "make_order_id",
    "OrderSubmitter",
]
