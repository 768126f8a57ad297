"""Cart package: line item models and the persisted cart state."""
from .models import LineItem, Totals
from .service import CartState

__all__ = [
    "LineItem",
    "Totals",
    "CartState",
]
