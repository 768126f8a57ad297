"""Order finalization: snapshot the cart into an immutable Order."""
import json
from typing import Optional

from storecart.cart.service import CartState
from storecart.config import DEFAULT_ORDER_ID_PREFIX
from storecart.errors import CheckoutValidationError, StorageFailure, ValidationKind
from storecart.logging import get_logger, sanitize_string_for_logging
from storecart.scheduler import Scheduler
from .models import CustomerInfo, Order, OrderItem

logger = get_logger(__name__)

ORDER_ID_DIGITS = 8


def make_order_id(created_at: int, prefix: str = DEFAULT_ORDER_ID_PREFIX) -> str:
    """
    Order id from the creation instant: prefix + last 8 digits of epoch ms.

    Two checkouts in the same millisecond (or exactly 10^8 ms apart) share an id.
    """
    return f"{prefix}{str(created_at)[-ORDER_ID_DIGITS:]}"


class OrderFinalizer:
    """
    Turns a validated cart into the session's single tracked order.

    The cart is not cleared on finalization. An expiration check is scheduled
    for when the order TTL elapses; it re-reads the stored order time, so a
    timer left over from an earlier order does nothing. The periodic check
    covers the same boundary if the timer is lost (e.g. after a restart).
    """

    def __init__(
        self,
        cart: CartState,
        scheduler: Optional[Scheduler] = None,
        order_id_prefix: str = DEFAULT_ORDER_ID_PREFIX,
    ):
        self.cart = cart
        self.scheduler = scheduler
        self.order_id_prefix = order_id_prefix

    @property
    def store(self):
        return self.cart.store

    @property
    def keys(self):
        return self.cart.keys

    def finalize(self, customer: CustomerInfo) -> Order:
        """
        Build, persist and return the order for the current cart.

        Raises:
            CheckoutValidationError: If the cart is empty
            StorageFailure: If the order cannot be persisted
        """
        if self.cart.is_empty():
            raise CheckoutValidationError(ValidationKind.EMPTY_CART)

        totals = self.cart.totals()
        created_at = self.cart.expiration.clock()
        order = Order(
            order_id=make_order_id(created_at, self.order_id_prefix),
            items=tuple(OrderItem.from_line_item(item) for item in self.cart.items),
            customer=customer,
            subtotal=totals.subtotal,
            delivery_fee=totals.delivery,
            total=totals.total,
            created_at=created_at,
        )

        self._persist(order)
        self._schedule_expiration()

        logger.info(
            f"Order {order.order_id} finalized for {sanitize_string_for_logging(customer.full_name)}: "
            f"{order.item_count} units, total {order.total}"
        )
        return order

    def _persist(self, order: Order) -> None:
        previous = self.store.get(self.keys.last_order)
        self.store.set(self.keys.last_order, json.dumps(order.to_dict(), ensure_ascii=False))
        try:
            self.store.set(self.keys.order_time, str(order.created_at))
        except StorageFailure:
            # Keep order and expiration record consistent
            try:
                if previous is None:
                    self.store.remove(self.keys.last_order)
                else:
                    self.store.set(self.keys.last_order, previous)
            except StorageFailure as e:
                logger.error(f"Failed to restore previous order after write error: {e}")
            raise

    def _schedule_expiration(self) -> None:
        if self.scheduler is None:
            logger.debug("No scheduler attached, relying on periodic expiration check")
            return
        delay = self.cart.expiration.ttl_ms / 1000
        self.scheduler.call_later(delay, self.cart.expiration.check)

    def last_order(self) -> Optional[Order]:
        """The persisted last order, or None if absent or unreadable."""
        raw = self.store.get(self.keys.last_order)
        if not raw:
            return None
        try:
            return Order.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Stored last order is unreadable: {e}")
            return None
