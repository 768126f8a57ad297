"""Cart state persisted to the key-value store."""
import json
from decimal import Decimal
from typing import Optional

from storecart.config import DEFAULT_CURRENCY_LABEL, DEFAULT_DELIVERY_FEE, TTL
from storecart.errors import (
    ERROR_CART_CORRUPT,
    ERROR_CART_SAVE,
    CartError,
    CorruptCartData,
    InvalidIndex,
    StorageFailure,
)
from storecart.expiration import Clock, ExpirationPolicy, now_ms
from storecart.logging import get_logger, sanitize_string_for_logging
from storecart.money import format_money, to_decimal, to_float
from storecart.notifications import Notification, Notifier, Severity, log_notifier
from storecart.store import PersistentStore, StoreKeys
from .models import LineItem, Totals

logger = get_logger(__name__)


class CartState:
    """
    Ordered line items for the current session.

    Every mutation writes the whole cart back to the store. If that write
    fails, the in-memory cart is rolled back and StorageFailure is raised, so
    memory and store never diverge.

    Usage:
        cart = CartState(store)
        cart.load()
        cart.add_item("Koshary", 45, "img/koshary.jpg")
        cart.totals().total
    """

    def __init__(
        self,
        store: PersistentStore,
        keys: Optional[StoreKeys] = None,
        delivery_fee: Decimal = DEFAULT_DELIVERY_FEE,
        notifier: Notifier = log_notifier,
        ttl_ms: int = TTL.ORDER,
        clock: Clock = now_ms,
        currency_label: str = DEFAULT_CURRENCY_LABEL,
    ):
        self.store = store
        self.keys = keys or StoreKeys()
        self.delivery_fee = to_decimal(delivery_fee)
        self.currency_label = currency_label
        self.notify = notifier
        self.expiration = ExpirationPolicy(
            store, self.keys, clear=self.clear, ttl_ms=ttl_ms, clock=clock, notifier=notifier
        )
        self.last_load_error: Optional[CartError] = None
        self._items: list[LineItem] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def items(self) -> tuple[LineItem, ...]:
        """Snapshot of the line items, in insertion order."""
        return tuple(item.copy() for item in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def item_count(self) -> int:
        """Total number of units in the cart."""
        return sum(item.quantity for item in self._items)

    def totals(self) -> Totals:
        return Totals.for_items(self._items, self.delivery_fee)

    def summary(self) -> dict:
        """Cart summary for rendering."""
        totals = self.totals()
        label = self.currency_label
        return {
            "is_empty": self.is_empty(),
            "item_count": self.item_count(),
            "items": [
                {
                    "index": index,
                    "name": item.name,
                    "image": item.image,
                    "quantity": item.quantity,
                    "unit_price": to_float(item.unit_price),
                    "total": to_float(item.total_price),
                    "total_display": format_money(item.total_price, label),
                }
                for index, item in enumerate(self._items)
            ],
            "subtotal": to_float(totals.subtotal),
            "delivery": to_float(totals.delivery),
            "total": to_float(totals.total),
            "subtotal_display": format_money(totals.subtotal, label),
            "delivery_display": format_money(totals.delivery, label),
            "total_display": format_money(totals.total, label),
        }

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> tuple[LineItem, ...]:
        """
        Hydrate the cart from the store, then run the expiration check.

        Corrupt data is discarded and reported through the notifier and
        last_load_error; it is never raised.
        """
        self.last_load_error = None
        self._items = []

        try:
            raw = self.store.get(self.keys.cart)
        except StorageFailure as e:
            logger.error(f"Failed to read cart: {e}")
            self._report(e)
            raw = None

        if raw:
            try:
                self._items = self._parse(raw)
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Corrupted cart data, resetting: {e}")
                self._discard_corrupt()
                self._report(CorruptCartData(f"{ERROR_CART_CORRUPT}: {e}"), ERROR_CART_CORRUPT)

        try:
            self.expiration.check()
        except StorageFailure as e:
            logger.error(f"Expiration check failed during load: {e}")
            self._report(e)

        logger.debug(f"Cart loaded with {self.item_count()} units")
        return self.items

    @staticmethod
    def _parse(raw: str) -> list[LineItem]:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("stored cart must be a JSON array")

        merged: list[LineItem] = []
        by_name: dict[str, LineItem] = {}
        for entry in data:
            item = LineItem.from_dict(entry)
            existing = by_name.get(item.name)
            if existing:
                existing.quantity += item.quantity
            else:
                by_name[item.name] = item
                merged.append(item)
        return merged

    def _discard_corrupt(self) -> None:
        try:
            self.store.remove(self.keys.cart)
        except StorageFailure as e:
            logger.error(f"Failed to remove corrupt cart: {e}")

    def _report(self, error: CartError, message: Optional[str] = None) -> None:
        self.last_load_error = error
        self.notify(Notification(message or str(error), Severity.ERROR))

    def _save(self, previous: list[LineItem]) -> None:
        payload = json.dumps([item.to_dict() for item in self._items], ensure_ascii=False)
        try:
            self.store.set(self.keys.cart, payload)
        except StorageFailure:
            self._items = previous
            self.notify(Notification(ERROR_CART_SAVE, Severity.ERROR))
            raise

    def _snapshot(self) -> list[LineItem]:
        return [item.copy() for item in self._items]

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._items):
            raise InvalidIndex(index, len(self._items))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_item(self, name: str, price, image: str = "") -> LineItem:
        """
        Add one unit of a product, merging by name.

        Raises:
            ValueError: If name or price is invalid
            StorageFailure: If the cart cannot be saved
        """
        candidate = LineItem(name=name, unit_price=price, image=image, quantity=1)
        previous = self._snapshot()

        existing = next((item for item in self._items if item.name == candidate.name), None)
        if existing:
            existing.quantity += 1
            result = existing
        else:
            self._items.append(candidate)
            result = candidate

        self._save(previous)
        logger.info(f"Added {sanitize_string_for_logging(candidate.name)} (qty {result.quantity})")
        self.notify(Notification(f"Added {candidate.name} to cart", Severity.SUCCESS))
        return result.copy()

    def increase_quantity(self, index: int) -> LineItem:
        self._check_index(index)
        previous = self._snapshot()
        self._items[index].quantity += 1
        self._save(previous)
        return self._items[index].copy()

    def decrease_quantity(self, index: int) -> Optional[LineItem]:
        """
        Remove one unit; the last unit removes the item.

        Returns:
            The updated item, or None if it was removed
        """
        self._check_index(index)
        if self._items[index].quantity <= 1:
            self.remove_item(index)
            return None

        previous = self._snapshot()
        self._items[index].quantity -= 1
        self._save(previous)
        return self._items[index].copy()

    def remove_item(self, index: int) -> LineItem:
        """Remove the item at index. Confirmation is the caller's job."""
        self._check_index(index)
        previous = self._snapshot()
        removed = self._items.pop(index)
        self._save(previous)
        logger.info(f"Removed {sanitize_string_for_logging(removed.name)} from cart")
        return removed

    def clear(self) -> None:
        """
        Empty the cart and drop the cart and order-time keys. Idempotent.

        The in-memory cart is emptied as soon as the stored cart is gone, even
        if dropping the order time fails afterwards.
        """
        self._remove_key(self.keys.cart)
        self._items = []
        self._remove_key(self.keys.order_time)
        self.notify(Notification("Cart cleared", Severity.SUCCESS))

    def _remove_key(self, key: str) -> None:
        try:
            self.store.remove(key)
        except StorageFailure:
            self.notify(Notification(ERROR_CART_SAVE, Severity.ERROR))
            raise
