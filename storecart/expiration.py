"""
Order expiration.

A finalized order stamps its creation time (epoch ms) into the store. Once
that record is at least TTL old, the cart and the order are discarded. The
check runs once when the cart loads and then periodically from the scheduler.
"""
import time
from typing import Callable, Optional

from storecart.config import TTL
from storecart.logging import get_logger
from storecart.notifications import Notification, Notifier, Severity, log_notifier
from storecart.store import PersistentStore, StoreKeys

logger = get_logger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def expired_message(ttl_ms: int) -> str:
    hours = ttl_ms / 3_600_000
    label = f"{hours:g} hours" if hours != 1 else "1 hour"
    return f"Previous order was removed automatically ({label} passed)"


class ExpirationPolicy:
    """Clears cart and order state once the last order is older than the TTL."""

    def __init__(
        self,
        store: PersistentStore,
        keys: StoreKeys,
        clear: Callable[[], None],
        ttl_ms: int = TTL.ORDER,
        clock: Clock = now_ms,
        notifier: Notifier = log_notifier,
    ) -> None:
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")
        self.store = store
        self.keys = keys
        self.ttl_ms = ttl_ms
        self.clock = clock
        self._clear = clear
        self._notify = notifier

    def recorded_at(self) -> Optional[int]:
        """
        Timestamp of the last finalized order.

        Returns:
            Epoch ms, None if no order is tracked, or -1 if the record is unreadable
        """
        raw = self.store.get(self.keys.order_time)
        if raw is None or raw == "":
            return None
        try:
            return int(raw.strip())
        except ValueError:
            logger.warning(f"Unreadable order timestamp {raw!r}, treating as expired")
            return -1

    def is_expired(self, now: Optional[int] = None) -> bool:
        recorded = self.recorded_at()
        if recorded is None:
            return False
        if recorded < 0:
            return True
        current = self.clock() if now is None else now
        return current - recorded >= self.ttl_ms

    def check(self, now: Optional[int] = None) -> bool:
        """
        Clear stale state if the order record has expired.

        Returns:
            True if state was cleared

        Raises:
            StorageFailure: If the store cannot be read or cleared
        """
        if not self.is_expired(now):
            return False

        logger.info("Order TTL elapsed, clearing cart and last order")
        self._clear()
        self.store.remove(self.keys.last_order)
        self.store.remove(self.keys.order_time)
        self._notify(Notification(expired_message(self.ttl_ms), Severity.WARNING))
        return True
