"""
Cart Session - the boundary the storefront UI talks to.

Owns one CartState, its ExpirationPolicy, the OrderFinalizer and the
Scheduler. Presentation code calls these methods and re-renders from the
returned state; it never touches the store directly.

Usage:
    session = CartSession.from_settings(load_settings())
    session.start()  # inside a running event loop
    session.add_item("Koshary", 45, "img/koshary.jpg")
    order = session.checkout("Mona Adel", "01012345678", "12 Tahrir St")
    await session.submit_order(order)
"""
from typing import Optional

from storecart.cart import CartState, LineItem, Totals
from storecart.checkout import CustomerInfo, Order, OrderFinalizer, OrderSubmitter, validate_checkout
from storecart.config import Settings, load_settings
from storecart.errors import CheckoutValidationError
from storecart.expiration import Clock, now_ms
from storecart.logging import get_logger
from storecart.notifications import Notification, Notifier, Severity, log_notifier
from storecart.scheduler import Scheduler
from storecart.store import PersistentStore, StoreKeys, create_store

logger = get_logger(__name__)

ORDER_PLACED_MESSAGE = "Order placed successfully! We will contact you soon"


class CartSession:
    """Single owner of the session's cart and order state."""

    def __init__(
        self,
        store: PersistentStore,
        settings: Optional[Settings] = None,
        notifier: Notifier = log_notifier,
        scheduler: Optional[Scheduler] = None,
        clock: Clock = now_ms,
        submitter: Optional[OrderSubmitter] = None,
    ):
        self.settings = settings or Settings()
        self.notify = notifier
        self.scheduler = scheduler
        self.cart = CartState(
            store,
            keys=StoreKeys(self.settings.key_prefix),
            delivery_fee=self.settings.delivery_fee,
            notifier=notifier,
            ttl_ms=self.settings.order_ttl_ms,
            clock=clock,
            currency_label=self.settings.currency_label,
        )
        self.finalizer = OrderFinalizer(
            self.cart, scheduler=scheduler, order_id_prefix=self.settings.order_id_prefix
        )
        self.submitter = submitter or OrderSubmitter(self.settings.order_webhook_url)
        self._started = False

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        notifier: Notifier = log_notifier,
        scheduler: Optional[Scheduler] = None,
    ) -> "CartSession":
        settings = settings or load_settings()
        return cls(create_store(settings), settings=settings, notifier=notifier, scheduler=scheduler)

    @property
    def expiration(self):
        return self.cart.expiration

    def attach_scheduler(self, scheduler: Scheduler) -> None:
        """Use scheduler for TTL and periodic timers (call before start)."""
        self.scheduler = scheduler
        self.finalizer.scheduler = scheduler

    def start(self) -> None:
        """Load the persisted cart and start the periodic expiration check."""
        if self._started:
            return
        self._started = True
        self.cart.load()
        if self.scheduler is not None:
            self.scheduler.call_every(self.settings.expiration_check_interval, self.check_expiration)
        logger.info(f"Cart session started with {self.cart.item_count()} units")

    def check_expiration(self) -> bool:
        return self.expiration.check()

    # ---- cart operations ----

    def add_item(self, name: str, price, image: str = "") -> LineItem:
        return self.cart.add_item(name, price, image)

    def increase_quantity(self, index: int) -> LineItem:
        return self.cart.increase_quantity(index)

    def decrease_quantity(self, index: int) -> Optional[LineItem]:
        return self.cart.decrease_quantity(index)

    def remove_item(self, index: int) -> LineItem:
        return self.cart.remove_item(index)

    def totals(self) -> Totals:
        return self.cart.totals()

    def item_count(self) -> int:
        return self.cart.item_count()

    def clear(self) -> None:
        self.cart.clear()

    # ---- checkout ----

    def validate_checkout(
        self,
        full_name: Optional[str],
        phone: Optional[str],
        address: Optional[str],
        notes: Optional[str] = "",
    ) -> CustomerInfo:
        """
        Validate the checkout form.

        Raises:
            CheckoutValidationError: After raising an error notification
        """
        try:
            return validate_checkout(self.cart.items, full_name, phone, address, notes)
        except CheckoutValidationError as e:
            self.notify(Notification(e.message, Severity.ERROR))
            raise

    def finalize_order(self, customer: CustomerInfo) -> Order:
        order = self.finalizer.finalize(customer)
        self.notify(Notification(ORDER_PLACED_MESSAGE, Severity.SUCCESS))
        return order

    async def submit_order(self, order: Order) -> bool:
        """Forward a finalized order to the webhook, if one is configured."""
        if not self.submitter.enabled:
            return False
        return await self.submitter.submit(order)

    def checkout(
        self,
        full_name: Optional[str],
        phone: Optional[str],
        address: Optional[str],
        notes: Optional[str] = "",
    ) -> Order:
        """Validate the form and finalize the order in one step."""
        customer = self.validate_checkout(full_name, phone, address, notes)
        return self.finalize_order(customer)

    def last_order(self) -> Optional[Order]:
        return self.finalizer.last_order()

    def shutdown(self) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown()
