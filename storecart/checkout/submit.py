"""
Order webhook submission.

When ORDER_WEBHOOK_URL is set, a finalized order is forwarded as JSON so the
shop can pick it up. The order is already persisted locally, so a failed
submission is logged and never undoes the checkout. Submission is async and
runs on the serving loop without blocking timers or other requests.
"""
import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from storecart.logging import get_logger
from .models import Order

logger = get_logger(__name__)


class OrderSubmitter:
    """Posts finalized orders to a webhook."""

    def __init__(self, url: str, timeout: float = 10.0, client: httpx.AsyncClient | None = None):
        self.url = url
        self.timeout = timeout
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _post(self, payload: dict) -> httpx.Response:
        if self._client is not None:
            response = await self._client.post(self.url, json=payload, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload)
        response.raise_for_status()
        return response

    async def submit(self, order: Order) -> bool:
        """
        Send the order. Returns True on a 2xx response.
        """
        if not self.enabled:
            return False
        try:
            await self._post(order.to_dict())
        except httpx.HTTPError as e:
            logger.error(f"Failed to submit order {order.order_id}: {e}")
            return False
        logger.info(f"Order {order.order_id} submitted to webhook")
        return True
