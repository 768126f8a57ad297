"""Tests for notifications and order submission"""
from decimal import Decimal

import httpx
import pytest
from tenacity import wait_none
from unittest.mock import AsyncMock, Mock

from storecart.checkout import CustomerInfo, Order, OrderItem, OrderSubmitter
from storecart.notifications import Notification, NotificationBuffer, Severity, log_notifier


def test_notification_to_dict():
    note = Notification("Cart cleared")

    assert note.to_dict() == {"message": "Cart cleared", "severity": "success"}


def test_buffer_drains_and_forwards():
    forward = Mock()
    buffer = NotificationBuffer(forward=forward)

    buffer(Notification("a"))
    buffer(Notification("b", Severity.WARNING))

    assert [n.message for n in buffer.drain()] == ["a", "b"]
    assert buffer.drain() == []
    assert forward.call_count == 2


def test_buffer_keeps_most_recent():
    buffer = NotificationBuffer(forward=None, limit=2)
    for message in ("a", "b", "c"):
        buffer(Notification(message))

    assert [n.message for n in buffer.drain()] == ["b", "c"]


def test_log_notifier_levels(caplog):
    with caplog.at_level("INFO", logger="storecart.notifications"):
        log_notifier(Notification("Order expired", Severity.WARNING))

    assert caplog.records[-1].levelname == "WARNING"
    assert "Order expired" in caplog.records[-1].getMessage()


@pytest.fixture
def order():
    return Order(
        order_id="ORD-00123456",
        items=(OrderItem(name="Plate", unit_price=Decimal("100"), image="", quantity=2),),
        customer=CustomerInfo(full_name="Mona", phone="01012345678", address="Cairo"),
        subtotal=Decimal("200"),
        delivery_fee=Decimal("30"),
        total=Decimal("230"),
        created_at=1_700_000_123_456,
    )


@pytest.fixture
def no_retry_wait(monkeypatch):
    """Drop the exponential backoff between webhook attempts"""
    monkeypatch.setattr(OrderSubmitter._post.retry, "wait", wait_none())


def _response(status_code):
    return httpx.Response(status_code, request=httpx.Request("POST", "https://shop.test/orders"))


def test_order_round_trip(order):
    assert Order.from_dict(order.to_dict()) == order


@pytest.mark.asyncio
async def test_submitter_disabled_without_url(order):
    assert await OrderSubmitter("").submit(order) is False


@pytest.mark.asyncio
async def test_submitter_posts_order(order):
    client = Mock()
    client.post = AsyncMock(return_value=_response(200))

    assert await OrderSubmitter("https://shop.test/orders", client=client).submit(order) is True

    payload = client.post.call_args.kwargs["json"]
    assert payload["order_id"] == "ORD-00123456"
    assert payload["total"] == 230
    assert payload["items"] == [{"name": "Plate", "price": 100, "image": "", "quantity": 2}]


@pytest.mark.asyncio
async def test_submitter_http_error_is_not_fatal(order):
    client = Mock()
    client.post = AsyncMock(return_value=_response(500))

    assert await OrderSubmitter("https://shop.test/orders", client=client).submit(order) is False
    assert client.post.await_count == 1


@pytest.mark.asyncio
async def test_submitter_retries_transport_errors(order, no_retry_wait):
    client = Mock()
    client.post = AsyncMock(side_effect=[httpx.ConnectError("refused"), _response(200)])

    assert await OrderSubmitter("https://shop.test/orders", client=client).submit(order) is True
    assert client.post.await_count == 2


@pytest.mark.asyncio
async def test_submitter_gives_up_after_three_attempts(order, no_retry_wait):
    client = Mock()
    client.post = AsyncMock(side_effect=httpx.ConnectError("refused"))

    assert await OrderSubmitter("https://shop.test/orders", client=client).submit(order) is False
    assert client.post.await_count == 3
