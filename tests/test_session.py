"""Tests for the CartSession facade"""
import json

import pytest
from unittest.mock import AsyncMock, Mock

from conftest import START_MS, TTL_MS
from storecart.checkout import OrderSubmitter
from storecart.errors import CheckoutValidationError, ValidationKind
from storecart.notifications import Severity
from storecart.session import ORDER_PLACED_MESSAGE, CartSession


def _messages(buffer, severity=None):
    return [n.message for n in buffer.drain() if severity is None or n.severity == severity]


def test_start_loads_and_schedules_periodic_check(session, store, keys, mock_scheduler):
    store.set(keys.cart, json.dumps([{"name": "Tea", "price": 10, "image": "", "quantity": 2}]))

    session.start()
    session.start()

    assert session.item_count() == 2
    mock_scheduler.call_every.assert_called_once_with(60, session.check_expiration)


def test_periodic_check_clears_expired_order(session, customer_fields, clock, store, keys):
    session.start()
    session.add_item("Plate", 100)
    session.checkout(**customer_fields)

    clock.advance(TTL_MS - 1)
    assert session.check_expiration() is False
    clock.advance(1)
    assert session.check_expiration() is True

    assert session.item_count() == 0
    assert store.get(keys.last_order) is None


def test_cart_operations_delegate(session):
    session.add_item("A", 10)
    session.add_item("B", 20)
    session.increase_quantity(0)
    session.decrease_quantity(1)

    assert session.item_count() == 2
    assert session.totals().total == 50
    session.remove_item(0)
    assert session.item_count() == 0
    session.clear()
    session.clear()


def test_checkout_success(session, customer_fields, notifications, mock_scheduler):
    session.add_item("Plate", 100)
    session.add_item("Plate", 100)

    order = session.checkout(**customer_fields)

    assert order.total == 230
    assert order.created_at == START_MS
    assert session.last_order() == order
    assert ORDER_PLACED_MESSAGE in _messages(notifications, Severity.SUCCESS)
    mock_scheduler.call_later.assert_called_once_with(TTL_MS / 1000, session.expiration.check)


def test_checkout_validation_failure_notifies(session, customer_fields, notifications):
    session.add_item("Plate", 100)
    notifications.drain()
    customer_fields["phone"] = "0123456789"

    with pytest.raises(CheckoutValidationError) as exc_info:
        session.checkout(**customer_fields)

    assert exc_info.value.kind == ValidationKind.INVALID_PHONE_FORMAT
    assert _messages(notifications, Severity.ERROR) == ["Phone number must be 11 digits and start with 01"]
    assert session.last_order() is None


def test_empty_cart_checkout(session, customer_fields):
    with pytest.raises(CheckoutValidationError) as exc_info:
        session.checkout(**customer_fields)

    assert exc_info.value.kind == ValidationKind.EMPTY_CART


@pytest.mark.asyncio
async def test_submit_order_when_enabled(store, settings, notifications, clock, customer_fields):
    submitter = Mock(spec=OrderSubmitter)
    submitter.enabled = True
    submitter.submit = AsyncMock(return_value=True)
    session = CartSession(store, settings=settings, notifier=notifications, clock=clock, submitter=submitter)
    session.add_item("Plate", 100)

    order = session.checkout(**customer_fields)
    submitter.submit.assert_not_called()

    assert await session.submit_order(order) is True
    submitter.submit.assert_awaited_once_with(order)


@pytest.mark.asyncio
async def test_submit_order_disabled(session, customer_fields):
    session.add_item("Plate", 100)
    order = session.checkout(**customer_fields)

    assert await session.submit_order(order) is False


def test_ttl_timer_discards_order_and_warns(session, customer_fields, clock, mock_scheduler, notifications):
    session.start()
    session.add_item("Plate", 100)
    session.checkout(**customer_fields)
    timer = mock_scheduler.call_later.call_args.args[1]

    clock.advance(TTL_MS)
    timer()

    assert session.item_count() == 0
    assert session.last_order() is None
    assert "Previous order was removed automatically (10 hours passed)" in _messages(notifications, Severity.WARNING)
    assert session.check_expiration() is False


def test_earlier_order_timer_does_not_clear_newer_order(session, customer_fields, clock, mock_scheduler):
    session.add_item("Plate", 100)
    session.checkout(**customer_fields)
    first_timer = mock_scheduler.call_later.call_args_list[0].args[1]

    clock.advance(TTL_MS // 2)
    second = session.checkout(**customer_fields)
    clock.advance(TTL_MS // 2)
    first_timer()

    assert session.item_count() == 1
    assert session.last_order() == second


def test_attach_scheduler(session):
    scheduler = Mock()

    session.attach_scheduler(scheduler)

    assert session.finalizer.scheduler is scheduler


def test_shutdown_stops_scheduler(session, mock_scheduler):
    session.shutdown()

    mock_scheduler.shutdown.assert_called_once_with()
