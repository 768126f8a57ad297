"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import Mock

# Keep tests off the developer's real store
os.environ.setdefault("STORECART_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from storecart.cart import CartState
from storecart.config import Settings
from storecart.errors import StorageFailure
from storecart.notifications import NotificationBuffer
from storecart.session import CartSession
from storecart.store import MemoryStore, StoreKeys

TTL_MS = 36_000_000
START_MS = 1_700_000_123_456


class FakeClock:
    """Epoch-ms clock the test moves by hand."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FlakyStore(MemoryStore):
    """MemoryStore whose reads or writes can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key):
        if self.fail_reads:
            raise StorageFailure("read failed", key=key)
        return super().get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise StorageFailure("write failed", key=key)
        super().set(key, value)

    def remove(self, key):
        if self.fail_writes:
            raise StorageFailure("write failed", key=key)
        super().remove(key)


@pytest.fixture
def keys():
    return StoreKeys()


@pytest.fixture
def store():
    return FlakyStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    """Mock notifier recording every Notification"""
    return Mock()


@pytest.fixture
def cart(store, keys, notifier, clock):
    return CartState(store, keys=keys, delivery_fee=30, notifier=notifier, ttl_ms=TTL_MS, clock=clock)


@pytest.fixture
def mock_scheduler():
    """Mock scheduler capturing call_later / call_every registrations"""
    scheduler = Mock()
    scheduler.call_later = Mock()
    scheduler.call_every = Mock()
    scheduler.shutdown = Mock()
    return scheduler


@pytest.fixture
def settings():
    return Settings(backend="memory")


@pytest.fixture
def notifications():
    return NotificationBuffer(forward=None)


@pytest.fixture
def session(store, settings, notifications, mock_scheduler, clock):
    return CartSession(
        store,
        settings=settings,
        notifier=notifications,
        scheduler=mock_scheduler,
        clock=clock,
    )


@pytest.fixture
def customer_fields():
    """Valid raw checkout form"""
    return {
        "full_name": "Mona Adel",
        "phone": "01012345678",
        "address": "12 Tahrir St, Cairo",
        "notes": "",
    }


def notified(notifier_mock, severity=None):
    """Messages passed to a Mock notifier, optionally filtered by severity"""
    notes = [call.args[0] for call in notifier_mock.call_args_list]
    if severity is not None:
        notes = [n for n in notes if n.severity == severity]
    return [n.message for n in notes]
