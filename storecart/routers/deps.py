"""
Shared Dependencies for Routers

The API serves a single cart session per process. It is created lazily from
the environment unless the app factory was handed one.
"""
from typing import Optional

from storecart.notifications import NotificationBuffer
from storecart.session import CartSession

_session: Optional[CartSession] = None
_notifications: Optional[NotificationBuffer] = None


def get_notifications() -> NotificationBuffer:
    """Notification buffer drained into each response."""
    global _notifications
    if _notifications is None:
        _notifications = NotificationBuffer()
    return _notifications


def get_session() -> CartSession:
    """Get or create the process-wide CartSession."""
    global _session
    if _session is None:
        _session = CartSession.from_settings(notifier=get_notifications())
    return _session


def set_session(session: Optional[CartSession], notifications: Optional[NotificationBuffer] = None) -> None:
    """Install a session (app factory, tests). None resets to lazy creation."""
    global _session, _notifications
    _session = session
    _notifications = notifications


def drain_notifications() -> list[dict]:
    return [n.to_dict() for n in get_notifications().drain()]
