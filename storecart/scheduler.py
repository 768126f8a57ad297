"""
Cooperative scheduler for timer callbacks.

Timers run as plain function calls on the asyncio event loop thread; there is
no parallelism. One-shot callbacks (the post-order TTL check) and periodic
callbacks (the expiration check) are fire and forget. A failing callback is
logged and never stops a periodic timer.
"""
import asyncio
from typing import Callable, Optional

from storecart.logging import get_logger

logger = get_logger(__name__)


class Scheduler:
    """Schedules callbacks on an asyncio loop via call_later."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._handles: set[asyncio.TimerHandle] = set()
        self._closed = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def pending(self) -> int:
        return len(self._handles)

    def _run(self, callback: Callable[[], object], name: str) -> None:
        try:
            callback()
        except Exception as e:
            logger.error(f"Scheduled task {name} failed: {e}", exc_info=True)

    def call_later(self, delay: float, callback: Callable[[], object]) -> asyncio.TimerHandle:
        """Run callback once after delay seconds."""
        if self._closed:
            raise RuntimeError("scheduler is shut down")
        name = getattr(callback, "__qualname__", repr(callback))
        handle: Optional[asyncio.TimerHandle] = None

        def fire() -> None:
            self._handles.discard(handle)
            self._run(callback, name)

        handle = self.loop.call_later(max(delay, 0), fire)
        self._handles.add(handle)
        logger.debug(f"Scheduled {name} in {delay:.0f}s")
        return handle

    def call_every(self, period: float, callback: Callable[[], object]) -> None:
        """Run callback every period seconds until shutdown."""
        if period <= 0:
            raise ValueError("period must be positive")
        if self._closed:
            raise RuntimeError("scheduler is shut down")
        name = getattr(callback, "__qualname__", repr(callback))

        def tick() -> None:
            self._run(callback, name)
            if not self._closed:
                self.call_later(period, tick)

        self.call_later(period, tick)

    def shutdown(self) -> None:
        """Cancel every outstanding timer."""
        self._closed = True
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()
