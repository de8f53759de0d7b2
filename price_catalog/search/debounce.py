"""Cancel-and-restart debounce timer for search input."""

import asyncio
import logging
from typing import Callable, Generic, Optional, TypeVar

from price_catalog import metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """
    Deliver only the last value pushed within a quiet interval.

    Each `push()` cancels the pending timer handle and schedules a new one;
    only a timer that survives uncancelled calls `callback`. Must be used
    from a thread running an asyncio event loop.
    """

    def __init__(
        self,
        callback: Callable[[T], None],
        delay_seconds: float,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.callback = callback
        self.delay_seconds = delay_seconds
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending_value: Optional[T] = None
        self._closed = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        """Record new input and restart the timer."""
        if self._closed:
            raise RuntimeError("Debouncer is closed")

        if self._handle is not None:
            self._handle.cancel()
            metrics.debounce_cancellations_total.inc()

        loop = self._loop or asyncio.get_running_loop()
        self._pending_value = value
        self._handle = loop.call_later(self.delay_seconds, self._fire)

    def _fire(self) -> None:
        value = self._pending_value
        self._handle = None
        self._pending_value = None
        self.callback(value)

    def cancel(self) -> Optional[T]:
        """Drop the pending value without delivering it. Returns the dropped value."""
        if self._handle is None:
            return None
        self._handle.cancel()
        value = self._pending_value
        self._handle = None
        self._pending_value = None
        return value

    def flush(self) -> bool:
        """Deliver the pending value now. Returns False if nothing was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._fire()
        return True

    def close(self) -> None:
        """Cancel any pending timer on teardown."""
        self.cancel()
        self._closed = True
