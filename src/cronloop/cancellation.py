"""One-shot cooperative cancellation."""

import asyncio
from typing import Callable, List
import logging

logger = logging.getLogger(__name__)


class CancellationToken:
    """Owner side of a cancellation signal.

    Triggering is one-shot: the first ``cancel()`` wakes every waiter and
    runs each listener once, later calls do nothing. A cancelled token is
    never reset; start a new run with a new token.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self._listeners: List[Callable[["CancellationSignal"], None]] = []
        self.signal = CancellationSignal(self)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> bool:
        """Trigger cancellation. Returns False if it was already triggered."""
        if self._event.is_set():
            return False

        self._event.set()
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            try:
                listener(self.signal)
            except Exception:
                logger.exception(f"Cancellation listener {listener!r} failed")
        return True


class CancellationSignal:
    """Read-only view of a CancellationToken, handed to jobs and waiters."""

    def __init__(self, token: CancellationToken):
        self._token = token

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def add_listener(self, callback: Callable[["CancellationSignal"], None]):
        """Call ``callback(signal)`` once when cancellation is triggered.

        Listeners added after cancellation are never called.
        """
        if not self._token.cancelled:
            self._token._listeners.append(callback)

    def remove_listener(self, callback: Callable[["CancellationSignal"], None]):
        if callback in self._token._listeners:
            self._token._listeners.remove(callback)

    async def wait(self):
        """Block until cancellation is triggered."""
        await self._token._event.wait()

    async def sleep(self, seconds: float) -> bool:
        """Sleep for ``seconds`` unless cancelled first.

        Always yields to the event loop, even for a zero delay.

        Returns:
            True if the sleep ended because of cancellation
        """
        if self.cancelled:
            return True

        if seconds <= 0:
            await asyncio.sleep(0)
            return self.cancelled

        try:
            await asyncio.wait_for(self._token._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def __repr__(self):
        return f"<CancellationSignal cancelled={self.cancelled}>"
