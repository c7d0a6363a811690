"""Polling clock for the scheduler loop."""

import time
from typing import AsyncIterator, Callable

from .cancellation import CancellationSignal

Clock = Callable[[], int]


def system_clock() -> int:
    """Current Unix time in milliseconds."""
    return time.time_ns() // 1_000_000


async def tick(interval_ms: int, signal: CancellationSignal,
               clock: Clock = system_clock) -> AsyncIterator[int]:
    """Yield "now" immediately, then again after every ``interval_ms``.

    Ends without error as soon as ``signal`` is cancelled, including while
    waiting between ticks.
    """
    if signal.cancelled:
        return

    yield clock()

    while True:
        if await signal.sleep(interval_ms / 1000):
            return
        yield clock()
