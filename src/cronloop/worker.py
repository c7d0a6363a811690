"""Scheduler loop: turns ticks into at most one firing per matching second."""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union
import logging

from .cancellation import CancellationSignal
from .errors import JobError
from .expression import CronSchedule
from .matcher import matches
from .ticker import Clock, system_clock, tick

logger = logging.getLogger(__name__)

Job = Callable[[CancellationSignal], Union[Awaitable[Any], Any]]
ErrorHandler = Callable[[JobError], Any]


class FiringGate:
    """De-duplicates firings within one wall-clock second."""

    def __init__(self, schedule: CronSchedule):
        self.schedule = schedule
        self.last_fired_second: Optional[int] = None

    def admit(self, at_ms: Union[int, float]) -> bool:
        """Record and admit a firing if ``at_ms`` matches in a new second."""
        second = int(at_ms // 1000)
        if not matches(self.schedule, second * 1000):
            return False
        if self.last_fired_second is not None and second == self.last_fired_second:
            return False

        self.last_fired_second = second
        return True


async def invoke_job(job: Job, signal: CancellationSignal, fired_at: int,
                     on_error: Optional[ErrorHandler] = None):
    """Run a sync or async job; its failures never escape this call.

    Cancelling the task running this call still propagates.
    """
    try:
        result = job(signal)
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError as e:
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        # Raised by the job's own work, not by cancelling the worker
        await _report_failure(e, fired_at, on_error)
    except Exception as e:
        await _report_failure(e, fired_at, on_error)


async def _report_failure(cause: BaseException, fired_at: int,
                          on_error: Optional[ErrorHandler]):
    # Job failures are not retried or logged here; on_error may surface them.
    if on_error is None:
        return
    error = JobError(fired_at)
    error.__cause__ = cause
    try:
        handled = on_error(error)
        if inspect.isawaitable(handled):
            await handled
    except Exception:
        logger.exception("Job error handler failed")


async def run_worker(schedule: CronSchedule, job: Job, signal: CancellationSignal,
                     gate: FiringGate, interval_ms: int,
                     clock: Clock = system_clock,
                     on_error: Optional[ErrorHandler] = None):
    """Invoke ``job`` on every new matching second until ``signal`` is cancelled.

    The job is awaited before the next tick is evaluated, so runs never
    overlap.
    """
    async for _ in tick(interval_ms, signal, clock):
        if signal.cancelled:
            break

        # Re-sample the clock; the tick may be stale after a slow job.
        at = clock()
        if gate.admit(at):
            logger.debug(f"'{schedule.expression}' fired at {gate.last_fired_second}")
            await invoke_job(job, signal, gate.last_fired_second, on_error)


class MatchStream:
    """Pull-style binding of the scheduler loop.

    Each ``__anext__`` resolves with the run's cancellation signal once the
    next new matching second arrives; the consumer runs the job itself. The
    stream ends when the signal is cancelled.
    """

    def __init__(self, schedule: CronSchedule, signal: CancellationSignal,
                 gate: FiringGate, interval_ms: int, clock: Clock = system_clock):
        self.schedule = schedule
        self.signal = signal
        self._gate = gate
        self._clock = clock
        self._ticks = tick(interval_ms, signal, clock)
        self._pending = False
        self._closed = asyncio.Event()

    def __aiter__(self):
        return self

    async def __anext__(self) -> CancellationSignal:
        if self._closed.is_set():
            raise StopAsyncIteration

        self._pending = True
        try:
            async for _ in self._ticks:
                if self.signal.cancelled:
                    break
                if self._gate.admit(self._clock()):
                    return self.signal
        finally:
            self._pending = False

        self._closed.set()
        raise StopAsyncIteration

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def aclose(self):
        """Tear the stream down.

        A ``__anext__`` still waiting for a tick finishes on its own once the
        signal is cancelled; this waits for that to happen.
        """
        if not self._pending:
            await self._ticks.aclose()
            self._closed.set()
        await self._closed.wait()
