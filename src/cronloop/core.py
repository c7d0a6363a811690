"""Cron lifecycle: start, stop and inspection of a single schedule."""

import asyncio
from datetime import datetime
from typing import Optional, Union
import logging

from pydantic import BaseModel, Field

from config import settings
from .cancellation import CancellationSignal, CancellationToken
from .expression import CronSchedule, next_run, parse_expression
from .matcher import matches
from .ticker import Clock, system_clock
from .timezones import to_datetime
from .worker import ErrorHandler, FiringGate, Job, MatchStream, run_worker

logger = logging.getLogger(__name__)

RunHandle = Union["asyncio.Task[None]", MatchStream]


class CronOptions(BaseModel):
    when: str
    timezone: str = Field(default_factory=lambda: settings.timezone)
    ticker_interval_ms: int = Field(default_factory=lambda: settings.ticker_interval_ms, ge=0)


class Cron:
    """Runs a job on every second matching a cron expression.

    With a job, ``start()`` launches an asyncio task that calls it. Without
    one, ``start()`` returns a MatchStream to iterate over instead.
    """

    def __init__(self, when: str, job: Optional[Job] = None, *,
                 timezone: Optional[str] = None,
                 ticker_interval_ms: Optional[int] = None,
                 on_error: Optional[ErrorHandler] = None,
                 clock: Optional[Clock] = None):
        overrides = {"timezone": timezone, "ticker_interval_ms": ticker_interval_ms}
        self.options = CronOptions(
            when=when, **{key: value for key, value in overrides.items() if value is not None}
        )
        self.schedule: CronSchedule = parse_expression(self.options.when, self.options.timezone)

        self._job = job
        self._on_error = on_error
        self._clock = clock or system_clock
        self._token = CancellationToken()
        self._gate = FiringGate(self.schedule)
        self._handle: Optional[RunHandle] = None

    @property
    def working(self) -> bool:
        return self._handle is not None

    @property
    def signal(self) -> CancellationSignal:
        """Cancellation signal of the current (or last) run."""
        return self._token.signal

    @property
    def last_fired_second(self) -> Optional[int]:
        return self._gate.last_fired_second

    def start(self) -> RunHandle:
        """Start scheduling, or return the handle of the run in progress."""
        if self._handle is not None:
            return self._handle

        self._token = CancellationToken()
        self._gate = FiringGate(self.schedule)
        interval = self.options.ticker_interval_ms

        if self._job is None:
            self._handle = MatchStream(self.schedule, self._token.signal, self._gate,
                                       interval, self._clock)
        else:
            self._handle = asyncio.create_task(run_worker(
                self.schedule, self._job, self._token.signal, self._gate,
                interval, self._clock, self._on_error,
            ))

        logger.info(f"Started cron '{self.schedule.expression}' ({self.schedule.timezone})")
        return self._handle

    async def stop(self):
        """Stop scheduling and wait for the run to finish.

        No job is invoked after this returns. A job already running is
        allowed to complete.
        """
        if self._handle is None:
            return

        handle = self._handle
        self._handle = None

        self._token.cancel()

        if isinstance(handle, MatchStream):
            await handle.aclose()
        else:
            # Cancelling this caller must not cancel the worker mid-job
            await asyncio.shield(handle)

        logger.info(f"Stopped cron '{self.schedule.expression}'")

    def now(self) -> datetime:
        """Current time in the schedule's timezone, truncated to the second."""
        return to_datetime(self._clock(), self.schedule.zone)

    def next_at(self) -> str:
        """ISO-8601 timestamp of the next matching instant after now."""
        return next_run(self.schedule, self.now()).isoformat()

    def check_time(self, at: Optional[Union[int, float]] = None) -> bool:
        """Whether ``at`` (epoch milliseconds, default now) matches the schedule."""
        if at is None:
            at = self._clock()
        return matches(self.schedule, at)

    def __repr__(self):
        return (f"<Cron '{self.schedule.expression}' tz={self.schedule.timezone} "
                f"working={self.working}>")
