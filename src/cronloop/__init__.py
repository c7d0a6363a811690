"""Cron-expression driven job scheduling on asyncio."""

from .cancellation import CancellationSignal, CancellationToken
from .core import Cron, CronOptions
from .errors import CronError, InvalidExpression, InvalidTimezone, JobError, ScheduleExhausted
from .expression import CronSchedule, next_run, parse_expression, upcoming_runs, validate_cron
from .matcher import matches
from .ticker import system_clock, tick
from .worker import FiringGate, MatchStream, run_worker

__all__ = [
    "CancellationSignal",
    "CancellationToken",
    "Cron",
    "CronError",
    "CronOptions",
    "CronSchedule",
    "FiringGate",
    "InvalidExpression",
    "InvalidTimezone",
    "JobError",
    "MatchStream",
    "ScheduleExhausted",
    "matches",
    "next_run",
    "parse_expression",
    "run_worker",
    "system_clock",
    "tick",
    "upcoming_runs",
    "validate_cron"
]
