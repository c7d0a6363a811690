"""Exceptions raised by the cron scheduler."""

from typing import Optional


class CronError(Exception):
    """Base class for scheduler errors."""


class InvalidExpression(CronError, ValueError):
    """Cron expression could not be expanded into six field sets."""

    def __init__(self, expression: str, reason: Optional[str] = None):
        self.expression = expression
        self.reason = reason
        super().__init__("Invalid cron expression")


class InvalidTimezone(CronError, ValueError):
    """Timezone identifier is unknown to the timezone database."""

    def __init__(self, timezone: str):
        self.timezone = timezone
        super().__init__(f"Invalid timezone: {timezone!r}")


class JobError(CronError):
    """A job callback failed. The original exception is the ``__cause__``."""

    def __init__(self, fired_at: int):
        self.fired_at = fired_at
        super().__init__(f"Job fired at {fired_at} failed")


class ScheduleExhausted(CronError):
    """No future instant satisfies the schedule."""
