"""Cron expression parsing and next-occurrence lookup."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Tuple
from zoneinfo import ZoneInfo
import logging
import re

from croniter import croniter

from .errors import InvalidExpression, ScheduleExhausted
from .timezones import resolve_timezone

logger = logging.getLogger(__name__)

# croniter's expanded order: minute, hour, day, month, day_of_week, second
_CRONITER_RANGES = [(0, 59), (0, 23), (1, 31), (1, 12), (0, 6), (0, 59)]

_ALIASES = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}

_SUNDAY_RANGE = re.compile(r"^(\d+)-7(?:/(\d+))?$")


@dataclass(frozen=True)
class CronSchedule:
    """Expanded cron expression bound to a timezone."""
    expression: str
    timezone: str
    seconds: FrozenSet[int]
    minutes: FrozenSet[int]
    hours: FrozenSet[int]
    days: FrozenSet[int]
    months: FrozenSet[int]
    weekdays: FrozenSet[int]
    last_day_of_month: bool = False
    # (weekday, nth) pairs; nth == -1 means the last such weekday of the month
    nth_weekdays: FrozenSet[Tuple[int, int]] = frozenset()
    zone: ZoneInfo = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.zone is None:
            object.__setattr__(self, "zone", resolve_timezone(self.timezone))

        for name in ("seconds", "minutes", "hours", "months", "weekdays"):
            if not getattr(self, name):
                raise InvalidExpression(self.expression, f"empty {name} field")
        if not self.days and not self.last_day_of_month:
            raise InvalidExpression(self.expression, "empty days field")

    @property
    def fields(self) -> Tuple[FrozenSet[int], ...]:
        """Field sets in cron order: second, minute, hour, day, month, weekday."""
        return (self.seconds, self.minutes, self.hours,
                self.days, self.months, self.weekdays)

    @property
    def croniter_expression(self) -> str:
        """The expression in croniter's layout, with seconds as the last field."""
        return _to_croniter_format(self.expression)


def _normalize_weekdays(field_value: str) -> str:
    """Rewrite Sunday written as 7 to 0, in plain values, ranges and lists."""
    items = []
    for item in field_value.split(","):
        sunday_range = _SUNDAY_RANGE.match(item)
        if sunday_range:
            start, step = int(sunday_range.group(1)), int(sunday_range.group(2) or 1)
            items.extend(str(day % 7) for day in range(start, 8, step))
        elif item == "7" or item.startswith("7#"):
            items.append("0" + item[1:])
        elif item.lower() == "l7":
            items.append("L0")
        else:
            items.append(item)
    return ",".join(dict.fromkeys(items))


def _to_croniter_format(expression: str) -> str:
    expression = _ALIASES.get(expression.strip().lower(), expression)
    parts = expression.split()
    if len(parts) == 5:
        parts.insert(0, "0")
    if len(parts) != 6:
        raise InvalidExpression(expression, f"expected 5 or 6 fields, got {len(parts)}")
    # croniter only takes 7 for Sunday in five-field expressions
    parts[5] = _normalize_weekdays(parts[5])
    # croniter reads a sixth field as seconds
    parts.append(parts.pop(0))
    return " ".join(parts)


def _expand_field(values: list, low: int, high: int) -> FrozenSet[int]:
    if "*" in values:
        return frozenset(range(low, high + 1))
    return frozenset(int(v) for v in values if not isinstance(v, str))


def parse_expression(expression: str, timezone: str = "UTC") -> CronSchedule:
    """Expand a cron expression into its field sets.

    Args:
        expression: Six-field cron expression (second first) or a classic
            five-field one, which fires at second 0. Aliases such as
            ``@hourly`` and ``@daily`` are accepted too.
        timezone: IANA timezone the fields are evaluated in

    Returns:
        CronSchedule

    Raises:
        InvalidExpression: the expression cannot be expanded
        InvalidTimezone: the timezone is unknown
    """
    zone = resolve_timezone(timezone)
    if not isinstance(expression, str):
        raise InvalidExpression(expression, "expression must be a string")

    croniter_format = _to_croniter_format(expression)
    try:
        parsed = croniter(croniter_format, datetime.now(zone))
    except (ValueError, TypeError) as e:
        raise InvalidExpression(expression, str(e)) from e
    expanded, nth_weekday_of_month = parsed.expanded, parsed.nth_weekday_of_month

    minutes, hours, days, months, weekdays, seconds = (
        _expand_field(values, low, high)
        for values, (low, high) in zip(expanded, _CRONITER_RANGES)
    )
    # croniter may expand a wildcard weekday up to 7
    weekdays = frozenset(day % 7 for day in weekdays)

    nth_weekdays = set()
    for weekday, occurrences in (nth_weekday_of_month or {}).items():
        for nth in occurrences:
            nth_weekdays.add((int(weekday) % 7, -1 if str(nth).lower() == "l" else int(nth)))

    return CronSchedule(
        expression=expression,
        timezone=timezone,
        seconds=seconds,
        minutes=minutes,
        hours=hours,
        days=days,
        months=months,
        weekdays=weekdays,
        last_day_of_month="l" in expanded[2],
        nth_weekdays=frozenset(nth_weekdays),
        zone=zone,
    )


def validate_cron(expression: str) -> bool:
    """Validate a cron expression.

    Args:
        expression: Cron expression string (e.g., "0 */2 * * * *")

    Returns:
        True if valid, False otherwise
    """
    try:
        parse_expression(expression)
        return True
    except InvalidExpression as e:
        logger.error(f"Invalid cron expression '{expression}': {e.reason}")
        return False


def next_run(schedule: CronSchedule, base: datetime) -> datetime:
    """First instant strictly after ``base`` that satisfies the schedule.

    Day-of-month and day-of-week are combined with AND, the same way the
    matcher combines them.
    """
    return upcoming_runs(schedule, base, 1)[0]


def upcoming_runs(schedule: CronSchedule, base: datetime, count: int) -> List[datetime]:
    """Next ``count`` occurrences after ``base``, in the schedule's timezone."""
    start = base.astimezone(schedule.zone).replace(microsecond=0)
    iterator = croniter(schedule.croniter_expression, start, day_or=False)

    runs = []
    try:
        for _ in range(count):
            runs.append(iterator.get_next(datetime))
    except (ValueError, TypeError) as e:
        raise ScheduleExhausted(f"No upcoming run for '{schedule.expression}'") from e
    return runs
