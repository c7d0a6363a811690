"""Timezone-aware calendar decomposition.

Every call takes the zone explicitly; there is no process-wide default.
"""

import calendar
from datetime import datetime
from typing import NamedTuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidTimezone


class CalendarFields(NamedTuple):
    """Wall-clock components of an instant, in cron order."""
    second: int
    minute: int
    hour: int
    day: int
    month: int  # 1-12
    weekday: int  # 0 = Sunday
    year: int


def resolve_timezone(name: str) -> ZoneInfo:
    """Look up an IANA timezone, raising InvalidTimezone if unknown."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise InvalidTimezone(name) from e


def to_datetime(instant_ms: Union[int, float], zone: ZoneInfo) -> datetime:
    """Aware datetime for an epoch-millisecond instant, truncated to the second."""
    return datetime.fromtimestamp(int(instant_ms // 1000), tz=zone)


def decompose(instant_ms: Union[int, float], zone: ZoneInfo) -> CalendarFields:
    moment = to_datetime(instant_ms, zone)
    return CalendarFields(
        second=moment.second,
        minute=moment.minute,
        hour=moment.hour,
        day=moment.day,
        month=moment.month,
        weekday=moment.isoweekday() % 7,
        year=moment.year,
    )


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]
