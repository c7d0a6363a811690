"""Match instants against an expanded cron schedule."""

from typing import Union

from .expression import CronSchedule
from .timezones import CalendarFields, days_in_month, decompose


def matches(schedule: CronSchedule, instant_ms: Union[int, float]) -> bool:
    """Whether the instant, truncated to the second, satisfies every field.

    The instant is decomposed in the schedule's own timezone, so wall-clock
    fields keep matching across DST transitions.
    """
    moment = decompose(instant_ms, schedule.zone)
    return (
        moment.second in schedule.seconds
        and moment.minute in schedule.minutes
        and moment.hour in schedule.hours
        and _day_matches(schedule, moment)
        and moment.month in schedule.months
        and _weekday_matches(schedule, moment)
    )


def _day_matches(schedule: CronSchedule, moment: CalendarFields) -> bool:
    if moment.day in schedule.days:
        return True
    return (schedule.last_day_of_month
            and moment.day == days_in_month(moment.year, moment.month))


def _weekday_matches(schedule: CronSchedule, moment: CalendarFields) -> bool:
    if moment.weekday not in schedule.weekdays:
        return False

    wanted = {nth for weekday, nth in schedule.nth_weekdays if weekday == moment.weekday}
    if not wanted:
        return True

    # 1-based occurrence of this weekday within the month
    nth = (moment.day - 1) // 7 + 1
    is_last = moment.day + 7 > days_in_month(moment.year, moment.month)
    return nth in wanted or (-1 in wanted and is_last)
