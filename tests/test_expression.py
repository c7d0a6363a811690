"""Tests for cron expression parsing."""

import pytest
from datetime import datetime, timezone
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cronloop import (
    CronSchedule,
    InvalidExpression,
    InvalidTimezone,
    next_run,
    parse_expression,
    upcoming_runs,
    validate_cron,
)


class TestCronParser:
    """Test cron expression parsing."""

    def test_validate_cron_valid(self):
        """Test valid cron expressions."""
        assert validate_cron("* * * * * *") is True
        assert validate_cron("0 0 */2 * * *") is True
        assert validate_cron("0 0 0 * * 0") is True
        assert validate_cron("15 14 1 * *") is True  # five fields

    def test_validate_cron_invalid(self):
        """Test invalid cron expressions."""
        assert validate_cron("invalid") is False
        assert validate_cron("* * * *") is False  # Too few fields
        assert validate_cron("* * * * * * * *") is False  # Too many fields
        assert validate_cron("60 * * * * *") is False  # Invalid second
        assert validate_cron("0 0 25 * * *") is False  # Invalid hour

    def test_invalid_expression_message(self):
        with pytest.raises(InvalidExpression) as exc_info:
            parse_expression("* * * * * * * *")

        assert str(exc_info.value) == "Invalid cron expression"
        assert exc_info.value.expression == "* * * * * * * *"
        assert isinstance(exc_info.value, ValueError)

    def test_invalid_timezone(self):
        with pytest.raises(InvalidTimezone) as exc_info:
            parse_expression("* * * * * *", "Mars/Olympus_Mons")

        assert exc_info.value.timezone == "Mars/Olympus_Mons"

    def test_expand_fields(self):
        schedule = parse_expression("*/15 0 9 * * 1-5", "Europe/Berlin")

        assert schedule.seconds == {0, 15, 30, 45}
        assert schedule.minutes == {0}
        assert schedule.hours == {9}
        assert schedule.days == set(range(1, 32))
        assert schedule.months == set(range(1, 13))
        assert schedule.weekdays == {1, 2, 3, 4, 5}
        assert schedule.timezone == "Europe/Berlin"
        assert schedule.fields[0] is schedule.seconds
        assert len(schedule.fields) == 6

    def test_five_field_expression_fires_at_second_zero(self):
        schedule = parse_expression("30 8 * * *")

        assert schedule.seconds == {0}
        assert schedule.minutes == {30}
        assert schedule.hours == {8}

    def test_last_day_of_month(self):
        schedule = parse_expression("0 0 0 L * *")

        assert schedule.last_day_of_month is True
        assert not schedule.days

    def test_nth_weekday(self):
        schedule = parse_expression("0 0 0 * * 1#2")

        assert schedule.weekdays == {1}
        assert schedule.nth_weekdays == {(1, 2)}

    def test_last_weekday_of_month(self):
        """Test L followed by a weekday selects its last occurrence."""
        schedule = parse_expression("0 0 0 * * L5")

        assert schedule.nth_weekdays == {(5, -1)}

    def test_sunday_as_seven(self):
        """Test 7 is accepted as Sunday in six-field expressions."""
        assert parse_expression("0 0 0 * * 7").weekdays == {0}
        assert parse_expression("0 0 0 * * 0-7").weekdays == set(range(7))
        assert parse_expression("0 0 0 * * 5-7").weekdays == {5, 6, 0}
        assert parse_expression("0 0 0 * * 1,7").weekdays == {0, 1}
        assert parse_expression("0 0 0 * * 1-7/2").weekdays == {1, 3, 5, 0}
        assert parse_expression("0 0 0 * * 7#1").nth_weekdays == {(0, 1)}
        assert parse_expression("0 0 * * 7").weekdays == {0}
        assert validate_cron("0 0 0 * * 8") is False

    def test_predefined_aliases(self):
        """Test @-prefixed aliases expand like their five-field forms."""
        hourly = parse_expression("@hourly")
        assert hourly.expression == "@hourly"
        assert hourly.seconds == {0}
        assert hourly.minutes == {0}
        assert hourly.hours == set(range(24))

        assert parse_expression("@daily").hours == {0}
        assert parse_expression("@midnight").fields == parse_expression("@daily").fields
        assert parse_expression("@weekly").weekdays == {0}
        assert parse_expression("@monthly").days == {1}

        yearly = parse_expression("@yearly")
        assert yearly.days == {1}
        assert yearly.months == {1}
        assert parse_expression("@ANNUALLY").months == {1}

    def test_unknown_alias(self):
        """Test unsupported aliases are rejected."""
        with pytest.raises(InvalidExpression):
            parse_expression("@reboot")

    def test_schedule_requires_non_empty_fields(self):
        with pytest.raises(InvalidExpression):
            CronSchedule(
                expression="custom",
                timezone="UTC",
                seconds=frozenset(),
                minutes=frozenset({0}),
                hours=frozenset({0}),
                days=frozenset({1}),
                months=frozenset({1}),
                weekdays=frozenset({0}),
            )

    def test_schedule_is_immutable(self):
        schedule = parse_expression("* * * * * *")

        with pytest.raises(AttributeError):
            schedule.timezone = "Europe/Paris"


class TestNextRun:
    """Test next occurrence lookup."""

    def test_next_run(self):
        base_time = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

        # Every minute
        assert next_run(parse_expression("0 * * * * *"), base_time) == \
            datetime(2024, 1, 1, 12, 1, 0, tzinfo=timezone.utc)

        # Every hour at minute 0
        assert next_run(parse_expression("0 0 * * * *"), base_time) == \
            datetime(2024, 1, 1, 13, 0, 0, tzinfo=timezone.utc)

        # Daily at midnight
        assert next_run(parse_expression("0 0 0 * * *"), base_time) == \
            datetime(2024, 1, 2, 0, 0, 0, tzinfo=timezone.utc)

    def test_next_run_is_strictly_after_base(self):
        base_time = datetime(2024, 1, 1, 12, 1, 0, tzinfo=timezone.utc)

        assert next_run(parse_expression("0 * * * * *"), base_time) == \
            datetime(2024, 1, 1, 12, 2, 0, tzinfo=timezone.utc)

    def test_next_run_requires_day_and_weekday(self):
        """Friday the 13th: day-of-month and day-of-week must both match."""
        base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

        run = next_run(parse_expression("0 0 0 13 * 5"), base_time)

        assert run == datetime(2024, 9, 13, tzinfo=timezone.utc)

    def test_next_run_in_schedule_timezone(self):
        base_time = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

        run = next_run(parse_expression("0 0 9 * * *", "Asia/Tokyo"), base_time)

        assert run.isoformat() == "2024-01-02T09:00:00+09:00"

    def test_upcoming_runs(self):
        base_time = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

        runs = upcoming_runs(parse_expression("*/20 * * * * *"), base_time, 3)

        assert [run.strftime("%H:%M:%S") for run in runs] == ["12:00:20", "12:00:40", "12:01:00"]

    def test_next_run_sunday_as_seven(self):
        """Test next run lookup treats 7 as Sunday."""
        base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)  # Monday

        assert next_run(parse_expression("0 0 0 * * 7"), base_time) == \
            datetime(2024, 1, 7, tzinfo=timezone.utc)

    def test_next_run_for_alias(self):
        """Test next run lookup for @-prefixed aliases."""
        base_time = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

        assert next_run(parse_expression("@hourly"), base_time) == \
            datetime(2024, 1, 1, 13, 0, 0, tzinfo=timezone.utc)
        assert next_run(parse_expression("@weekly"), base_time) == \
            datetime(2024, 1, 7, tzinfo=timezone.utc)
        assert next_run(parse_expression("@monthly"), base_time) == \
            datetime(2024, 2, 1, tzinfo=timezone.utc)
