"""Unit tests for :mod:`sgl_tracker.dates`."""
from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from sgl_tracker.dates import format_date, is_in_week, parse_date, recent_weeks, week_range


@pytest.mark.parametrize("offset", range(14))
def test_week_range_starts_on_sunday_and_ends_on_saturday(offset: int) -> None:
    day = date(2024, 5, 1) + timedelta(days=offset)

    week = week_range(day)

    assert week.week_start.isoweekday() == 7
    assert week.week_start.time() == datetime.min.time()
    assert week.week_end - week.week_start == timedelta(days=6, hours=23, minutes=59, seconds=59, milliseconds=999)
    assert week.week_start.date() <= day <= week.week_end.date()


def test_week_range_accepts_datetimes() -> None:
    week = week_range(datetime(2024, 5, 4, 18, 30))

    assert week.week_start == datetime(2024, 4, 28)
    assert week.week_end == datetime(2024, 5, 4, 23, 59, 59, 999000)


def test_is_in_week_is_inclusive_at_both_ends() -> None:
    week = week_range(date(2024, 5, 1))

    assert is_in_week("2024-04-28", week.week_start, week.week_end)
    assert is_in_week("2024-05-04", week.week_start, week.week_end)
    assert not is_in_week("2024-04-27", week.week_start, week.week_end)
    assert not is_in_week("2024-05-05", week.week_start, week.week_end)


@pytest.mark.parametrize("value", ["", None, "not-a-date", "2024-13-40"])
def test_is_in_week_rejects_malformed_dates(value) -> None:
    week = week_range(date(2024, 5, 1))

    assert is_in_week(value, week.week_start, week.week_end) is False


def test_parse_date_ignores_time_component() -> None:
    assert parse_date("2024-05-01T10:15:00Z") == date(2024, 5, 1)
    assert parse_date("garbage") is None


def test_recent_weeks_steps_back_seven_days() -> None:
    weeks = recent_weeks(5, today=date(2024, 10, 30))

    assert len(weeks) == 5
    assert weeks[0].value == "2024-10-27"
    assert weeks[0].label == "Week of Oct 27, 2024"
    for newer, older in zip(weeks, weeks[1:]):
        assert newer.week_start - older.week_start == timedelta(days=7)


def test_recent_weeks_crosses_year_boundary() -> None:
    weeks = recent_weeks(2, today=date(2025, 1, 2))

    assert [week.value for week in weeks] == ["2024-12-29", "2024-12-22"]
    assert format_date(weeks[1].week_start) == "2024-12-22"


def test_recent_weeks_with_zero_count_is_empty() -> None:
    assert recent_weeks(0) == []
