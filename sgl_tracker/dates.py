"""Week arithmetic used by the performance dashboard.

Weeks run from Sunday 00:00:00 to Saturday 23:59:59.999. Stored dates are
plain ``YYYY-MM-DD`` strings without a time component.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Union

LOGGER = logging.getLogger(__name__)

DateLike = Union[date, datetime]

_END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True, slots=True)
class WeekRange:
    week_start: datetime
    week_end: datetime


@dataclass(frozen=True, slots=True)
class WeekOption:
    """An entry of the week selector: ``value`` is the week start as YYYY-MM-DD."""

    week_start: date
    value: str
    label: str


def format_date(value: DateLike) -> str:
    return value.strftime("%Y-%m-%d")


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a calendar date, tolerating a trailing time component.

    Returns ``None`` for blank or malformed input instead of raising.
    """

    if not value:
        return None
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        LOGGER.warning("Could not parse date string %r", value)
        return None


def week_range(value: Optional[DateLike] = None) -> WeekRange:
    """Return the Sunday-to-Saturday week that contains ``value`` (default: today)."""

    if value is None:
        value = date.today()
    day = value.date() if isinstance(value, datetime) else value
    # date.weekday() has Monday=0; shift so Sunday=0.
    days_since_sunday = (day.weekday() + 1) % 7
    sunday = day - timedelta(days=days_since_sunday)
    saturday = sunday + timedelta(days=6)
    return WeekRange(
        week_start=datetime.combine(sunday, time.min),
        week_end=datetime.combine(saturday, _END_OF_DAY),
    )


def is_in_week(date_string: Optional[str], week_start: datetime, week_end: datetime) -> bool:
    """Return whether ``date_string`` falls inside ``[week_start, week_end]``."""

    parsed = parse_date(date_string)
    if parsed is None:
        return False
    check = datetime.combine(parsed, time.min)
    return week_start <= check <= week_end


def recent_weeks(count: int = 12, today: Optional[date] = None) -> List[WeekOption]:
    """Return ``count`` week options, the current week first, stepping back 7 days."""

    current = today or date.today()
    weeks: List[WeekOption] = []
    for _ in range(count):
        start = week_range(current).week_start.date()
        weeks.append(
            WeekOption(
                week_start=start,
                value=format_date(start),
                label=f"Week of {start:%b} {start.day}, {start.year}",
            )
        )
        current -= timedelta(days=7)
    return weeks


__all__ = [
    "WeekRange",
    "WeekOption",
    "format_date",
    "parse_date",
    "week_range",
    "is_in_week",
    "recent_weeks",
]
