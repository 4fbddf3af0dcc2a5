"""Daily check-ins: at most one per salesperson per calendar day."""
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Union

from .dates import format_date, parse_date
from .errors import DuplicateCheckInError, ValidationError
from .models import CheckInRecord

LOGGER = logging.getLogger(__name__)


def has_checked_in(records: Iterable[CheckInRecord], salesperson_name: str, today: str) -> bool:
    name = (salesperson_name or "").strip()
    return any(record.salesperson_name == name and record.date == today for record in records)


def check_in(
    records: Iterable[CheckInRecord],
    salesperson_name: str,
    today: Optional[Union[date, str]] = None,
    *,
    now: Optional[datetime] = None,
) -> CheckInRecord:
    """Create the check-in for ``salesperson_name`` on ``today``.

    ``records`` are the existing check-ins; a second check-in for the same name
    and day raises :class:`DuplicateCheckInError`. The caller appends the
    returned record to its collection.
    """

    name = (salesperson_name or "").strip()
    if not name:
        raise ValidationError("Please select a salesperson.")

    instant = now or datetime.now(timezone.utc)
    if isinstance(today, str):
        parsed = parse_date(today)
        if parsed is None:
            raise ValidationError(f"Invalid check-in date '{today}'; expected YYYY-MM-DD.")
        today = parsed
    day = format_date(today or date.today())
    if has_checked_in(records, name, day):
        raise DuplicateCheckInError(f"{name} has already checked in on {day}.")

    record = CheckInRecord(
        id=f"checkin-{uuid.uuid4().hex}",
        salesperson_name=name,
        date=day,
        timestamp=instant.isoformat(),
    )
    LOGGER.info("%s checked in on %s", name, day)
    return record


def check_ins_on(records: Iterable[CheckInRecord], day: str) -> List[CheckInRecord]:
    return [record for record in records if record.date == day]


__all__ = ["has_checked_in", "check_in", "check_ins_on"]
