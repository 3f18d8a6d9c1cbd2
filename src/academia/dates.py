"""Date helpers shared by the store and the orchestrators.

All timestamps are stored as naive UTC datetimes (SQLite keeps no offset).
"""

from __future__ import annotations

import calendar
from datetime import UTC, date, datetime

from academia.exceptions import InvalidRequestError


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Drop the offset of an aware datetime after converting it to UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def add_months(value: datetime, months: int) -> datetime:
    """Shift a datetime by whole months, clamping the day to the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def parse_date(value: str | date | datetime | None, field: str) -> datetime:
    """Parse a user supplied date.

    Accepts ISO 8601 dates ("2024-03-01") and datetimes, with or without offset.

    Raises:
        InvalidRequestError: If the value is missing or cannot be parsed.
    """
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not value:
        raise InvalidRequestError(f"Missing {field}")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidRequestError(f"Invalid {field}: {value!r}") from e
    return to_naive_utc(parsed)
