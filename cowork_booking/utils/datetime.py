"""Local-time datetime utilities.

The booking screens reason in the user's local calendar: "today", day
expansion and plan end dates are all local. Backend timestamps may arrive
with a UTC offset; they are converted to naive local time on the way in so
every comparison in the workflow is between naive local datetimes.
"""

from datetime import date, datetime, time
from typing import Any, Optional

from dateutil import parser as date_parser


def local_now() -> datetime:
    """
    Return the current local time as a naive datetime.

    Example:
        >>> local_now().tzinfo is None
        True
    """
    return datetime.now()


def local_today() -> date:
    return local_now().date()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_backend_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a backend timestamp into a naive local datetime.

    Accepts ISO-8601 strings (date-only, any fraction length, "Z" or
    numeric offsets such as "+0000"), `datetime` and `date` instances.
    Fractions finer than microseconds are truncated.

    Example:
        >>> parse_backend_datetime("2024-01-15")
        datetime.datetime(2024, 1, 15, 0, 0)
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return start_of_day(value)
    if isinstance(value, str):
        return to_local_naive(date_parser.isoparse(value.strip()))
    raise ValueError(f"Unsupported datetime value: {value!r}")
