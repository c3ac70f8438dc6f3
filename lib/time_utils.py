"""
Timestamp helpers.
Rows store naive datetimes in the service's local time; values arriving with
an offset (ISO strings from the RPC layer or API callers) are converted to it.
"""

from datetime import date, datetime, time, timedelta
from typing import Tuple, Union

Timestamp = Union[str, datetime]


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_timestamp(value: Timestamp) -> datetime:
    """Accept a datetime or an ISO-8601 string (a trailing Z is allowed)"""
    if isinstance(value, datetime):
        return to_local_naive(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_local_naive(datetime.fromisoformat(text))


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[00:00 of day, 00:00 of the next day)"""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)
