"""
Timestamp parsing and relative-time formatting.

All widgets (forum, progress, jobs) share one relative-time function with
these breakpoints:

    < 1 minute   -> "Just now"
    < 1 hour     -> "{m}m ago"
    < 24 hours   -> "{h}h ago"
    1 day        -> "Yesterday"
    <= 7 days    -> "{d} days ago"
    <= 30 days   -> "{w} weeks ago"
    otherwise    -> "{mo} months ago"
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

Timestamp = Union[str, datetime, date, None]

DAY = timedelta(days=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Timestamp) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (or date/datetime) into an aware datetime.

    - "Z" suffix is accepted
    - date-only values become midnight
    - naive values are treated as UTC
    Returns None for empty or unparseable input.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def time_ago(timestamp: Timestamp, now: Optional[datetime] = None) -> str:
    """
    Human relative time for a past timestamp.
    """
    then = parse_timestamp(timestamp)
    if then is None:
        return "Just now"
    current = parse_timestamp(now) or utcnow()

    seconds = math.floor((current - then).total_seconds())
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"

    days = seconds // 86400
    if days == 1:
        return "Yesterday"
    if days <= 7:
        return f"{days} days ago"
    if days <= 30:
        return _plural(days // 7, "week") + " ago"
    return _plural(days // 30, "month") + " ago"


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def days_until(target: Timestamp, now: Optional[datetime] = None) -> Optional[int]:
    """
    Calendar days from today's midnight until target, rounded up.

    An exam later today counts as 1 day away, tomorrow morning as 1 or 2
    depending on the hour. Returns None when target cannot be parsed.
    """
    when = parse_timestamp(target)
    if when is None:
        return None
    current = parse_timestamp(now) or utcnow()

    midnight = start_of_day(current.astimezone(when.tzinfo))
    return math.ceil((when - midnight) / DAY)
