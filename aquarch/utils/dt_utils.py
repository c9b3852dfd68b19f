# File: utils/dt_utils.py
"""Date and time utilities for Aquarch.

Pure Python date/time functions shared by the builders and engines.
Uses standard library datetime plus dateutil for lenient parsing and
calendar-aware offsets.

All datetimes returned from this module are timezone-aware UTC.

Functions:
    - dt_now_utc: Get current datetime in UTC
    - as_utc: Normalize an aware or naive datetime to UTC
    - dt_parse: Normalize epoch milliseconds, ISO strings, and datetimes
    - dt_minutes_between: Elapsed minutes between two timestamps
    - dt_add_hours: Offset a datetime by whole hours
    - dt_hours_until: Whole hours (rounded up) until a target datetime
"""

from __future__ import annotations

from datetime import UTC, date, datetime
import logging
import math

from dateutil import parser as dt_parser
from dateutil.relativedelta import relativedelta

# Module-level logger (kept separate from const to avoid import cycles)
_LOGGER = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

MILLISECONDS_PER_SECOND = 1000
SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600


# ==============================================================================
# Current Time
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware).

    Returns:
        Current UTC datetime.
    """
    return datetime.now(UTC)


# ==============================================================================
# Normalization
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are assumed to already be in UTC; the session layer
    stores UTC timestamps.

    Args:
        dt_obj: Datetime object (aware or naive)

    Returns:
        Datetime in UTC timezone
    """
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(UTC)


def dt_parse(dt_input: str | int | float | date | datetime | None) -> datetime | None:
    """Normalize various timestamp formats to an aware UTC datetime.

    Accepts:
        - int/float: epoch milliseconds (the document store's native format)
        - str: ISO 8601 or anything dateutil can read; digit-only strings are
          treated as epoch milliseconds
        - date: midnight UTC of that day
        - datetime: converted to UTC

    Args:
        dt_input: Timestamp in any supported format, or None

    Returns:
        Aware UTC datetime, or None if the input is empty or unparseable.

    Example:
        >>> dt_parse(0)
        datetime.datetime(1970, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)

        >>> dt_parse("2026-01-18T12:30:00+00:00")
        datetime.datetime(2026, 1, 18, 12, 30, tzinfo=datetime.timezone.utc)
    """
    if dt_input is None or isinstance(dt_input, bool):
        return None

    if isinstance(dt_input, datetime):
        return as_utc(dt_input)

    if isinstance(dt_input, date):
        return datetime(dt_input.year, dt_input.month, dt_input.day, tzinfo=UTC)

    if isinstance(dt_input, (int, float)):
        if not math.isfinite(dt_input):
            return None
        try:
            return datetime.fromtimestamp(dt_input / MILLISECONDS_PER_SECOND, tz=UTC)
        except (OverflowError, OSError, ValueError):
            _LOGGER.debug("Epoch timestamp out of range: %s", dt_input)
            return None

    if isinstance(dt_input, str):
        text = dt_input.strip()
        if not text:
            return None
        if text.lstrip("-").isdigit():
            return dt_parse(int(text))
        try:
            return as_utc(dt_parser.isoparse(text))
        except ValueError:
            pass
        try:
            return as_utc(dt_parser.parse(text))
        except (ValueError, OverflowError):
            _LOGGER.debug("Unparseable timestamp: %s", dt_input)
            return None

    return None


# ==============================================================================
# Arithmetic
# ==============================================================================


def dt_minutes_between(start: datetime | None, end: datetime | None) -> float | None:
    """Return elapsed minutes from start to end.

    Args:
        start: Start timestamp
        end: End timestamp

    Returns:
        Fractional minutes, or None if either timestamp is missing.
    """
    if start is None or end is None:
        return None
    return (as_utc(end) - as_utc(start)).total_seconds() / SECONDS_PER_MINUTE


def dt_add_hours(dt_obj: datetime, hours: int) -> datetime:
    """Return dt_obj shifted by a whole number of hours."""
    return as_utc(dt_obj) + relativedelta(hours=hours)


def dt_hours_until(target: datetime, now: datetime | None = None) -> int:
    """Return whole hours until target, rounded up; 0 once target has passed.

    Args:
        target: Future datetime
        now: Reference time (defaults to current UTC time)

    Returns:
        Hours remaining, never negative.
    """
    reference = as_utc(now) if now is not None else dt_now_utc()
    remaining = (as_utc(target) - reference).total_seconds()
    if remaining <= 0:
        return 0
    return math.ceil(remaining / SECONDS_PER_HOUR)
