# clinic_notify/utils/datetime_utils.py
"""Helpers for the booking backend's date and clock formats"""
import re
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Optional

# "2:00 PM", "12:05am", and 24-hour "14:00"
_CLOCK_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp])\.?\s*[Mm]\.?\s*$")
_CLOCK_24H = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Parse the backend's date field.

    Accepts plain ISO dates ("2025-10-20") and ISO timestamps, of which only
    the calendar part is used. Returns None when the value can't be read.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value.strip()) < 10:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def parse_clock_time(value: Any) -> Optional[time]:
    """Parse a local clock string such as "2:00 PM". Returns None if unparsable."""
    if not isinstance(value, str):
        return None

    match = _CLOCK_12H.match(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if not 1 <= hours <= 12 or minutes > 59:
            return None
        meridiem = match.group(3).upper()
        if meridiem == "P" and hours < 12:
            hours += 12
        if meridiem == "A" and hours == 12:
            hours = 0
        return time(hours, minutes)

    match = _CLOCK_24H.match(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        seconds = int(match.group(3) or 0)
        if hours > 23 or minutes > 59 or seconds > 59:
            return None
        return time(hours, minutes, seconds)

    return None


def combine_instant(
        raw_date: Any,
        raw_time: Any,
        tz: Optional[tzinfo] = None
) -> Optional[datetime]:
    """Combine a date and a clock string into one instant, or None."""
    day = parse_calendar_date(raw_date)
    clock = parse_clock_time(raw_time)
    if day is None or clock is None:
        return None
    return datetime.combine(day, clock, tzinfo=tz)


def format_display_date(raw_date: Any) -> str:
    """Render a date as M/D/YYYY, falling back to the raw text."""
    day = parse_calendar_date(raw_date)
    if day is None:
        return "" if raw_date is None else str(raw_date)
    return f"{day.month}/{day.day}/{day.year}"


def align_to(value: datetime, reference: datetime) -> datetime:
    """
    Make ``value`` comparable with ``reference``.

    Naive datetimes are read in the reference's zone; an aware value compared
    against a naive reference is converted to naive UTC.
    """
    if reference.tzinfo is None:
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    if value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def to_utc(moment: datetime) -> datetime:
    """Aware datetimes as UTC so arithmetic measures elapsed time; naive ones unchanged."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc)
