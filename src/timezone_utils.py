# src/timezone_utils.py
#
# Timezone and time arithmetic helpers shared by the scheduling engine.
# All engine comparisons happen on naive local wall-clock datetimes.

import math
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

import pytz

from config.settings import APP_TIMEZONE, DEFAULT_START_HOUR

DEFAULT_TIMEZONE = APP_TIMEZONE
_tz = pytz.timezone(DEFAULT_TIMEZONE)


def now() -> datetime:
    """
    Get current timezone-aware datetime in the configured timezone.
    """
    return datetime.now(_tz)


def to_local(dt: datetime) -> datetime:
    """
    Convert a datetime to naive local wall-clock time.
    Aware values are converted to DEFAULT_TIMEZONE first; naive values are
    assumed to already be local and are returned unchanged.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(_tz).replace(tzinfo=None)


def day_key(dt: datetime) -> str:
    """Calendar day of a datetime as YYYY-MM-DD (local)."""
    return to_local(dt).strftime("%Y-%m-%d")


def same_day(a: datetime, b: datetime) -> bool:
    return day_key(a) == day_key(b)


def duration_minutes(hours: float) -> int:
    return int(round(hours * 60))


def add_minutes(dt: datetime, minutes: int) -> datetime:
    return dt + timedelta(minutes=minutes)


def add_hours(dt: datetime, hours: float) -> datetime:
    """End of a block that starts at dt and lasts `hours` (whole minutes)."""
    return add_minutes(dt, duration_minutes(hours))


def minutes_between(start: datetime, end: datetime) -> int:
    return int(round((to_local(end) - to_local(start)).total_seconds() / 60))


def minutes_since_midnight(dt: datetime) -> int:
    local = to_local(dt)
    return local.hour * 60 + local.minute


def minutes_to_time(total_minutes: int) -> str:
    """425 -> '07:05'"""
    hours, minutes = divmod(int(total_minutes), 60)
    return f"{hours:02d}:{minutes:02d}"


def time_to_minutes(value: str) -> int:
    """'07:05' -> 425"""
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def round_to_nearest_half(value: float) -> float:
    # halves go up (2.25 -> 2.5), unlike round()
    return math.floor(value * 2 + 0.5) / 2


def format_time(dt: datetime) -> str:
    """9:05 AM style, no leading zero."""
    return to_local(dt).strftime("%I:%M %p").lstrip("0")


def format_display_date(dt: Union[datetime, date]) -> str:
    """Jan 5, 2025 style."""
    if isinstance(dt, datetime):
        dt = to_local(dt)
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}"


def _at_default_hour(d: date) -> datetime:
    return datetime.combine(d, time(hour=DEFAULT_START_HOUR))


def parse_job_start(value) -> Optional[datetime]:
    """
    Parse a stored job start into a naive local datetime.

    Accepts:
      - datetime (aware values converted to local time)
      - date or 'YYYY-MM-DD' -> DEFAULT_START_HOUR on that day
      - 'YYYY-MM-DD HH:MM[:SS]' / ISO 8601 with or without offset
      - 'YYYY-MM-DDT00:00:00Z' -> a date-only value saved as UTC midnight,
        shown at DEFAULT_START_HOUR on that date
    Returns None for empty values. Raises ValueError on anything else.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local(value)
    if isinstance(value, date):
        return _at_default_hour(value)

    raw = str(value).strip()
    if not raw:
        return None

    if "T" in raw or " " in raw:
        is_utc_marker = raw.endswith("Z")
        dt = datetime.fromisoformat(raw[:-1] + "+00:00" if is_utc_marker else raw)
        if is_utc_marker and dt.time() == time(0, 0):
            return _at_default_hour(dt.date())
        return to_local(dt)

    return _at_default_hour(date.fromisoformat(raw))
