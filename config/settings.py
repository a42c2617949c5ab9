# config/settings.py
#
#   loading engine settings (timezone, display window, fallbacks) from .env

import os
from dotenv import load_dotenv

load_dotenv()  # loads .env into environment


def _int_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def _float_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}")


# timezone used to turn aware timestamps into local wall-clock times
# (Saskatoon runs on America/Regina, no DST)
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "America/Regina")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# fallback length for jobs with no hours recorded (display/overlap only, never saved)
DEFAULT_DURATION_HOURS = _float_env("DEFAULT_DURATION_HOURS", 3.0)

# a job stored with only a date is shown at this hour
DEFAULT_START_HOUR = _int_env("DEFAULT_START_HOUR", 9)

# calendar day view: 7am row through the 7pm row
CALENDAR_START_HOUR = _int_env("CALENDAR_START_HOUR", 7)
CALENDAR_END_HOUR = _int_env("CALENDAR_END_HOUR", 19)

# shortest block the calendar will draw
MIN_VISUAL_MINUTES = _int_env("MIN_VISUAL_MINUTES", 15)

# checks
if DEFAULT_DURATION_HOURS <= 0:
    raise RuntimeError("DEFAULT_DURATION_HOURS must be positive!")
if not 0 <= DEFAULT_START_HOUR <= 23:
    raise RuntimeError("DEFAULT_START_HOUR must be between 0 and 23!")
if not 0 <= CALENDAR_START_HOUR <= CALENDAR_END_HOUR <= 23:
    raise RuntimeError("CALENDAR_START_HOUR/CALENDAR_END_HOUR must satisfy 0 <= start <= end <= 23!")
if MIN_VISUAL_MINUTES < 0:
    raise RuntimeError("MIN_VISUAL_MINUTES cannot be negative!")
