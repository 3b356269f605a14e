"""Day-type and time-of-day helpers."""

from datetime import datetime

from .models import DayType

SECONDS_PER_DAY = 24 * 3600


def classify_day(now: datetime) -> DayType:
    """Return the schedule bucket for the calendar day of ``now``."""
    weekday = now.weekday()  # Monday == 0
    if weekday == 6:
        return DayType.SUNDAY
    if weekday == 5:
        return DayType.SATURDAY
    return DayType.WEEKDAY


def seconds_since_midnight(now: datetime) -> int:
    """Return seconds elapsed since local midnight, in [0, 86399]."""
    return now.hour * 3600 + now.minute * 60 + now.second
