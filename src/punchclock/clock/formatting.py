"""Human-readable formatting for hours, dates and punch times.

Output is fixed English and independent of the process locale.
"""

import math
from datetime import date, datetime, timedelta

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _plural(count: float, unit: str) -> str:
    return unit if count == 1 else f"{unit}s"


def format_hours(hours: float) -> str:
    """Format decimal hours into a readable string.

    Args:
        hours: Number of hours.

    Returns:
        ``"0 hours"`` for zero, whole minutes below one hour (e.g.
        ``"30 minutes"``), otherwise the decimal hours (e.g. ``"2.5 hours"``).
    """
    if hours == 0:
        return "0 hours"

    if hours < 1:
        minutes = math.floor(hours * 60 + 0.5)
        return f"{minutes} {_plural(minutes, 'minute')}"

    value = int(hours) if float(hours).is_integer() else hours
    return f"{value} {_plural(hours, 'hour')}"


def format_date(day: date, include_year: bool = False) -> str:
    """Format a date like ``"Mon, Jan 1"`` or ``"Mon, Jan 1, 2024"``."""
    text = f"{_WEEKDAYS[day.weekday()]}, {_MONTHS[day.month - 1]} {day.day}"
    if include_year:
        text += f", {day.year}"
    return text


def format_week_range(week_start: date) -> str:
    """Format a Sunday-start week like ``"Sun, Dec 31 - Sat, Jan 6"``."""
    if isinstance(week_start, datetime):
        week_start = week_start.date()
    week_end = week_start + timedelta(days=6)
    return f"{format_date(week_start)} - {format_date(week_end)}"


def format_punch_time(moment: datetime) -> str:
    """Format a time on the 12-hour clock, e.g. ``"9:05 AM"``."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"
