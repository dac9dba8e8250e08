"""Calendar arithmetic shared by anchor resolution and evaluation."""

import calendar
from datetime import date, datetime

from dateutil.relativedelta import relativedelta


def as_date(value: date | datetime) -> date:
    """Truncate a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> int:
    """Return ``day``, or the month's last day when ``day`` overshoots it."""
    return min(day, days_in_month(year, month))


def rolled_date(year: int, month: int, day: int) -> date:
    """
    Build a date, carrying an overshooting day into the following month.

    February 30th becomes March 1st in a leap year and March 2nd otherwise,
    the same way a calendar roll-over treats it.

    Args:
        year: Calendar year
        month: Month, 1-12
        day: Day of month, 1-31

    Returns:
        A real calendar date
    """
    overflow = day - days_in_month(year, month)
    if overflow <= 0:
        return date(year, month, day)
    return date(year, month, 1) + relativedelta(months=1, days=overflow - 1)


def month_distance(start: date, end: date) -> int:
    """Signed number of calendar months from ``start`` to ``end``."""
    return (end.year - start.year) * 12 + (end.month - start.month)
