"""
Calendar Arithmetic.

Pure functions deriving calendar quantities from a proleptic Gregorian
``datetime.date``: ISO weekday, ordinal day of year,
Modified Julian Day and the date of Orthodox Easter.
"""

from __future__ import annotations

from datetime import date, timedelta

# date(1858, 11, 17).toordinal(); MJD 0
MJD_EPOCH_ORDINAL = 678576

# Julian day number of 0001-01-01 minus one, for converting JDN to ordinals
_JDN_ORDINAL_OFFSET = 1721425


def modified_julian_day(day: date) -> int:
    """Linear day count; strictly increasing with the date."""
    return day.toordinal() - MJD_EPOCH_ORDINAL


def iso_weekday(day: date) -> int:
    """1 (Monday) through 7 (Sunday)."""
    return day.isoweekday()


def day_of_year(day: date) -> int:
    """1-based ordinal day within the date's year."""
    return day.toordinal() - date(day.year, 1, 1).toordinal() + 1


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def is_weekend(day: date) -> bool:
    return iso_weekday(day) in (6, 7)


def year_count(day: date) -> int:
    """Which occurrence of its weekday within the year this date is."""
    return (day_of_year(day) - 1) // 7 + 1


def month_count(day: date) -> int:
    """Which occurrence of its weekday within the month this date is."""
    return (day.day - 1) // 7 + 1


def from_julian_calendar(year: int, month: int, day: int) -> date:
    """
    Convert a Julian-calendar date to the equivalent proleptic Gregorian date.

    Raises:
        ValueError: If the result lies outside the ``datetime.date`` range.
    """
    a = (14 - month) // 12
    y = year + 4800 - a
    m = month + 12 * a - 3
    jdn = day + (153 * m + 2) // 5 + 365 * y + y // 4 - 32083
    return date.fromordinal(jdn - _JDN_ORDINAL_OFFSET)


def _sunday_after(day: date) -> date:
    # Strictly after: a Sunday maps to the following Sunday.
    return day + timedelta(days=7 - iso_weekday(day) % 7)


def orthodox_paschal_moon(year: int) -> date:
    shifted_epact = (14 + 11 * (year % 19)) % 30
    return from_julian_calendar(year, 4, 19) - timedelta(days=shifted_epact)


def orthodox_easter(year: int) -> date:
    """
    Date of Orthodox Easter for ``year``, as a Gregorian date.

    Easter is the first Sunday strictly after the Orthodox paschal full
    moon, which is computed on the Julian calendar.

    Args:
        year: Calendar year (1 through 9999).

    Returns:
        The Easter Sunday of that year.
    """
    return _sunday_after(orthodox_paschal_moon(year))


def is_easter(day: date) -> bool:
    return orthodox_easter(day.year) == day


def easter_offset(day: date) -> int:
    """Signed number of days from Easter of the date's own year to the date."""
    return (day - orthodox_easter(day.year)).days
