"""Tick, calendar, and fractional unit arithmetic helpers."""

from datetime import date as _date

TICKS_PER_MICROSECOND = 10
TICKS_PER_MILLISECOND = 10_000
TICKS_PER_SECOND = 10_000_000
TICKS_PER_MINUTE = 60 * TICKS_PER_SECOND
TICKS_PER_HOUR = 60 * TICKS_PER_MINUTE
TICKS_PER_DAY = 24 * TICKS_PER_HOUR
TICKS_PER_WEEK = 7 * TICKS_PER_DAY
NANOS_PER_TICK = 100

# 0001-01-01 through 9999-12-31T23:59:59.9999999
MAX_TICKS = _date.max.toordinal() * TICKS_PER_DAY - 1
UNIX_EPOCH_TICKS = (_date(1970, 1, 1).toordinal() - 1) * TICKS_PER_DAY


def ticks_for(value: float, ticks_per_unit: int) -> int:
    """Convert a (possibly fractional) amount of a unit to whole ticks.

    The integral and fractional parts are scaled separately and each is
    truncated toward zero, so large integral amounts don't lose precision
    to floating point.
    """
    integral = int(value)
    return integral * ticks_per_unit + int(
        (value - integral) * ticks_per_unit
    )


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


# 1-indexed days per month
_MONTHDAYS = [0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


def days_in_month(year: int, month: int) -> int:
    return _MONTHDAYS[month] + (month == 2 and is_leap(year))


def quarter_start_month(month: int) -> int:
    return (month - 1) // 3 * 3 + 1


def replace_year_saturating(d: _date, year: int, /) -> _date:
    try:
        return d.replace(year=year)
    except ValueError:
        # only happens when we move Feb 29 to a non-leap year,
        # or when the year itself is out of range (raised again below)
        return d.replace(year=year, day=28)


def add_months(d: _date, months: int) -> _date:
    year_delta, month0_new = divmod(d.month - 1 + months, 12)
    year_new = d.year + year_delta
    month_new = month0_new + 1
    try:
        return d.replace(year=year_new, month=month_new)
    except ValueError:
        # only happens when we move to a month with fewer days,
        # or when the year is out of range (raised again below)
        return d.replace(
            year=year_new,
            month=month_new,
            day=days_in_month(year_new, month_new),
        )
