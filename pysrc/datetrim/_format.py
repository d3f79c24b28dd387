"""Fixed-template string formats.

All formats are culture-invariant: month names and AM/PM designators are
always English, regardless of the current locale.
"""

from datetime import datetime as _datetime

_MONTH_ABBRS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


def _clock12(hour: int) -> tuple[int, str]:
    return (hour % 12 or 12), ("AM" if hour < 12 else "PM")


def _iso_date_time(dt: _datetime) -> str:
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )


def precise(dt: _datetime, ticks: int) -> str:
    """``YYYY-MM-DDTHH:MM:SS.fffffff``, with sub-second ``ticks``"""
    return f"{_iso_date_time(dt)}.{ticks:07d}"


def iso8601(dt: _datetime) -> str:
    """``YYYY-MM-DDTHH:MM:SS.fffZ``"""
    return f"{_iso_date_time(dt)}.{dt.microsecond // 1_000:03d}Z"


def filename(dt: _datetime) -> str:
    """``YYYY-MM-DD--HH-MM-SS``"""
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"--{dt.hour:02d}-{dt.minute:02d}-{dt.second:02d}"
    )


def display(dt: _datetime) -> str:
    """``Mon DD, YYYY``"""
    return f"{_MONTH_ABBRS[dt.month - 1]} {dt.day:02d}, {dt.year:04d}"


def us_date(dt: _datetime) -> str:
    """``MM/DD/YYYY``"""
    return f"{dt.month:02d}/{dt.day:02d}/{dt.year:04d}"


def us_datetime(dt: _datetime, abbr: str) -> str:
    """``MM/DD/YYYY hh:MM:SS AM ABBR``"""
    h12, ampm = _clock12(dt.hour)
    return (
        f"{us_date(dt)} {h12:02d}:{dt.minute:02d}:{dt.second:02d} "
        f"{ampm} {abbr}"
    )


def us_date_hour(dt: _datetime, abbr: str) -> str:
    """``MM/DD/YYYY h AM ABBR``"""
    h12, ampm = _clock12(dt.hour)
    return f"{us_date(dt)} {h12} {ampm} {abbr}"


def hour(dt: _datetime, abbr: str) -> str:
    """``hh AM ABBR``"""
    h12, ampm = _clock12(dt.hour)
    return f"{h12:02d} {ampm} {abbr}"
