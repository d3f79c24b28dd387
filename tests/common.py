import os
import time
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import patch

import tzdata

from datetrim import Kind, Timestamp, reset_system_tz

# Path to the raw TZif file of the Amsterdam timezone
AMS_TZIF = str(
    Path(tzdata.__file__).parent / "zoneinfo" / "Europe" / "Amsterdam"
)


class AlwaysEqual:
    def __eq__(self, _):
        return True


class NeverEqual:
    def __eq__(self, _):
        return False


class AlwaysLarger:
    def __lt__(self, _):
        return False

    def __le__(self, _):
        return False

    def __gt__(self, _):
        return True

    def __ge__(self, _):
        return True


class AlwaysSmaller:
    def __lt__(self, _):
        return True

    def __le__(self, _):
        return True

    def __gt__(self, _):
        return False

    def __ge__(self, _):
        return False


@contextmanager
def system_tz(name):
    try:
        with patch.dict(os.environ, {"TZ": name}):
            reset_system_tz()
            yield
    finally:
        if hasattr(time, "tzset"):
            time.tzset()
        # don't forget to reset the timezone after the patch!
        reset_system_tz()


def system_tz_nyc():
    return system_tz("America/New_York")


def system_tz_ams():
    return system_tz("Europe/Amsterdam")


def utc(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    *,
    nanosecond: int = 0,
) -> Timestamp:
    """Convenience function to create a UTC-kind timestamp"""
    return Timestamp(
        year,
        month,
        day,
        hour,
        minute,
        second,
        nanosecond=nanosecond,
        kind=Kind.UTC,
    )
