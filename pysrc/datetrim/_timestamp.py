# The MIT License (MIT)
#
# Copyright (c) The datetrim authors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - Timestamps store a single integer: the number of 100ns ticks since
#   0001-01-01T00:00:00. All calendar fields are derived from it on demand.
# - The "kind" of a timestamp is metadata only. It's never consulted for
#   equality or ordering, only by conversions that need to know how to
#   interpret the wall time.
from __future__ import annotations

import enum
from datetime import (
    date as _date,
    datetime as _datetime,
    timedelta as _timedelta,
    timezone as _timezone,
    tzinfo as _tzinfo,
)
from math import isfinite
from struct import pack, unpack
from time import time_ns
from typing import TYPE_CHECKING, ClassVar, Union, no_type_check

from . import _format
from ._math import (
    MAX_TICKS,
    NANOS_PER_TICK,
    TICKS_PER_DAY,
    TICKS_PER_HOUR,
    TICKS_PER_MICROSECOND,
    TICKS_PER_MILLISECOND,
    TICKS_PER_MINUTE,
    TICKS_PER_SECOND,
    TICKS_PER_WEEK,
    UNIX_EPOCH_TICKS,
    add_months,
    days_in_month,
    is_leap,
    quarter_start_month,
    replace_year_saturating,
    ticks_for,
)
from ._tz import (
    Disambiguate,
    as_fold,
    get_system_tz,
    get_tz,
    simplify_abbreviation,
)

__all__ = [
    # Values
    "Timestamp",
    "Kind",
    "TimeUnit",
    "Weekday",
    # Exceptions
    "UnsupportedUnit",
    "SkippedTime",
    "RepeatedTime",
    # Constants
    "TICK",
    "NANOSECOND",
    "MICROSECOND",
    "MILLISECOND",
    "SECOND",
    "MINUTE",
    "HOUR",
    "DAY",
    "WEEK",
    "MONTH",
    "QUARTER",
    "YEAR",
    "DECADE",
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
]


class Kind(enum.Enum):
    """How the wall time of a :class:`Timestamp` should be interpreted.

    The kind never changes the stored value, only how conversions read it.
    """

    UNSPECIFIED = 0
    UTC = 1
    LOCAL = 2


class TimeUnit(enum.Enum):
    """Precision units, from finest to coarsest.

    Operations accepting a unit also accept its ``.value``,
    e.g. ``"hour"`` instead of ``TimeUnit.HOUR``.
    """

    TICK = "tick"
    NANOSECOND = "nanosecond"
    MICROSECOND = "microsecond"
    MILLISECOND = "millisecond"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    DECADE = "decade"


TICK = TimeUnit.TICK
NANOSECOND = TimeUnit.NANOSECOND
MICROSECOND = TimeUnit.MICROSECOND
MILLISECOND = TimeUnit.MILLISECOND
SECOND = TimeUnit.SECOND
MINUTE = TimeUnit.MINUTE
HOUR = TimeUnit.HOUR
DAY = TimeUnit.DAY
WEEK = TimeUnit.WEEK
MONTH = TimeUnit.MONTH
QUARTER = TimeUnit.QUARTER
YEAR = TimeUnit.YEAR
DECADE = TimeUnit.DECADE

Unit = Union[TimeUnit, str]
TimeZoneRef = Union[str, _tzinfo]


class Weekday(enum.Enum):
    """The days of the week; ``.value`` corresponds with ISO numbering."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


MONDAY = Weekday.MONDAY
TUESDAY = Weekday.TUESDAY
WEDNESDAY = Weekday.WEDNESDAY
THURSDAY = Weekday.THURSDAY
FRIDAY = Weekday.FRIDAY
SATURDAY = Weekday.SATURDAY
SUNDAY = Weekday.SUNDAY

# Helpers that pre-compute/lookup as much as possible
_UTC = _timezone.utc
_object_new = object.__new__
_EPOCH = _datetime(1, 1, 1)
_weekdays = tuple(Weekday)

# Units truncated by plain tick arithmetic. These keep the input kind.
_SUBSECOND_TRIM_TICKS = {
    TICK: 1,
    NANOSECOND: 100,
    MICROSECOND: TICKS_PER_MICROSECOND,
    MILLISECOND: TICKS_PER_MILLISECOND,
}
_FIXED_TRIM_TICKS = {
    SECOND: TICKS_PER_SECOND,
    MINUTE: TICKS_PER_MINUTE,
    HOUR: TICKS_PER_HOUR,
    DAY: TICKS_PER_DAY,
}
_FIXED_ADD_TICKS = {
    MILLISECOND: TICKS_PER_MILLISECOND,
    SECOND: TICKS_PER_SECOND,
    MINUTE: TICKS_PER_MINUTE,
    HOUR: TICKS_PER_HOUR,
    DAY: TICKS_PER_DAY,
}
# Duration-to-unit conversion. The coarse units use average lengths.
_AGE_DIVISORS = {
    TICK: 1,
    MICROSECOND: TICKS_PER_MICROSECOND,
    MILLISECOND: TICKS_PER_MILLISECOND,
    SECOND: TICKS_PER_SECOND,
    MINUTE: TICKS_PER_MINUTE,
    HOUR: TICKS_PER_HOUR,
    DAY: TICKS_PER_DAY,
    WEEK: TICKS_PER_HOUR * 7,
    MONTH: TICKS_PER_DAY * 30.44,
    QUARTER: TICKS_PER_DAY * (365.25 / 4),
    YEAR: TICKS_PER_DAY * 365.25,
}


class _ImmutableBase:
    __slots__ = ()

    # Immutable classes don't need to be copied
    @no_type_check
    def __copy__(self):
        return self

    @no_type_check
    def __deepcopy__(self, _):
        return self


if TYPE_CHECKING:
    from typing import final
else:

    def final(cls):

        def init_subclass_not_allowed(cls, **kwargs):  # pragma: no cover
            raise TypeError("Subclassing not allowed")

        cls.__init_subclass__ = init_subclass_not_allowed
        return cls


@final
class Timestamp(_ImmutableBase):
    """A date and time with 100-nanosecond (tick) precision,
    tagged with a :class:`Kind`.

    Example
    -------
    >>> ts = Timestamp(2024, 5, 17, 13, 45, kind=Kind.UTC)
    >>> ts
    Timestamp(2024-05-17 13:45:00Z)
    >>> ts.trim(QUARTER)
    Timestamp(2024-04-01 00:00:00Z)
    >>> ts.add(1.5, HOUR)
    Timestamp(2024-05-17 15:15:00Z)
    """

    __slots__ = ("_ticks", "_kind")
    _ticks: int
    _kind: Kind

    MIN: ClassVar[Timestamp]
    """The earliest representable timestamp, 0001-01-01T00:00:00"""
    MAX: ClassVar[Timestamp]
    """The latest representable timestamp, 9999-12-31T23:59:59.9999999"""

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
        kind: Kind = Kind.UNSPECIFIED,
    ) -> None:
        if not isinstance(kind, Kind):
            raise TypeError(f"kind must be a Kind, got {kind!r}")
        if nanosecond < 0 or nanosecond >= 1_000_000_000:
            raise ValueError(f"nanosecond out of range: {nanosecond}")
        py_dt = _datetime(year, month, day, hour, minute, second)
        self._ticks = _ticks_from_py(py_dt) + nanosecond // NANOS_PER_TICK
        self._kind = kind

    @classmethod
    def from_ticks(
        cls, ticks: int, /, kind: Kind = Kind.UNSPECIFIED
    ) -> Timestamp:
        """Create a timestamp from the number of ticks since
        0001-01-01T00:00:00.

        The inverse of the ``ticks`` property.
        """
        if not isinstance(ticks, int):
            raise TypeError("ticks must be an integer")
        if not isinstance(kind, Kind):
            raise TypeError(f"kind must be a Kind, got {kind!r}")
        return cls._new(_check_bounds(ticks), kind)

    @classmethod
    def now(cls) -> Timestamp:
        """The current time as a UTC-kind timestamp"""
        return cls._new(
            UNIX_EPOCH_TICKS + time_ns() // NANOS_PER_TICK, Kind.UTC
        )

    @classmethod
    def local_now(cls) -> Timestamp:
        """The current wall time in the system timezone,
        as a local-kind timestamp"""
        ticks = UNIX_EPOCH_TICKS + time_ns() // NANOS_PER_TICK
        return cls._new(_utc_to_wall(ticks, get_system_tz()), Kind.LOCAL)

    @classmethod
    def from_unix_seconds(cls, i: int | float, /) -> Timestamp:
        """Create a UTC-kind timestamp from a UNIX timestamp (in seconds).

        The inverse of the ``unix_seconds()`` method.
        """
        if not isfinite(i):
            raise ValueError("UNIX timestamp must be finite")
        return cls._new(
            _check_bounds(UNIX_EPOCH_TICKS + ticks_for(i, TICKS_PER_SECOND)),
            Kind.UTC,
        )

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> Timestamp:
        """Create a timestamp from a standard library ``datetime``.

        Naive datetimes become unspecified-kind timestamps with the same
        wall time. Aware datetimes are converted to UTC first.
        """
        if not isinstance(d, _datetime):
            raise TypeError(f"expected a datetime, got {d!r}")
        if d.tzinfo is None or d.utcoffset() is None:
            return cls._new(_ticks_from_py(d), Kind.UNSPECIFIED)
        try:
            as_utc = d.astimezone(_UTC)
        except (OverflowError, ValueError):
            raise ValueError("Timestamp out of range")
        return cls._new(_ticks_from_py(as_utc), Kind.UTC)

    @property
    def ticks(self) -> int:
        """The number of 100ns ticks since 0001-01-01T00:00:00"""
        return self._ticks

    @property
    def kind(self) -> Kind:
        return self._kind

    @property
    def year(self) -> int:
        return self._py_naive().year

    @property
    def month(self) -> int:
        return self._py_naive().month

    @property
    def day(self) -> int:
        return self._py_naive().day

    @property
    def hour(self) -> int:
        return self._ticks % TICKS_PER_DAY // TICKS_PER_HOUR

    @property
    def minute(self) -> int:
        return self._ticks % TICKS_PER_HOUR // TICKS_PER_MINUTE

    @property
    def second(self) -> int:
        return self._ticks % TICKS_PER_MINUTE // TICKS_PER_SECOND

    @property
    def tick(self) -> int:
        """The sub-second part, in ticks (0-9_999_999)"""
        return self._ticks % TICKS_PER_SECOND

    @property
    def nanosecond(self) -> int:
        """The sub-second part, in nanoseconds. Always a multiple of 100."""
        return self._ticks % TICKS_PER_SECOND * NANOS_PER_TICK

    @property
    def weekday(self) -> Weekday:
        # 0001-01-01 is a Monday
        return _weekdays[self._ticks // TICKS_PER_DAY % 7]

    def date(self) -> _date:
        """The date part, as a standard library ``date``"""
        return _date.fromordinal(self._ticks // TICKS_PER_DAY + 1)

    def date_as_int(self) -> int:
        """The date as an integer in the form ``YYYYMMDD``

        Example
        -------
        >>> Timestamp(2023, 3, 15, 20).date_as_int()
        20230315
        """
        d = self.date()
        return d.year * 10_000 + d.month * 100 + d.day

    def py_datetime(self) -> _datetime:
        """Convert to a standard library ``datetime``.

        UTC-kind timestamps become aware datetimes in UTC, other kinds
        become naive datetimes with the same wall time.

        Note
        ----
        Ticks are truncated to microseconds.
        """
        dt = self._py_naive()
        return dt.replace(tzinfo=_UTC) if self._kind is Kind.UTC else dt

    def to_offset_py_datetime(self) -> _datetime:
        """Convert to an aware standard library ``datetime``.

        UTC-kind timestamps get a zero offset. Local and unspecified
        timestamps are read as wall time in the system timezone.
        """
        if self._kind is Kind.UTC:
            return self._py_naive().replace(tzinfo=_UTC)
        zone = get_system_tz()
        utc_ticks = _wall_to_utc(self._ticks, zone, "compatible")
        return _py_from_ticks(utc_ticks).replace(tzinfo=_UTC).astimezone(zone)

    def unix_seconds(self) -> int:
        """The number of whole seconds since 1970-01-01T00:00:00Z.

        Local and unspecified timestamps are read as wall time in
        the system timezone.
        """
        if self._kind is Kind.UTC:
            utc_ticks = self._ticks
        else:
            utc_ticks = _wall_to_utc(
                self._ticks, get_system_tz(), "compatible"
            )
        return (utc_ticks - UNIX_EPOCH_TICKS) // TICKS_PER_SECOND

    def with_kind(self, kind: Kind, /) -> Timestamp:
        """Stamp a different kind on the same wall time"""
        if not isinstance(kind, Kind):
            raise TypeError(f"kind must be a Kind, got {kind!r}")
        return self if kind is self._kind else self._new(self._ticks, kind)

    def as_utc_kind(self) -> Timestamp:
        """Mark as UTC, without any conversion"""
        return self.with_kind(Kind.UTC)

    def as_unspecified_kind(self) -> Timestamp:
        """Mark as unspecified, without any conversion"""
        return self.with_kind(Kind.UNSPECIFIED)

    def exact_eq(self, other: Timestamp, /) -> bool:
        """Equality that also requires the kinds to match.

        Regular ``==`` compares only the ticks.
        """
        if type(other) is not Timestamp:
            raise TypeError("Can't compare different types")
        return self._ticks == other._ticks and self._kind is other._kind

    def is_between(self, start: Timestamp, end: Timestamp, /) -> bool:
        """Whether ``start <= self <= end``. Both bounds are inclusive."""
        return start <= self <= end

    # --- Precision engine ---

    def trim(self, unit: Unit, /, kind: Kind | None = None) -> Timestamp:
        """Truncate to the start of the period containing this timestamp.

        Parameters
        ----------
        unit
            The period length. Weeks start on Monday (ISO 8601).
        kind
            Stamped on the result instead of this timestamp's kind.
            Ignored for units finer than a second, which always
            keep the original kind.

        Example
        -------
        >>> Timestamp(2024, 5, 17, 9, 30).trim(QUARTER)
        Timestamp(2024-04-01 00:00:00)
        >>> Timestamp(1987, 6, 1).trim(DECADE)
        Timestamp(1980-01-01 00:00:00)
        """
        unit = _as_unit(unit)
        ticks = self._ticks
        try:
            step = _SUBSECOND_TRIM_TICKS[unit]
        except KeyError:
            pass
        else:
            return self._new(ticks - ticks % step, self._kind)

        if kind is None:
            kind = self._kind
        elif not isinstance(kind, Kind):
            raise TypeError(f"kind must be a Kind, got {kind!r}")

        try:
            step = _FIXED_TRIM_TICKS[unit]
        except KeyError:
            pass
        else:
            return self._new(ticks - ticks % step, kind)

        if unit is WEEK:
            days = ticks // TICKS_PER_DAY
            return self._new((days - days % 7) * TICKS_PER_DAY, kind)

        d = self.date()
        if unit is MONTH:
            start = d.replace(day=1)
        elif unit is QUARTER:
            start = d.replace(month=quarter_start_month(d.month), day=1)
        elif unit is YEAR:
            start = d.replace(month=1, day=1)
        elif unit is DECADE:
            # The first decade only has nine years, since there's no year 0
            start = _date(max(d.year - d.year % 10, 1), 1, 1)
        else:  # pragma: no cover
            raise UnsupportedUnit._for(unit, "trim")
        return self._new(_ticks_from_date(start), kind)

    start_of = trim

    def trim_end(self, unit: Unit, /, kind: Kind | None = None) -> Timestamp:
        """The last tick of the period containing this timestamp.

        This is always exactly one tick before the start of the next
        period. For the final period of the calendar, ``Timestamp.MAX``
        (with the requested kind) is returned.

        Example
        -------
        >>> Timestamp(2024, 2, 10).trim_end(MONTH)
        Timestamp(2024-02-29 23:59:59.9999999)
        """
        unit = _as_unit(unit)
        start = self.trim(unit, kind)
        next_start = _next_period_start(start, unit)
        if next_start > MAX_TICKS:
            return self._new(MAX_TICKS, start._kind)
        return self._new(next_start - 1, start._kind)

    end_of = trim_end

    def add(self, value: float, unit: Unit, /) -> Timestamp:
        """Add a (possibly fractional) amount of a unit.

        Calendar units are applied in two steps: whole months or years
        first (clamping the day to the end of a shorter month), then the
        fraction as days of the resulting month or year.
        Quarters and decades only support whole amounts of months
        and years, respectively.

        Example
        -------
        >>> Timestamp(2024, 1, 31).add(1, MONTH)
        Timestamp(2024-02-29 00:00:00)
        >>> Timestamp(2024, 2, 29).add(1, YEAR)
        Timestamp(2025-02-28 00:00:00)
        """
        unit = _as_unit(unit)
        if not isfinite(value):
            raise ValueError(f"Cannot add non-finite amount: {value!r}")

        if unit is TICK:
            return self._shift(int(value))
        elif unit is NANOSECOND or unit is MICROSECOND:
            if unit is NANOSECOND:
                total, scale = value / NANOS_PER_TICK, NANOS_PER_TICK
            else:
                total = value * TICKS_PER_MICROSECOND
                scale = TICKS_PER_MICROSECOND
            whole = int(total)
            # The remainder goes in second, scaled by the unit size
            # rather than converted to ticks.
            return self._shift(whole)._shift(int((total - whole) * scale))
        elif unit is WEEK:
            return self._shift(ticks_for(value * 7, TICKS_PER_DAY))
        elif unit is MONTH:
            whole = int(value)
            shifted = self._shift_months(whole)
            d = shifted.date()
            return shifted._shift(
                ticks_for(
                    (value - whole) * days_in_month(d.year, d.month),
                    TICKS_PER_DAY,
                )
            )
        elif unit is QUARTER:
            return self._shift_months(int(value * 3))
        elif unit is YEAR:
            whole = int(value)
            shifted = self._shift_years(whole)
            return shifted._shift(
                ticks_for(
                    (value - whole) * (366 if is_leap(shifted.year) else 365),
                    TICKS_PER_DAY,
                )
            )
        elif unit is DECADE:
            return self._shift_years(int(value * 10))
        try:
            per_unit = _FIXED_ADD_TICKS[unit]
        except KeyError:  # pragma: no cover
            raise UnsupportedUnit._for(unit, "add")
        return self._shift(ticks_for(value, per_unit))

    def subtract(self, value: float, unit: Unit, /) -> Timestamp:
        """Subtract a (possibly fractional) amount of a unit.
        Same as ``add(-value, unit)``."""
        return self.add(-value, unit)

    def age(self, unit: Unit, /, *, now: Timestamp | None = None) -> float:
        """The time elapsed since this timestamp, expressed in ``unit``.

        Parameters
        ----------
        now
            The reference time. Defaults to ``Timestamp.now()``.

        Note
        ----
        Months, quarters, and years are converted using their average
        length (30.44, 91.3125 and 365.25 days), not by walking the
        calendar. Weeks are the elapsed hours divided by seven.
        Decades aren't supported.
        """
        unit = _as_unit(unit)
        if unit is DECADE:
            raise UnsupportedUnit._for(unit, "age")
        if now is None:
            now = Timestamp.now()
        elapsed = now._ticks - self._ticks
        if unit is NANOSECOND:
            return float(elapsed * NANOS_PER_TICK)
        return elapsed / _AGE_DIVISORS[unit]

    def window_before(
        self, delay: float, span: float, unit: Unit, /
    ) -> tuple[Timestamp, Timestamp]:
        """A ``(start, end)`` window ending ``delay`` units before this
        timestamp, and starting ``span`` units before its end.

        Negative amounts are allowed, and move the window forward.

        Example
        -------
        >>> Timestamp(2024, 3, 10, 12).window_before(2, 6, HOUR)
        (Timestamp(2024-03-10 04:00:00), Timestamp(2024-03-10 10:00:00))
        """
        end = self.subtract(delay, unit)
        return end.subtract(span, unit), end

    # --- Timezones ---

    def to_tz(self, tz: TimeZoneRef, /) -> Timestamp:
        """Read this timestamp as UTC, and convert it to the wall time
        in the given timezone.

        The result is marked as UTC kind, even though it represents
        the timezone's wall time. This is convenient for displaying
        timestamps uniformly, but the result no longer denotes the
        original instant.
        """
        if self._kind is Kind.LOCAL:
            raise ValueError(
                "Cannot convert a local-kind timestamp from UTC. "
                "Convert it to UTC first."
            )
        return self._new(_utc_to_wall(self._ticks, _resolve_tz(tz)), Kind.UTC)

    def to_utc(
        self,
        tz: TimeZoneRef,
        /,
        *,
        disambiguate: Disambiguate = "compatible",
    ) -> Timestamp:
        """Read this timestamp's wall time in the given timezone (ignoring
        its kind), and convert it to UTC.

        Parameters
        ----------
        disambiguate
            How to handle wall times that are skipped or repeated
            in the timezone, e.g. due to DST:

            - ``"compatible"``: the earlier offset in repeated times,
              and shift forward in skipped times.
            - ``"earlier"`` / ``"later"``: pick the earlier or later
              of the two candidates.
            - ``"raise"``: raise :class:`SkippedTime` or
              :class:`RepeatedTime`.

        Example
        -------
        >>> Timestamp(2023, 3, 10, 12).to_utc("America/New_York")
        Timestamp(2023-03-10 17:00:00Z)
        """
        return self._new(
            _wall_to_utc(self._ticks, _resolve_tz(tz), disambiguate),
            Kind.UTC,
        )

    def tz_offset(self, tz: TimeZoneRef, /) -> _timedelta:
        """The UTC offset of the timezone at this (UTC) instant,
        taking DST into account"""
        zone = _resolve_tz(tz)
        return _utc_offset(self._ticks, zone)

    def tz_offset_hours(self, tz: TimeZoneRef, /) -> int:
        """The whole hours of :meth:`tz_offset`, truncated toward zero.

        Timezones west of UTC have a negative offset.
        """
        return int(self.tz_offset(tz) / _timedelta(hours=1))

    def utc_hour_from_tz(self, tz_hour: int, tz: TimeZoneRef, /) -> int:
        """Translate an hour of the day in the given timezone to the
        corresponding UTC hour, using the offset at this (UTC) instant.
        The result is always in the range 0-23."""
        return (tz_hour - self.tz_offset_hours(tz)) % 24

    # --- Formatting ---

    def format_common_iso(self) -> str:
        """Format as ``YYYY-MM-DDTHH:MM:SS[.fffffff][Z]``.

        Trailing zeros of the fraction are omitted. The ``Z`` suffix
        is only present for UTC-kind timestamps.
        """
        return (
            _format.precise(self._py_naive(), self.tick)
            .rstrip("0")
            .rstrip(".")
            + ("Z" if self._kind is Kind.UTC else "")
        )

    def format_precise(self) -> str:
        """``YYYY-MM-DDTHH:MM:SS.fffffff``, for debugging and logs"""
        return _format.precise(self._py_naive(), self.tick)

    def format_precise_utc(self) -> str:
        """Same as :meth:`format_precise`, with a ``Z`` appended.
        No conversion takes place."""
        return self.format_precise() + "Z"

    def format_iso8601(self) -> str:
        """``YYYY-MM-DDTHH:MM:SS.fffZ``, i.e. with millisecond precision.
        No conversion takes place, the timestamp should already be UTC."""
        return _format.iso8601(self._py_naive())

    format_web = format_iso8601

    def format_filename(self) -> str:
        """``YYYY-MM-DD--HH-MM-SS``, safe for use in file names"""
        return _format.filename(self._py_naive())

    def format_display(self) -> str:
        """``Mon DD, YYYY``, e.g. ``Mar 05, 2023``"""
        return _format.display(self._py_naive())

    def format_utc_datetime(self) -> str:
        """``MM/DD/YYYY hh:MM:SS AM UTC``. No conversion takes place."""
        return _format.us_datetime(self._py_naive(), "UTC")

    def format_hour(self, tz: TimeZoneRef, /) -> str:
        """``hh AM ABBR``, where ``ABBR`` is the timezone's abbreviation.
        No conversion takes place."""
        return _format.hour(self._py_naive(), self._abbreviation(tz))

    def format_datetime_as_tz(self, tz: TimeZoneRef, /) -> str:
        """``MM/DD/YYYY hh:MM:SS AM ABBR``. No conversion takes place."""
        return _format.us_datetime(self._py_naive(), self._abbreviation(tz))

    def format_tz_datetime(self, tz: TimeZoneRef, /) -> str:
        """Convert from UTC to the timezone, then format as
        ``MM/DD/YYYY hh:MM:SS AM ABBR``."""
        return self.to_tz(tz).format_datetime_as_tz(tz)

    def format_tz_date(self, tz: TimeZoneRef, /) -> str:
        """Convert from UTC to the timezone, then format as ``MM/DD/YYYY``."""
        return _format.us_date(self.to_tz(tz)._py_naive())

    def format_tz_date_hour(self, tz: TimeZoneRef, /) -> str:
        """Convert from UTC to the timezone, then format as
        ``MM/DD/YYYY h AM ABBR``."""
        converted = self.to_tz(tz)
        return _format.us_date_hour(
            converted._py_naive(), converted._abbreviation(tz)
        )

    def format_tz_filename(self, tz: TimeZoneRef, /) -> str:
        """Convert from UTC to the timezone, then format as
        ``YYYY-MM-DD--HH-MM-SS``."""
        return self.to_tz(tz).format_filename()

    # --- Dunder methods ---

    def __repr__(self) -> str:
        date_str, time_str = self.format_common_iso().split("T")
        return f"Timestamp({date_str} {time_str})"

    def __str__(self) -> str:
        """Same as :meth:`format_common_iso`"""
        return self.format_common_iso()

    def __eq__(self, other: object) -> bool:
        """Compare the ticks, ignoring the kind.
        Use :meth:`exact_eq` to compare the kind as well."""
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._ticks == other._ticks

    def __hash__(self) -> int:
        return hash(self._ticks)

    def __lt__(self, other: Timestamp) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._ticks < other._ticks

    def __le__(self, other: Timestamp) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._ticks <= other._ticks

    def __gt__(self, other: Timestamp) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._ticks > other._ticks

    def __ge__(self, other: Timestamp) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self._ticks >= other._ticks

    @no_type_check
    def __reduce__(self):
        return (_unpkl_ts, (pack("<qB", self._ticks, self._kind.value),))

    # --- Private helpers ---

    @classmethod
    def _new(cls, ticks: int, kind: Kind, /) -> Timestamp:
        assert 0 <= ticks <= MAX_TICKS
        self = _object_new(cls)
        self._ticks = ticks
        self._kind = kind
        return self

    def _py_naive(self) -> _datetime:
        return _py_from_ticks(self._ticks)

    def _shift(self, ticks: int) -> Timestamp:
        return self._new(_check_bounds(self._ticks + ticks), self._kind)

    def _shift_months(self, months: int) -> Timestamp:
        days, time_of_day = divmod(self._ticks, TICKS_PER_DAY)
        try:
            d = add_months(_date.fromordinal(days + 1), months)
        except (ValueError, OverflowError):
            raise ValueError("Timestamp out of range")
        return self._new(_ticks_from_date(d) + time_of_day, self._kind)

    def _shift_years(self, years: int) -> Timestamp:
        days, time_of_day = divmod(self._ticks, TICKS_PER_DAY)
        d = _date.fromordinal(days + 1)
        try:
            shifted = replace_year_saturating(d, d.year + years)
        except (ValueError, OverflowError):
            raise ValueError("Timestamp out of range")
        return self._new(_ticks_from_date(shifted) + time_of_day, self._kind)

    def _abbreviation(self, tz: TimeZoneRef) -> str:
        zone = _resolve_tz(tz)
        wall = self._py_naive()
        name = wall.replace(tzinfo=zone).tzname()
        if name is None:
            return ""
        # midwinter and midsummer, in either hemisphere
        others = [
            _datetime(wall.year, month, 1, tzinfo=zone).tzname() or ""
            for month in (1, 7)
        ]
        return simplify_abbreviation(name, others)


# This function name is baked into pickles, so it must not change.
def _unpkl_ts(data: bytes) -> Timestamp:
    ticks, kind = unpack("<qB", data)
    return Timestamp._new(ticks, Kind(kind))


Timestamp.MIN = Timestamp._new(0, Kind.UNSPECIFIED)
Timestamp.MAX = Timestamp._new(MAX_TICKS, Kind.UNSPECIFIED)


class UnsupportedUnit(ValueError):
    """A unit of time isn't supported by the operation"""

    @classmethod
    def _for(cls, unit: object, operation: str) -> UnsupportedUnit:
        return cls(f"Unsupported unit for {operation}(): {unit!r}")


class RepeatedTime(ValueError):
    """A wall time occurs twice in a timezone, e.g. because of DST"""

    @classmethod
    def _for_tz(cls, d: _datetime, tz: _tzinfo) -> RepeatedTime:
        return cls(
            f"{d.replace(tzinfo=None)} is repeated "
            f"in timezone {_tz_name(tz)!r}"
        )


class SkippedTime(ValueError):
    """A wall time doesn't occur in a timezone, e.g. because of DST"""

    @classmethod
    def _for_tz(cls, d: _datetime, tz: _tzinfo) -> SkippedTime:
        return cls(
            f"{d.replace(tzinfo=None)} is skipped "
            f"in timezone {_tz_name(tz)!r}"
        )


def _as_unit(unit: Unit) -> TimeUnit:
    if isinstance(unit, TimeUnit):
        return unit
    try:
        return TimeUnit(unit)
    except ValueError:
        raise UnsupportedUnit(f"Unsupported unit: {unit!r}") from None


def _next_period_start(start: Timestamp, unit: TimeUnit) -> int:
    # The result may exceed MAX_TICKS. That's for the caller to handle.
    if unit in _SUBSECOND_TRIM_TICKS:
        return start._ticks + _SUBSECOND_TRIM_TICKS[unit]
    elif unit in _FIXED_TRIM_TICKS:
        return start._ticks + _FIXED_TRIM_TICKS[unit]
    elif unit is WEEK:
        return start._ticks + TICKS_PER_WEEK

    d = start.date()
    if unit is MONTH:
        months = 1
    elif unit is QUARTER:
        months = 3
    elif unit is YEAR:
        months = 12
    elif unit is DECADE:
        months = (d.year // 10 * 10 + 10 - d.year) * 12
    else:  # pragma: no cover
        raise UnsupportedUnit._for(unit, "trim_end")

    year_delta, month0 = divmod(d.month - 1 + months, 12)
    if d.year + year_delta > _date.max.year:
        return MAX_TICKS + 1
    return _ticks_from_date(_date(d.year + year_delta, month0 + 1, 1))


def _check_bounds(ticks: int) -> int:
    if not 0 <= ticks <= MAX_TICKS:
        raise ValueError("Timestamp out of range")
    return ticks


def _ticks_from_date(d: _date) -> int:
    return (d.toordinal() - 1) * TICKS_PER_DAY


def _ticks_from_py(d: _datetime) -> int:
    return (
        _ticks_from_date(d)
        + (d.hour * 3_600 + d.minute * 60 + d.second) * TICKS_PER_SECOND
        + d.microsecond * TICKS_PER_MICROSECOND
    )


def _py_from_ticks(ticks: int) -> _datetime:
    return _EPOCH + _timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)


def _ticks_from_timedelta(td: _timedelta) -> int:
    return (
        (td.days * 86_400 + td.seconds) * TICKS_PER_SECOND
        + td.microseconds * TICKS_PER_MICROSECOND
    )


def _tz_name(tz: _tzinfo) -> str:
    return getattr(tz, "key", None) or str(tz)


def _resolve_tz(tz: TimeZoneRef) -> _tzinfo:
    if isinstance(tz, str):
        return get_tz(tz)
    elif isinstance(tz, _tzinfo):
        return tz
    raise TypeError(f"Expected a timezone key or tzinfo, got {tz!r}")


def _utc_offset(ticks: int, zone: _tzinfo) -> _timedelta:
    try:
        local = _py_from_ticks(ticks).replace(tzinfo=_UTC).astimezone(zone)
    except (OverflowError, ValueError):
        raise ValueError("Timestamp out of range")
    offset = local.utcoffset()
    assert offset is not None
    return offset


def _utc_to_wall(ticks: int, zone: _tzinfo) -> int:
    return _check_bounds(
        ticks + _ticks_from_timedelta(_utc_offset(ticks, zone))
    )


def _wall_to_utc(ticks: int, zone: _tzinfo, disambiguate: str) -> int:
    wall = _py_from_ticks(ticks)
    resolved = _resolve_ambiguity(
        wall.replace(tzinfo=zone), zone, disambiguate
    )
    try:
        as_utc = resolved.astimezone(_UTC).replace(tzinfo=None)
    except (OverflowError, ValueError):
        raise ValueError("Timestamp out of range")
    # Apply the shift as a delta so sub-microsecond ticks are kept
    return _check_bounds(ticks + _ticks_from_timedelta(as_utc - wall))


def _resolve_ambiguity(
    dt: _datetime, zone: _tzinfo, disambiguate: str
) -> _datetime:
    dt = dt.replace(fold=as_fold(disambiguate))
    try:
        dt_utc = dt.astimezone(_UTC)
        # Non-existent times: they don't survive a UTC roundtrip
        roundtrip = dt_utc.astimezone(zone)
    except (OverflowError, ValueError):
        raise ValueError("Timestamp out of range")
    if roundtrip.replace(tzinfo=None) != dt.replace(tzinfo=None):
        if disambiguate == "raise":
            raise SkippedTime._for_tz(dt, zone)
        elif disambiguate != "compatible":  # i.e. "earlier" or "later"
            # In gaps, the relationship between
            # fold and earlier/later is reversed
            dt = dt.replace(fold=not dt.fold)
        # Perform the normalisation, shifting away from non-existent times
        dt = dt.astimezone(_UTC).astimezone(zone)
    # Ambiguous times: the two folds have different offsets
    elif (
        disambiguate == "raise"
        and dt.utcoffset() != dt.replace(fold=1).utcoffset()
    ):
        raise RepeatedTime._for_tz(dt, zone)
    return dt


# We expose the public members in the root of the module.
# For clarity, we remove the "_timestamp" part from the names,
# since this is an implementation detail.
for name in __all__:
    member = locals()[name]
    if getattr(member, "__module__", None) == __name__:  # pragma: no branch
        member.__module__ = "datetrim"

# clear up loop variables so they don't leak into the namespace
del name
del member

_unpkl_ts.__module__ = "datetrim"

# disable further subclassing
final(_ImmutableBase)


def _patch_time_frozen(ts: Timestamp) -> None:
    global time_ns

    def time_ns() -> int:
        return (ts._ticks - UNIX_EPOCH_TICKS) * NANOS_PER_TICK


def _patch_time_keep_ticking(ts: Timestamp) -> None:
    global time_ns

    _patched_at = time_ns()
    _time_ns = time_ns

    def time_ns() -> int:
        return (
            (ts._ticks - UNIX_EPOCH_TICKS) * NANOS_PER_TICK
            + _time_ns()
            - _patched_at
        )


def _unpatch_time() -> None:
    global time_ns

    from time import time_ns
