from __future__ import annotations

import logging as _logging
import os as _os
import sysconfig as _sysconfig
from contextlib import contextmanager as _contextmanager
from dataclasses import dataclass as _dataclass
from importlib.resources import files as _resource_files
from typing import Iterable as _Iterable, Iterator as _Iterator

from ._timestamp import *
from ._timestamp import (  # for the docs
    __all__ as _timestamp_all,
    _patch_time_frozen,
    _patch_time_keep_ticking,
    _unpatch_time,
    _unpkl_ts,
)
from ._tz.store import (
    TimeZoneNotFoundError,
    _clear_tz_cache,
    _clear_tz_cache_by_keys,
    _set_tzpath,
    reset_system_tz,
)

__version__ = "0.3.0"

__all__ = [
    *_timestamp_all,
    "TimeZoneNotFoundError",
    "TZPATH",
    "reset_tzpath",
    "clear_tzcache",
    "available_timezones",
    "reset_system_tz",
    "patch_current_time",
]

TimeZoneNotFoundError.__module__ = "datetrim"

_logging.getLogger(__name__).addHandler(_logging.NullHandler())


@_dataclass
class _TimePatch:
    _pin: Timestamp
    _keep_ticking: bool

    def shift(self, value: float, unit: TimeUnit | str) -> None:
        """Move the patched time by the given amount of a unit"""
        if self._keep_ticking:
            self._pin = new = Timestamp.now().add(value, unit)
            _patch_time_keep_ticking(new)
        else:
            self._pin = new = self._pin.add(value, unit)
            _patch_time_frozen(new)


@_contextmanager
def patch_current_time(
    ts: Timestamp,
    /,
    *,
    keep_ticking: bool,
) -> _Iterator[_TimePatch]:
    """Patch the current time to a fixed value (for testing purposes).
    Behaves as a context manager or decorator, with similar semantics to
    ``unittest.mock.patch``.

    The timestamp is read as UTC, whatever its kind.

    Important
    ---------

    * Only use this in tests. It is not thread-safe.
    * Only ``Timestamp.now()`` and ``Timestamp.local_now()`` are affected,
      not the standard library or other packages. Use ``time_machine``
      to patch those as well.

    Example
    -------

    >>> from datetrim import Timestamp, Kind, patch_current_time, HOUR
    >>> ts = Timestamp(1980, 3, 2, 2, kind=Kind.UTC)
    >>> with patch_current_time(ts, keep_ticking=False) as p:
    ...     assert Timestamp.now() == ts
    ...     p.shift(4, HOUR)
    ...     assert Timestamp.now() == ts.add(4, HOUR)
    ...
    >>> assert Timestamp.now() != ts
    """
    if keep_ticking:
        _patch_time_keep_ticking(ts)
    else:
        _patch_time_frozen(ts)

    try:
        yield _TimePatch(ts, keep_ticking)
    finally:
        _unpatch_time()


TZPATH: tuple[str, ...] = ()
"""The directories searched for timezone files, before falling back
to the ``tzdata`` package.

Seeded like :data:`zoneinfo.TZPATH`, from the ``PYTHONTZPATH``
environment variable or the interpreter's build configuration.
Change it with :func:`reset_tzpath`.
"""


def reset_tzpath(
    target: _Iterable[str | _os.PathLike[str]] | None = None, /
) -> None:
    """Set the directories searched for timezone files, or restore the
    default when called without arguments.

    Only ``datetrim`` is affected, not :mod:`zoneinfo`.

    Note
    ----
    Already loaded timezones stay cached. Call :func:`clear_tzcache`
    to make sure subsequent lookups use the new path.
    """
    global TZPATH

    if target is None:
        TZPATH = _tzpath_from_env()
    # A bare string is iterable too, but certainly a mistake here
    elif isinstance(target, (str, bytes)):
        raise TypeError("tzpath must be an iterable of paths")
    else:
        paths = tuple(map(_os.fspath, target))
        if not all(map(_os.path.isabs, paths)):
            raise ValueError("tzpaths must be absolute paths")
        TZPATH = tuple(map(_os.path.normpath, paths))
    _set_tzpath(TZPATH)


def _tzpath_from_env() -> tuple[str, ...]:
    raw = _os.environ.get("PYTHONTZPATH")
    if raw is None:
        raw = _sysconfig.get_config_var("TZPATH")
    if not raw:
        return ()
    # PEP 615 allows silently skipping relative paths
    return tuple(p for p in raw.split(_os.pathsep) if _os.path.isabs(p))


def clear_tzcache(*, only_keys: _Iterable[str] | None = None) -> None:
    """Forget loaded timezones, or only those with the given keys.

    Timestamps don't hold on to timezones, so this only affects
    subsequent lookups. Similar to :meth:`zoneinfo.ZoneInfo.clear_cache`.
    """
    if only_keys is None:
        _clear_tz_cache()
    else:
        _clear_tz_cache_by_keys(tuple(only_keys))


# Not zones themselves, but alternative layouts of the database
_SKIP_DIRS = ("right", "posix")


def available_timezones() -> set[str]:
    """The keys of all timezones that can currently be loaded,
    from ``TZPATH`` and the ``tzdata`` package.

    Warning
    -------
    The result isn't cached. This may open a large number of files,
    since each candidate's header is read to check it's a timezone.
    """
    zones: set[str] = set()
    try:
        listing = _resource_files("tzdata").joinpath("zones").read_text()
    except (ImportError, FileNotFoundError):
        pass
    else:
        zones.update(map(str.strip, listing.splitlines()))

    for base in TZPATH:
        zones.update(_tznames_in(base))

    zones.discard("posixrules")
    zones.discard("")
    return zones


def _tznames_in(base: str) -> _Iterator[str]:
    for dirpath, dirnames, filenames in _os.walk(base):
        if dirpath == base:
            dirnames[:] = [d for d in dirnames if d not in _SKIP_DIRS]
        for name in filenames:
            path = _os.path.join(dirpath, name)
            if _is_tzif(path):
                yield _os.path.relpath(path, base).replace(_os.sep, "/")


def _is_tzif(path: str) -> bool:
    try:
        with open(path, "rb") as f:
            return f.read(4) == b"TZif"
    except OSError:
        return False


reset_tzpath()  # populate the tzpath once at startup
