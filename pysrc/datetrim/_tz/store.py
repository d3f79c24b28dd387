"""Loading and caching of timezones, and the system timezone."""

from __future__ import annotations

import logging
import os.path
import string
import sys
import time
from collections import OrderedDict
from datetime import timedelta as _timedelta, timezone as _timezone, tzinfo
from typing import TYPE_CHECKING, Callable, NewType
from weakref import WeakValueDictionary
from zoneinfo import ZoneInfo

from .system import Source, detect

__all__ = [
    "TimeZoneNotFoundError",
    "get_tz",
    "get_system_tz",
    "_clear_tz_cache",
    "_clear_tz_cache_by_keys",
    "_set_tzpath",
    "reset_system_tz",
]

_log = logging.getLogger(__name__)

_NOGIL = hasattr(sys, "_is_gil_enabled") and not sys._is_gil_enabled()


class TimeZoneNotFoundError(ValueError):
    """A timezone with the given ID was not found"""

    @classmethod
    def for_key(cls, key: str) -> TimeZoneNotFoundError:
        return cls(f"No time zone found for key: {key!r}")


# OrderedDict is thread-unsafe in Python < 3.14 under free-threading,
# so the LRU needs a real lock there. Elsewhere a no-op suffices.
if TYPE_CHECKING or (
    _NOGIL and sys.version_info < (3, 14)
):  # pragma: no cover
    from threading import Lock as _Lock
else:

    class _Lock:
        def __enter__(self) -> None:
            pass

        def __exit__(self, *args) -> None:
            pass


class _ZoneCache:
    """Zones by key. A small LRU keeps recently used zones alive,
    while the weak lookup makes sure a key maps to a single instance
    for as long as anyone holds on to it. Modelled after ``zoneinfo``.
    """

    def __init__(self, lru_size: int) -> None:
        self._lru_size = lru_size
        self._lru: OrderedDict[str, ZoneInfo] = OrderedDict()
        self._lookup: WeakValueDictionary[str, ZoneInfo] = (
            WeakValueDictionary()
        )
        self._lock = _Lock()

    def get(self, key: str, load: Callable[[str], ZoneInfo]) -> ZoneInfo:
        zone = self._lookup.get(key)
        if zone is None:
            # Two threads may load the same zone at once. Zones are
            # immutable, so whichever is stored first wins.
            zone = self._lookup.setdefault(key, load(key))
        with self._lock:
            self._lru[key] = self._lru.pop(key, zone)
            while len(self._lru) > self._lru_size:
                try:
                    self._lru.popitem(last=False)
                except KeyError:  # pragma: no cover
                    break  # another thread cleared it in the meantime
        return zone

    def clear(self) -> None:
        with self._lock:
            self._lookup.clear()
            self._lru.clear()

    def discard(self, keys: tuple[str, ...]) -> None:
        with self._lock:
            for k in keys:
                self._lookup.pop(k, None)
                self._lru.pop(k, None)


_cache = _ZoneCache(lru_size=8)
_TZPATH: tuple[str, ...] = ()


def _set_tzpath(to: tuple[str, ...]) -> None:
    global _TZPATH
    _TZPATH = to


def _clear_tz_cache() -> None:
    _log.debug("clearing timezone cache")
    _cache.clear()


def _clear_tz_cache_by_keys(keys: tuple[str, ...]) -> None:
    _log.debug("clearing timezone cache for %s", keys)
    _cache.discard(keys)


def get_tz(key: str) -> ZoneInfo:
    """Look up a timezone by its IANA key, e.g. ``"Europe/Amsterdam"``.

    The directories in ``TZPATH`` are searched first, then the ``tzdata``
    package. Raises :class:`TimeZoneNotFoundError` if neither has it.
    """
    if not isinstance(key, str):
        raise TypeError(f"timezone key must be a string, got {key!r}")
    return _cache.get(key, _load_tz)


# A key that has been checked for path traversal and odd characters
SafeKey = NewType("SafeKey", str)

_KEY_CHARS = frozenset(string.ascii_letters + string.digits + "-_+/.")


def validate_key(key: str) -> SafeKey:
    if (
        # IANA sets no limit on key length, but we do
        0 < len(key) < 100
        and _KEY_CHARS.issuperset(key)
        and key[0] not in ".-+/"
        and not key.endswith("/")
        and not any(s in key for s in ("..", "//", "/./"))
    ):
        return SafeKey(key)
    raise TimeZoneNotFoundError.for_key(key)


def _candidate_paths(key: SafeKey) -> list[str]:
    paths = [os.path.join(base, key) for base in _TZPATH]
    try:
        import tzdata.zoneinfo
    except ImportError:
        pass
    else:
        paths.append(
            os.path.join(tzdata.zoneinfo.__path__[0], *key.split("/"))
        )
    return paths


def _load_tz(key: str) -> ZoneInfo:
    safe_key = validate_key(key)
    for path in _candidate_paths(safe_key):
        # Checking first, since the errors from open() vary by platform
        if os.path.isfile(path):
            break
    else:
        raise TimeZoneNotFoundError.for_key(key)

    with open(path, "rb") as f:
        if f.read(4) != b"TZif":
            # A file, but not a timezone. Better to fail here than
            # with a cryptic parse error.
            raise TimeZoneNotFoundError.for_key(key)
        f.seek(0)
        zone = ZoneInfo.from_file(f, key=key)
    _log.debug("loaded timezone %r from %s", key, path)
    return zone


_CACHED_SYSTEM_TZ: tzinfo | None = None


def get_system_tz() -> tzinfo:
    global _CACHED_SYSTEM_TZ
    # No lock: reading the system timezone has no side effects,
    # and the last writer wins.
    if _CACHED_SYSTEM_TZ is None:
        _CACHED_SYSTEM_TZ = _read_system_tz()
    return _CACHED_SYSTEM_TZ


def reset_system_tz() -> None:
    """Resets the cached system timezone to the current system timezone.

    Call this after changing the ``TZ`` environment variable.
    """
    global _CACHED_SYSTEM_TZ
    _CACHED_SYSTEM_TZ = _read_system_tz()


def _read_system_tz() -> tzinfo:
    source, value = detect()
    zone: tzinfo
    if source is Source.FILE:
        try:
            with open(value, "rb") as f:
                zone = ZoneInfo.from_file(f)
        except (OSError, ValueError):
            _log.warning(
                "Cannot read system timezone file %r. Assuming UTC.", value
            )
            return _timezone.utc
    else:
        try:
            zone = get_tz(value)
        except TimeZoneNotFoundError:
            if source is Source.KEY_OR_POSIX:
                return _fixed_tz_from_libc(value)
            _log.warning("System timezone %r not found. Assuming UTC.", value)
            return _timezone.utc
    _log.debug("system timezone resolved to %r", zone)
    return zone


def _fixed_tz_from_libc(tz_str: str) -> tzinfo:
    # zoneinfo can't read POSIX TZ strings, but the C library can.
    # This only yields the current offset, without any transitions.
    if hasattr(time, "tzset"):
        time.tzset()
    now = time.localtime()
    _log.warning(
        "System timezone %r is a POSIX TZ string. "
        "Using its current offset without DST transitions.",
        tz_str,
    )
    return _timezone(_timedelta(seconds=now.tm_gmtoff), now.tm_zone)
