"""Detection of the system timezone.

The result isn't a timezone yet, only a description of where to
find it. Loading happens in ``store``.
"""

from __future__ import annotations

import enum
import os
import os.path
import platform
from typing import NamedTuple

LOCALTIME = "/etc/localtime"


class Source(enum.Enum):
    KEY = "key"
    FILE = "file"
    # Zone keys may contain digits too, so a value like "EST5EDT"
    # can't be told apart from a POSIX TZ string up front.
    KEY_OR_POSIX = "key-or-posix"


class SystemTz(NamedTuple):
    source: Source
    value: str


if platform.system() in ("Linux", "Darwin"):  # pragma: no cover

    def _from_platform() -> SystemTz:
        target = os.path.realpath(LOCALTIME)
        if target == LOCALTIME:
            # A regular file, not a symlink into a zoneinfo directory
            return SystemTz(Source.FILE, LOCALTIME)
        key = key_from_path(target)
        if key is None:
            return SystemTz(Source.FILE, target)
        return SystemTz(Source.KEY, key)

else:  # pragma: no cover
    import tzlocal

    def _from_platform() -> SystemTz:
        return SystemTz(Source.KEY, tzlocal.get_localzone_name())


def key_from_path(path: str) -> str | None:
    """The zone key of a TZif file inside a ``zoneinfo`` directory,
    e.g. ``Europe/Paris`` for ``/usr/share/zoneinfo/Europe/Paris``.

    Directories like ``zoneinfo.default`` count as well.
    """
    marker = path.rfind("zoneinfo")
    if marker == -1:
        return None
    sep = path.find("/", marker)
    return None if sep == -1 else path[sep + 1 :]


def detect() -> SystemTz:
    """Where the system timezone comes from: the ``TZ`` environment
    variable if set, otherwise the platform's configuration."""
    tz_env = os.environ.get("TZ")
    if tz_env is None:  # pragma: no cover
        return _from_platform()
    tz_env = tz_env.removeprefix(":")
    if os.path.isabs(tz_env):
        return SystemTz(Source.FILE, tz_env)
    elif any(c.isdigit() for c in tz_env):
        return SystemTz(Source.KEY_OR_POSIX, tz_env)
    return SystemTz(Source.KEY, tz_env)
