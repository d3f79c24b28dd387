"""
Hammer the timezone cache and the system timezone from many threads.

Meant for free-threaded builds. This isn't a unit test, since it
needs a cold cache to be meaningful.
"""

import sys
import time
from concurrent.futures import ThreadPoolExecutor
from itertools import cycle, islice
from os import environ

from datetrim import HOUR, Timestamp, clear_tzcache, reset_system_tz

if not hasattr(sys, "_is_gil_enabled") or sys._is_gil_enabled():
    print("WARNING: the GIL is enabled, so threading isn't stress tested.")

WALL_TIME = Timestamp(2024, 6, 15, 12, 0)
THREADS = 16
CALLS_PER_THREAD = 10_000
# Deliberately more keys than the LRU holds, and not a multiple of
# the thread count, so threads keep evicting each other's zones.
ZONES = [
    "UTC",
    "America/Guyana",
    "Etc/GMT-11",
    "Europe/Vienna",
    "Asia/Ulaanbaatar",
    "US/Alaska",
    "Pacific/Bougainville",
    "Africa/Monrovia",
    "Europe/Copenhagen",
    "America/Hermosillo",
    "Asia/Tashkent",
    "Pacific/Saipan",
    "Africa/Nairobi",
    "America/Argentina/Ushuaia",
    "Brazil/Acre",
    "Australia/Lord_Howe",
    "Asia/Kathmandu",
]
assert len(ZONES) % THREADS


def convert(offset: int) -> None:
    for tz in islice(cycle(ZONES), offset, offset + CALLS_PER_THREAD):
        WALL_TIME.to_utc(tz).to_tz(tz).format_tz_datetime(tz)


def switch_system_tz(offset: int) -> None:
    for tz in islice(cycle(ZONES), offset, offset + CALLS_PER_THREAD // 10):
        environ["TZ"] = tz
        reset_system_tz()
        WALL_TIME.add(offset, HOUR).unix_seconds()


def run(func) -> None:
    clear_tzcache()
    print(f"Running {func.__name__} on {THREADS} threads")
    start = time.perf_counter()
    with ThreadPoolExecutor(max_workers=THREADS) as pool:
        # .result() re-raises anything that went wrong in a thread
        for future in [pool.submit(func, n) for n in range(THREADS)]:
            future.result()
    print(f"Done in {time.perf_counter() - start:.2f} seconds")


if __name__ == "__main__":
    run(convert)
    run(switch_system_tz)
