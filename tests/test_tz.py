from datetime import datetime as py_datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from datetrim import (
    Kind,
    RepeatedTime,
    SkippedTime,
    Timestamp,
    TimeZoneNotFoundError,
    patch_current_time,
)
from datetrim._tz import simplify_abbreviation

from .common import system_tz_ams, system_tz_nyc, utc

NYC = "America/New_York"


class TestToTz:

    def test_basic(self):
        ts = utc(2023, 3, 5, 14, 7, 9)
        assert ts.to_tz(NYC).exact_eq(utc(2023, 3, 5, 9, 7, 9))
        assert ts.to_tz("Asia/Tokyo").exact_eq(utc(2023, 3, 5, 23, 7, 9))

    def test_dst(self):
        assert utc(2023, 7, 1, 17).to_tz(NYC) == utc(2023, 7, 1, 13)

    def test_keeps_sub_microsecond_ticks(self):
        ts = utc(2023, 3, 5, 14, nanosecond=123_456_700)
        assert ts.to_tz(NYC).nanosecond == 123_456_700

    def test_unspecified_read_as_utc(self):
        ts = Timestamp(2023, 3, 5, 14)
        assert ts.to_tz(NYC).exact_eq(utc(2023, 3, 5, 9))

    def test_local_kind_rejected(self):
        with pytest.raises(ValueError, match="local"):
            Timestamp(2023, 3, 5, kind=Kind.LOCAL).to_tz(NYC)

    def test_tzinfo_object(self):
        ts = utc(2023, 3, 5, 14)
        assert ts.to_tz(ZoneInfo("Asia/Kolkata")) == utc(2023, 3, 5, 19, 30)
        assert ts.to_tz(timezone(timedelta(hours=-2))) == utc(2023, 3, 5, 12)

    def test_unknown_zone(self):
        with pytest.raises(TimeZoneNotFoundError):
            utc(2023, 3, 5).to_tz("Europe/Nowhere")

    def test_invalid_type(self):
        with pytest.raises(TypeError):
            utc(2023, 3, 5).to_tz(42)  # type: ignore[arg-type]

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="range"):
            Timestamp.MAX.to_tz("Asia/Tokyo")
        with pytest.raises(ValueError, match="range"):
            Timestamp.MIN.to_tz(NYC)


class TestToUtc:

    @pytest.mark.parametrize(
        "wall, tz, expect",
        [
            (Timestamp(2023, 3, 10, 12), NYC, utc(2023, 3, 10, 17)),
            (Timestamp(2023, 3, 13, 12), NYC, utc(2023, 3, 13, 16)),
            (
                Timestamp(2023, 3, 10, 12),
                "America/Phoenix",
                utc(2023, 3, 10, 19),
            ),
            (
                Timestamp(2023, 1, 1, 0, 30),
                "Asia/Kolkata",
                utc(2022, 12, 31, 19),
            ),
        ],
    )
    def test_basic(self, wall, tz, expect):
        assert wall.to_utc(tz).exact_eq(expect)

    def test_kind_ignored(self):
        ts = Timestamp(2023, 3, 10, 12)
        for kind in Kind:
            assert ts.with_kind(kind).to_utc(NYC).exact_eq(
                utc(2023, 3, 10, 17)
            )

    def test_keeps_sub_microsecond_ticks(self):
        ts = Timestamp(2023, 3, 10, 12, nanosecond=999_999_900)
        assert ts.to_utc(NYC).nanosecond == 999_999_900

    def test_inverse_of_to_tz(self):
        ts = utc(2023, 6, 1, 8, 15)
        assert ts.to_tz(NYC).to_utc(NYC) == ts

    @pytest.mark.parametrize(
        "disambiguate, expect",
        [
            ("compatible", utc(2023, 3, 12, 7, 30)),
            ("later", utc(2023, 3, 12, 7, 30)),
            ("earlier", utc(2023, 3, 12, 6, 30)),
        ],
    )
    def test_skipped(self, disambiguate, expect):
        wall = Timestamp(2023, 3, 12, 2, 30)
        assert wall.to_utc(NYC, disambiguate=disambiguate) == expect

    def test_skipped_raise(self):
        wall = Timestamp(2023, 3, 12, 2, 30)
        with pytest.raises(SkippedTime, match="America/New_York"):
            wall.to_utc(NYC, disambiguate="raise")

    @pytest.mark.parametrize(
        "disambiguate, expect",
        [
            ("compatible", utc(2023, 11, 5, 5, 30)),
            ("earlier", utc(2023, 11, 5, 5, 30)),
            ("later", utc(2023, 11, 5, 6, 30)),
        ],
    )
    def test_repeated(self, disambiguate, expect):
        wall = Timestamp(2023, 11, 5, 1, 30)
        assert wall.to_utc(NYC, disambiguate=disambiguate) == expect

    def test_repeated_raise(self):
        wall = Timestamp(2023, 11, 5, 1, 30)
        with pytest.raises(RepeatedTime, match="repeated"):
            wall.to_utc(NYC, disambiguate="raise")

    def test_unambiguous_raise(self):
        wall = Timestamp(2023, 11, 5, 3, 30)
        assert wall.to_utc(NYC, disambiguate="raise") == utc(
            2023, 11, 5, 8, 30
        )

    def test_invalid_disambiguate(self):
        with pytest.raises(ValueError, match="disambiguate"):
            Timestamp(2023, 3, 10).to_utc(
                NYC, disambiguate="sometimes"  # type: ignore[arg-type]
            )

    def test_fixed_offset(self):
        tz = timezone(timedelta(hours=3))
        assert Timestamp(2023, 3, 10, 12).to_utc(tz) == utc(2023, 3, 10, 9)

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="range"):
            Timestamp.MIN.to_utc("Asia/Tokyo")
        with pytest.raises(ValueError, match="range"):
            Timestamp.MAX.to_utc(NYC)


class TestOffsets:

    @pytest.mark.parametrize(
        "ts, tz, offset, hours",
        [
            (utc(2023, 1, 15), NYC, timedelta(hours=-5), -5),
            (utc(2023, 7, 15), NYC, timedelta(hours=-4), -4),
            (
                utc(2023, 1, 15),
                "America/St_Johns",
                timedelta(hours=-3, minutes=-30),
                -3,
            ),
            (
                utc(2023, 1, 15),
                "Asia/Kolkata",
                timedelta(hours=5, minutes=30),
                5,
            ),
            (utc(2023, 1, 15), "UTC", timedelta(0), 0),
        ],
    )
    def test_offset(self, ts, tz, offset, hours):
        assert ts.tz_offset(tz) == offset
        assert ts.tz_offset_hours(tz) == hours

    def test_offset_at_transition_instant(self):
        # The clocks go forward at 07:00 UTC
        assert utc(2023, 3, 12, 6, 59).tz_offset_hours(NYC) == -5
        assert utc(2023, 3, 12, 7).tz_offset_hours(NYC) == -4

    @pytest.mark.parametrize(
        "ts, tz_hour, tz, expect",
        [
            (utc(2023, 1, 15), 9, NYC, 14),
            (utc(2023, 1, 15), 22, NYC, 3),
            (utc(2023, 7, 15), 22, NYC, 2),
            (utc(2023, 1, 15), 3, "Asia/Tokyo", 18),
            (utc(2023, 1, 15), 0, "UTC", 0),
        ],
    )
    def test_utc_hour_from_tz(self, ts, tz_hour, tz, expect):
        assert ts.utc_hour_from_tz(tz_hour, tz) == expect


class TestSystemTz:

    @system_tz_nyc()
    def test_local_now(self):
        with patch_current_time(utc(2023, 1, 15, 12), keep_ticking=False):
            now = Timestamp.local_now()
        assert now.exact_eq(Timestamp(2023, 1, 15, 7, kind=Kind.LOCAL))

    @system_tz_ams()
    def test_local_now_dst(self):
        with patch_current_time(utc(2023, 7, 15, 12), keep_ticking=False):
            now = Timestamp.local_now()
        assert now.exact_eq(Timestamp(2023, 7, 15, 14, kind=Kind.LOCAL))

    @system_tz_nyc()
    def test_unix_seconds_of_wall_time(self):
        assert Timestamp(2023, 3, 10, 12).unix_seconds() == 1_678_467_600
        local = Timestamp(2023, 7, 1, 13, kind=Kind.LOCAL)
        assert local.unix_seconds() == 1_688_230_800

    @system_tz_nyc()
    def test_unix_seconds_of_utc_ignores_system_tz(self):
        assert utc(2023, 3, 10, 17).unix_seconds() == 1_678_467_600

    @system_tz_nyc()
    def test_to_offset_py_datetime(self):
        d = Timestamp(2023, 7, 1, 13, kind=Kind.LOCAL).to_offset_py_datetime()
        assert d.utcoffset() == timedelta(hours=-4)
        assert d == py_datetime(2023, 7, 1, 17, tzinfo=timezone.utc)
        assert (d.hour, d.minute) == (13, 0)

    @system_tz_ams()
    def test_to_offset_py_datetime_ams(self):
        d = Timestamp(2023, 1, 10, 9).to_offset_py_datetime()
        assert d.utcoffset() == timedelta(hours=1)
        assert d == py_datetime(2023, 1, 10, 8, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "name, others, expect",
    [
        ("EST", ["EST", "EDT"], "ET"),
        ("EDT", ["EST", "EDT"], "ET"),
        ("CEST", ["CET", "CEST"], "CET"),
        ("CET", ["CET", "CEST"], "CET"),
        # no counterpart, so the marker is part of the name
        ("IST", ["IST"], "IST"),
        ("BST", ["GMT", "BST"], "BST"),
        ("EST", [], "EST"),
        ("-03", ["-03", "-02"], "-03"),
        ("UTC", ["UTC"], "UTC"),
    ],
)
def test_simplify_abbreviation(name, others, expect):
    assert simplify_abbreviation(name, others) == expect
