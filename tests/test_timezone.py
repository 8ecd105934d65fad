import pickle
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from copy import copy, deepcopy
from unittest.mock import patch

import pytest

import civiltime
from civiltime import (
    CST,
    EST,
    MST,
    PST,
    UTC,
    Timezone,
    UnrecognizedTimezoneName,
    reset_local_timezone,
)

from .common import AlwaysEqual, NeverEqual, local_tz


class TestInit:

    def test_valid(self):
        assert Timezone(5).utc_offset == 5
        assert Timezone(-23).utc_offset == -23
        assert Timezone(0) == UTC

    @pytest.mark.parametrize("offset", [24, -24, 100])
    def test_out_of_range(self, offset):
        with pytest.raises(ValueError):
            Timezone(offset)

    @pytest.mark.parametrize("offset", [1.0, "1", None, True])
    def test_invalid_type(self, offset):
        with pytest.raises(TypeError):
            Timezone(offset)  # type: ignore[arg-type]


def test_constants():
    assert UTC.utc_offset == 0
    assert EST.utc_offset == -5
    assert CST.utc_offset == -6
    assert MST.utc_offset == -7
    assert PST.utc_offset == -8


class TestOffsetDifference:

    def test_examples(self):
        assert PST.offset_difference(CST) == -2
        assert CST.offset_difference(PST) == 2
        assert EST.offset_difference(CST) == 1
        assert UTC.offset_difference(Timezone(5)) == -5
        assert UTC.offset_difference(UTC) == 0

    @pytest.mark.parametrize("a", [UTC, EST, CST, MST, PST, Timezone(9)])
    @pytest.mark.parametrize("b", [UTC, EST, CST, MST, PST, Timezone(-3)])
    def test_antisymmetric(self, a, b):
        assert a.offset_difference(b) == -b.offset_difference(a)

    def test_invalid(self):
        with pytest.raises(TypeError):
            UTC.offset_difference(5)  # type: ignore[arg-type]


def test_equality():
    assert Timezone(-5) == EST
    assert Timezone(-5) != CST
    assert hash(Timezone(-5)) == hash(EST)
    assert UTC == AlwaysEqual()
    assert UTC != NeverEqual()
    assert UTC != 0  # type: ignore[comparison-overlap]


@pytest.mark.parametrize(
    "tz, expect",
    [(UTC, "UTC"), (EST, "UTC-05"), (Timezone(3), "UTC+03"), (PST, "UTC-08")],
)
def test_str_repr(tz, expect):
    assert str(tz) == expect
    assert repr(tz) == f"Timezone({expect})"


def test_copy_and_pickle():
    assert copy(EST) is EST
    assert deepcopy(EST) is EST
    assert pickle.loads(pickle.dumps(EST)) == EST


class TestFromName:

    @pytest.mark.parametrize(
        "name, offset",
        [
            ("UTC", 0),
            ("GMT", 0),
            ("Etc/UTC", 0),
            ("Coordinated Universal Time", 0),
            ("EST", -5),
            ("EDT", -5),
            ("Eastern Standard Time", -5),
            ("America/New_York", -5),
            ("CST", -6),
            ("Central Daylight Time", -6),
            ("MST", -7),
            ("America/Phoenix", -7),
            ("PST", -8),
            ("US/Pacific", -8),
            ("+3", 3),
            ("-08", -8),
            ("  PST ", -8),
            (":EST", -5),
        ],
    )
    def test_valid(self, name, offset):
        assert Timezone.from_name(name) == Timezone(offset)

    @pytest.mark.parametrize(
        "name", ["", "Mars/Olympus_Mons", "UTC+5", "+123", "est"]
    )
    def test_unrecognized(self, name):
        with pytest.raises(UnrecognizedTimezoneName, match="Unrecognized"):
            Timezone.from_name(name)

    @pytest.mark.parametrize("name", ["+24", "-24", "+25", "-99"])
    def test_offset_out_of_range(self, name):
        with pytest.raises(UnrecognizedTimezoneName):
            Timezone.from_name(name)

    @pytest.mark.parametrize("name", [5, None, b"EST"])
    def test_invalid_type(self, name):
        with pytest.raises(TypeError):
            Timezone.from_name(name)  # type: ignore[arg-type]

    def test_error_is_value_error(self):
        assert issubclass(UnrecognizedTimezoneName, ValueError)


class TestLocal:

    @pytest.mark.parametrize(
        "name, offset",
        [
            ("UTC", 0),
            ("America/New_York", -5),
            ("America/Chicago", -6),
            ("America/Los_Angeles", -8),
        ],
    )
    def test_from_host(self, name, offset):
        with patch("civiltime._tz.system.get_tz_name", return_value=name):
            reset_local_timezone()
            try:
                assert Timezone.local() == Timezone(offset)
                assert civiltime.LOCAL == Timezone(offset)
            finally:
                reset_local_timezone()

    def test_cached(self):
        with patch(
            "civiltime._tz.system.get_tz_name", return_value="EST"
        ) as get_name:
            reset_local_timezone()
            try:
                assert Timezone.local() == EST
                assert Timezone.local() == EST
                assert get_name.call_count == 1
                reset_local_timezone()
                Timezone.local()
                assert get_name.call_count == 2
            finally:
                reset_local_timezone()

    def test_read_once_across_threads(self):
        barrier = threading.Barrier(8)

        def slow_name():
            time.sleep(0.01)
            return "MST"

        def read_local():
            barrier.wait()
            return Timezone.local()

        with patch(
            "civiltime._tz.system.get_tz_name", side_effect=slow_name
        ) as get_name:
            reset_local_timezone()
            try:
                with ThreadPoolExecutor(max_workers=8) as pool:
                    results = list(
                        pool.map(lambda _: read_local(), range(8))
                    )
                assert results == [MST] * 8
                assert get_name.call_count == 1
            finally:
                reset_local_timezone()

    def test_unrecognized(self):
        with patch(
            "civiltime._tz.system.get_tz_name", return_value="Mars/Olympus"
        ):
            reset_local_timezone()
            try:
                with pytest.raises(UnrecognizedTimezoneName):
                    Timezone.local()
            finally:
                reset_local_timezone()

    @pytest.mark.skipif(
        sys.platform == "win32", reason="TZ variable is only read on unix"
    )
    def test_tz_env_var(self):
        with local_tz("CST6CDT"):
            assert Timezone.local() == CST

    def test_unknown_module_attribute(self):
        with pytest.raises(AttributeError):
            civiltime.NOT_A_THING  # type: ignore[attr-defined]
