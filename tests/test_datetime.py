import pickle
from copy import copy, deepcopy
from datetime import datetime as py_datetime, timezone as py_timezone

import pytest
from hypothesis import given
from hypothesis.strategies import integers, sampled_from

from civiltime import (
    CST,
    EST,
    MST,
    PST,
    UTC,
    Component,
    Date,
    Datetime,
    FixedClock,
    InvalidDate,
    InvalidTime,
    ParseError,
    Time,
    TimeDelta,
    Timezone,
    days,
    hours,
    microseconds,
    milliseconds,
    minutes,
    nanoseconds,
    seconds,
)

from .common import AlwaysEqual, AlwaysLarger, AlwaysSmaller, NeverEqual

ALL_ZONES = sampled_from([Timezone(o) for o in range(-23, 24)])
# timestamps that stay within the supported years in every timezone
TIMESTAMPS = integers(-62_135_510_400_000, 253_402_214_400_000)


class TestInit:

    def test_all_args(self):
        d = Datetime(2023, 12, 31, 23, 59, 58, 7, 8, 9, timezone=EST)
        assert d.year == 2023
        assert d.month == 12
        assert d.day == 31
        assert d.hour == 23
        assert d.minute == 59
        assert d.second == 58
        assert d.millisecond == 7
        assert d.microsecond == 8
        assert d.nanosecond == 9
        assert d.timezone == EST

    def test_defaults(self):
        d = Datetime()
        assert d.date() == Date.EPOCH
        assert d.time() == Time.MIDNIGHT
        assert d.timezone == UTC

    def test_invalid(self):
        with pytest.raises(InvalidDate):
            Datetime(2023, 2, 29)
        with pytest.raises(InvalidTime):
            Datetime(2023, 1, 1, 24)
        with pytest.raises(TypeError):
            Datetime(2023, 1, 1, timezone="EST")  # type: ignore[arg-type]

    def test_combine(self):
        d = Datetime.combine(Date(2021, 1, 2), Time(3, 4, timezone=CST))
        assert d.exact_eq(Datetime(2021, 1, 2, 3, 4, timezone=CST))
        assert Datetime.combine(Date(2021, 1, 2)) == Datetime(2021, 1, 2)
        with pytest.raises(TypeError):
            Datetime.combine(Time(3))  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            Datetime.combine(Date(2021, 1, 2), Date(2021, 1, 2))  # type: ignore[arg-type]


def test_components():
    d = Datetime(2021, 1, 2, 3, 4, 5, 6, timezone=MST)
    assert d.date() == Date(2021, 1, 2)
    assert d.time().exact_eq(Time(3, 4, 5, 6, timezone=MST))


def test_immutable():
    d = Datetime(2021, 1, 2)
    with pytest.raises(AttributeError):
        d.year = 2022  # type: ignore[misc]


class TestToString:

    def test_default(self):
        d = Datetime(2000, 1, 2, 3, 4, 5, 6, 7, 8)
        assert d.to_string() == "2000-01-02 3:04:05.006.007.008"
        assert str(d) == "2000-01-02 3:04:05.006.007.008"

    def test_separators(self):
        d = Datetime(2000, 1, 2, 13, 4, 5)
        assert d.to_string("T") == "2000-01-02T13:04:05.000.000.000"
        assert (
            d.to_string("_", date_separator="/", time_separator=".")
            == "2000/01/02_13.04.05.000.000.000"
        )


def test_repr():
    d = Datetime(2000, 1, 2, 3, 4, 5, timezone=PST)
    assert repr(d) == "Datetime(2000-01-02 3:04:05.000.000.000 UTC-08)"


class TestEquality:

    def test_same_instant_different_zones(self):
        a = Datetime(2020, 8, 15, 23, timezone=UTC)
        b = Datetime(2020, 8, 15, 18, timezone=EST)
        assert a == b
        assert hash(a) == hash(b)
        assert not a.exact_eq(b)
        assert a.exact_eq(Datetime(2020, 8, 15, 23, timezone=UTC))

    def test_same_fields_different_zones(self):
        a = Datetime(2020, 8, 15, 12, timezone=UTC)
        b = Datetime(2020, 8, 15, 12, timezone=EST)
        assert a != b
        assert a < b

    def test_other_types(self):
        d = Datetime(2020, 8, 15)
        assert d == AlwaysEqual()
        assert d != NeverEqual()
        assert not d == 3  # type: ignore[comparison-overlap]
        assert d != Date(2020, 8, 15)  # type: ignore[comparison-overlap]
        with pytest.raises(TypeError):
            d.exact_eq(Date(2020, 8, 15))  # type: ignore[arg-type]


def test_comparison():
    d = Datetime(2020, 8, 15, 12, 8, 30, timezone=CST)
    later = d + nanoseconds(1)
    same_later_in_utc = later.to_timezone(UTC)
    assert d < later
    assert d <= later
    assert later > d
    assert later >= d
    assert d < same_later_in_utc
    assert not d < d.to_timezone(PST)
    assert d <= d.to_timezone(PST)

    assert d < AlwaysLarger()
    assert d > AlwaysSmaller()
    with pytest.raises(TypeError):
        d < 3  # type: ignore[operator]


class TestMs:

    def test_epoch(self):
        assert Datetime().to_ms() == 0
        assert Datetime(1970, 1, 2).to_ms() == 86_400_000
        assert Datetime(1969, 12, 31, 23, 59, 59, 999).to_ms() == -1

    def test_truncates(self):
        assert Datetime(1970, 1, 1, 0, 0, 0, 1, 999, 999).to_ms() == 1

    def test_timezone_of_value(self):
        assert Datetime(1970, 1, 1, 1, timezone=Timezone(1)).to_ms() == 0
        assert Datetime(1969, 12, 31, 19, timezone=EST).to_ms() == 0

    def test_target_clock(self):
        d = Datetime()
        assert d.to_ms(EST) == -5 * 3_600_000
        assert d.to_ms(Timezone(2)) == 2 * 3_600_000

    def test_matches_stdlib(self):
        d = Datetime(2023, 11, 14, 22, 13, 20, timezone=UTC)
        assert d.to_ms() == int(
            py_datetime(2023, 11, 14, 22, 13, 20, tzinfo=py_timezone.utc)
            .timestamp()
            * 1_000
        )

    def test_from_ms(self):
        assert Datetime.from_ms(0).exact_eq(Datetime())
        assert Datetime.from_ms(1_700_000_000_000).exact_eq(
            Datetime(2023, 11, 14, 22, 13, 20)
        )
        assert Datetime.from_ms(-1).exact_eq(
            Datetime(1969, 12, 31, 23, 59, 59, 999)
        )

    def test_from_ms_to_timezone(self):
        assert Datetime.from_ms(0, EST).exact_eq(
            Datetime(1969, 12, 31, 19, timezone=EST)
        )

    def test_from_ms_from_timezone(self):
        # a timestamp counted in the clock of UTC+2
        assert Datetime.from_ms(7_200_000, UTC, Timezone(2)).exact_eq(
            Datetime(1970, 1, 1, 0)
        )

    def test_from_ms_out_of_range(self):
        with pytest.raises(InvalidDate):
            Datetime.from_ms(10**18)

    @pytest.mark.parametrize(
        "d",
        [
            Datetime(9999, 12, 31, 23, timezone=EST),
            Datetime(9999, 12, 31, 23, 59, 59, 999, timezone=PST),
            Datetime(1, 1, 1, 2, timezone=Timezone(9)),
            Datetime(1, 1, 1, timezone=Timezone(23)),
        ],
    )
    def test_from_ms_near_year_bounds(self, d):
        # the UTC date of these instants lies outside the year range
        assert Datetime.from_ms(d.to_ms(), d.timezone).exact_eq(d)

    def test_from_ms_just_past_max(self):
        ts = Datetime(9999, 12, 31, 23, 59, 59, 999, timezone=PST).to_ms()
        with pytest.raises(InvalidDate):
            Datetime.from_ms(ts + 1, PST)

    def test_from_ms_invalid_type(self):
        with pytest.raises(TypeError):
            Datetime.from_ms(1.5)  # type: ignore[arg-type]

    @given(TIMESTAMPS, ALL_ZONES)
    def test_roundtrip_timestamp(self, ts, tz):
        assert Datetime.from_ms(ts, tz).to_ms() == ts

    @given(TIMESTAMPS, ALL_ZONES, ALL_ZONES)
    def test_roundtrip_value(self, ts, tz, target):
        d = Datetime.from_ms(ts, tz)
        assert Datetime.from_ms(d.to_ms(target), tz, target).exact_eq(d)


class TestToTimezone:

    def test_examples(self):
        d = Datetime(2023, 1, 1, 2, timezone=UTC)
        assert d.to_timezone(EST).exact_eq(
            Datetime(2022, 12, 31, 21, timezone=EST)
        )
        assert d.to_timezone(Timezone(23)).exact_eq(
            Datetime(2023, 1, 2, 1, timezone=Timezone(23))
        )
        assert d.to_timezone(UTC).exact_eq(d)

    def test_pst_to_cst(self):
        d = Datetime(2023, 6, 1, 10, timezone=PST)
        assert d.to_timezone(CST).exact_eq(
            Datetime(2023, 6, 1, 12, timezone=CST)
        )

    @given(TIMESTAMPS, ALL_ZONES, ALL_ZONES)
    def test_same_instant(self, ts, a, b):
        d = Datetime.from_ms(ts, a)
        assert d.to_timezone(b) == d
        assert d.to_timezone(b).timezone == b
        assert d.to_timezone(b).to_timezone(a).exact_eq(d)

    def test_invalid(self):
        with pytest.raises(TypeError):
            Datetime().to_timezone(-5)  # type: ignore[arg-type]


class TestAdd:

    def test_carry_into_next_year(self):
        d = Datetime(2023, 12, 31, 23, 59, 59, 999, 999, 999)
        assert (d + nanoseconds(1)).exact_eq(Datetime(2024, 1, 1))

    def test_borrow_from_previous_year(self):
        d = Datetime(2024, 1, 1)
        assert (d - nanoseconds(1)).exact_eq(
            Datetime(2023, 12, 31, 23, 59, 59, 999, 999, 999)
        )

    def test_leap_day(self):
        d = Datetime(2024, 2, 28, 22)
        assert d.add(hours=3).exact_eq(Datetime(2024, 2, 29, 1))
        assert d.add(days(2)).exact_eq(Datetime(2024, 3, 1, 22))
        assert Datetime(2023, 2, 28, 22).add(hours(3)).exact_eq(
            Datetime(2023, 3, 1, 1)
        )

    @pytest.mark.parametrize(
        "arg, expect",
        [
            (days(1), Datetime(2021, 1, 3, 12)),
            (hours(13), Datetime(2021, 1, 3, 1)),
            (minutes(-721), Datetime(2021, 1, 1, 23, 59)),
            (seconds(60), Datetime(2021, 1, 2, 12, 1)),
            (milliseconds(1), Datetime(2021, 1, 2, 12, 0, 0, 1)),
            (microseconds(1), Datetime(2021, 1, 2, 12, 0, 0, 0, 1)),
            (nanoseconds(1), Datetime(2021, 1, 2, 12, 0, 0, 0, 0, 1)),
            (TimeDelta(days=1, hours=13), Datetime(2021, 1, 4, 1)),
            (Time(13), Datetime(2021, 1, 3, 1)),
        ],
    )
    def test_units(self, arg, expect):
        d = Datetime(2021, 1, 2, 12)
        assert (d + arg).exact_eq(expect)
        assert d.add(arg).exact_eq(expect)
        assert (expect - arg).exact_eq(d)
        assert expect.subtract(arg).exact_eq(d)

    def test_kwargs(self):
        d = Datetime(2021, 1, 2, 12, timezone=EST)
        assert d.add(days=1, hours=1, nanoseconds=1).exact_eq(
            Datetime(2021, 1, 3, 13, 0, 0, 0, 0, 1, timezone=EST)
        )
        assert d.subtract(minutes=1).exact_eq(
            Datetime(2021, 1, 2, 11, 59, timezone=EST)
        )

    def test_keeps_timezone(self):
        d = Datetime(2021, 1, 2, 23, timezone=PST) + hours(2)
        assert d.timezone == PST
        assert d.date() == Date(2021, 1, 3)

    def test_inplace(self):
        d = Datetime(2021, 1, 2)
        original = d
        d += hours(25)
        assert d.exact_eq(Datetime(2021, 1, 3, 1))
        assert original.exact_eq(Datetime(2021, 1, 2))
        d -= Time(1)
        assert d.exact_eq(Datetime(2021, 1, 3))

    def test_out_of_range_is_atomic(self):
        d = Datetime(9999, 12, 31, 23)
        with pytest.raises(InvalidDate):
            d += hours(1)
        assert d.exact_eq(Datetime(9999, 12, 31, 23))
        with pytest.raises(InvalidDate):
            Datetime(1, 1, 1) - nanoseconds(1)

    def test_unsupported(self):
        d = Datetime(2021, 1, 2)
        with pytest.raises(TypeError, match="unsupported operand"):
            d + 1  # type: ignore[operator]
        with pytest.raises(TypeError, match="unsupported operand"):
            d + Date(2021, 1, 1)  # type: ignore[operator]
        with pytest.raises(TypeError):
            d.add(hours(1), minutes=3)

    def test_increment_decrement(self):
        d = Datetime(2024, 2, 28, 13, 14, timezone=CST)
        assert d.increment().exact_eq(Datetime(2024, 2, 29, 13, 14, timezone=CST))
        assert d.decrement().exact_eq(Datetime(2024, 2, 27, 13, 14, timezone=CST))
        assert d.add_days(2).exact_eq(Datetime(2024, 3, 1, 13, 14, timezone=CST))
        assert d.subtract_days(59).exact_eq(
            Datetime(2023, 12, 31, 13, 14, timezone=CST)
        )

    @given(TIMESTAMPS, integers(-10**15, 10**15))
    def test_matches_timestamp_arithmetic(self, ts, ns):
        d = Datetime.from_ms(ts)
        try:
            shifted = d + nanoseconds(ns)
        except InvalidDate:
            return
        assert shifted - d == TimeDelta(nanoseconds=ns)


class TestDifference:

    def test_same_zone(self):
        assert Datetime(2021, 1, 2, 12) - Datetime(2021, 1, 1) == TimeDelta(
            hours=36
        )

    def test_across_zones(self):
        # noon in UTC is five hours after noon in UTC+5
        a = Datetime(2023, 1, 1, 12, timezone=UTC)
        b = Datetime(2023, 1, 1, 12, timezone=Timezone(5))
        assert a - b == hours(5).to_delta()
        assert b - a == hours(-5).to_delta()

    def test_same_instant(self):
        a = Datetime(2020, 8, 15, 23, timezone=UTC)
        assert a - a.to_timezone(PST) == TimeDelta.ZERO

    def test_whole_range(self):
        d = Datetime(9999, 12, 31, 23, 59, 59, 999, 999, 999) - Datetime(1, 1, 1)
        assert d.in_units()[0] == 3_652_058


class TestNow:

    def test_fixed_clock(self):
        clock = FixedClock(Date(2022, 5, 6), Time(7, 8, 9))
        assert Datetime.now(clock=clock).exact_eq(Datetime(2022, 5, 6, 7, 8, 9))
        assert Datetime.now(EST, clock=clock).exact_eq(
            Datetime(2022, 5, 6, 7, 8, 9, timezone=EST)
        )

    def test_offsets(self):
        clock = FixedClock(Date(2022, 12, 31), Time(23))
        assert Datetime.now(hours=2, clock=clock).exact_eq(
            Datetime(2023, 1, 1, 1)
        )
        assert Datetime.now(days=-1, nanoseconds=1, clock=clock).exact_eq(
            Datetime(2022, 12, 30, 23, 0, 0, 0, 0, 1)
        )

    def test_system_clock(self):
        before = py_datetime.now(py_timezone.utc).timestamp()
        now = Datetime.now().to_ms() / 1_000
        after = py_datetime.now(py_timezone.utc).timestamp()
        assert before - 0.01 <= now <= after + 0.01

    def test_system_clock_in_timezone(self):
        utc_now = Datetime.now(UTC)
        est_now = Datetime.now(EST)
        assert est_now.timezone == EST
        assert abs((est_now - utc_now).in_seconds()) < 5


def test_replace():
    d = Datetime(2020, 8, 15, 23, 12, timezone=EST)
    assert d.replace(year=2021).exact_eq(
        Datetime(2021, 8, 15, 23, 12, timezone=EST)
    )
    assert d.replace(hour=1, nanosecond=3).exact_eq(
        Datetime(2020, 8, 15, 1, 12, 0, 0, 0, 3, timezone=EST)
    )
    # replacing the timezone keeps the wall clock reading
    assert d.replace(timezone=UTC).exact_eq(Datetime(2020, 8, 15, 23, 12))
    with pytest.raises(InvalidDate):
        d.replace(month=2, day=30)
    with pytest.raises(TypeError):
        d.replace(weekday=3)


class TestParse:

    def test_full(self):
        d = Datetime.parse(
            "2023-01-05 13:45:10.001.002.003",
            Component.YEAR,
            Component.MONTH,
            Component.DAY,
            Component.HOUR,
            Component.MINUTE,
            Component.SECOND,
            Component.MILLISECOND,
            Component.MICROSECOND,
            Component.NANOSECOND,
        )
        assert d.exact_eq(Datetime(2023, 1, 5, 13, 45, 10, 1, 2, 3))

    def test_custom_order(self):
        d = Datetime.parse(
            "05/01/2023 10:13",
            Component.DAY,
            Component.MONTH,
            Component.YEAR,
            Component.MINUTE,
            Component.HOUR,
            timezone=PST,
        )
        assert d.exact_eq(Datetime(2023, 1, 5, 13, 10, timezone=PST))

    def test_date_only(self):
        d = Datetime.parse(
            "2023-01-05", Component.YEAR, Component.MONTH, Component.DAY
        )
        assert d.exact_eq(Datetime(2023, 1, 5))

    def test_iso_like(self):
        d = Datetime.parse(
            "2023-01-05T13:45",
            Component.YEAR,
            Component.MONTH,
            Component.DAY,
            Component.HOUR,
            Component.MINUTE,
        )
        assert d.exact_eq(Datetime(2023, 1, 5, 13, 45))

    @pytest.mark.parametrize(
        "s, components",
        [
            ("2023-01-05", (Component.YEAR, Component.MONTH)),
            ("2023-01-05 13", (Component.YEAR, Component.MONTH, Component.DAY)),
            (
                "2023-01-05",
                (
                    Component.YEAR,
                    Component.MONTH,
                    Component.DAY,
                    Component.HOUR,
                ),
            ),
            (
                "2023-01-05 1x:00",
                (
                    Component.YEAR,
                    Component.MONTH,
                    Component.DAY,
                    Component.HOUR,
                    Component.MINUTE,
                ),
            ),
        ],
    )
    def test_invalid(self, s, components):
        with pytest.raises(ParseError):
            Datetime.parse(s, *components)

    @given(TIMESTAMPS)
    def test_roundtrip(self, ts):
        d = Datetime.from_ms(ts)
        assert Datetime.parse(d.to_string(), *Component).exact_eq(d)


def test_copy():
    d = Datetime(2021, 1, 2)
    assert copy(d) is d
    assert deepcopy(d) is d


@given(TIMESTAMPS, ALL_ZONES)
def test_pickling(ts, tz):
    d = Datetime.from_ms(ts, tz) + nanoseconds(123_456)
    assert pickle.loads(pickle.dumps(d)).exact_eq(d)


def test_cannot_subclass():
    with pytest.raises(TypeError):

        class Subclass(Datetime):  # type: ignore[misc]
            pass


@given(TIMESTAMPS, ALL_ZONES)
def test_from_ms_in_own_clock(ts, tz):
    d = Datetime.from_ms(ts, tz)
    assert Datetime.from_ms(d.to_ms(tz), tz, tz) == d


@given(TIMESTAMPS, TIMESTAMPS, ALL_ZONES, ALL_ZONES, ALL_ZONES)
def test_ordering_agrees_with_timestamps(ts1, ts2, tz1, tz2, shared):
    a = Datetime.from_ms(ts1, tz1)
    b = Datetime.from_ms(ts2, tz2)
    assert [a < b, a == b, a > b].count(True) == 1
    assert (a < b) == (a.to_ms(shared) < b.to_ms(shared))
    assert (a == b) == (a.to_ms(shared) == b.to_ms(shared))


@given(TIMESTAMPS, integers(-10**17, 10**17))
def test_add_then_subtract(ts, ns):
    d = Datetime.from_ms(ts) + nanoseconds(ns % 1_000_000)
    t = TimeDelta(nanoseconds=ns)
    try:
        shifted = d + t
    except InvalidDate:
        return
    assert (shifted - t).exact_eq(d)
