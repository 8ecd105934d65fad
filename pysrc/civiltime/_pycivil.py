# The MIT License (MIT)
#
# Copyright (c) Arie Bovenberg
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
# - Why is everything in one file?
#   - Flat is better than nested
#   - It prevents circular imports since the classes 'know' about each other
# - All value types are immutable. Arithmetic always returns a new instance,
#   so a failing operation can never leave a half-updated value behind.
# - Time never touches a date. Sub-day arithmetic on a Time reports how many
#   days were crossed, and Datetime forwards that carry to its Date.
from __future__ import annotations

__version__ = "0.1.0"

import enum
import re
from abc import ABC, abstractmethod
from struct import pack, unpack
from time import time_ns
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    NamedTuple,
    Union,
    no_type_check,
    overload,
)

from ._math import (
    EPOCH_ORDINAL,
    MAX_ORDINAL,
    MAX_YEAR,
    MIN_ORDINAL,
    MIN_YEAR,
    MS_PER_DAY,
    MS_PER_HOUR,
    NS_PER_DAY,
    NS_PER_HOUR,
    NS_PER_MIN,
    NS_PER_MS,
    NS_PER_SEC,
    NS_PER_US,
    days_in_month,
    is_leap,
    ordinal_to_ymd,
    ymd_to_ordinal,
)
from ._tz import get_local_tz, lookup_offset

__all__ = [
    # Date and time
    "Date",
    "Time",
    "Datetime",
    "Timezone",
    # Deltas and time units
    "TimeDelta",
    "Days",
    "Hours",
    "Minutes",
    "Seconds",
    "Milliseconds",
    "Microseconds",
    "Nanoseconds",
    "days",
    "hours",
    "minutes",
    "seconds",
    "milliseconds",
    "microseconds",
    "nanoseconds",
    "Carry",
    # Parsing
    "Component",
    # Clocks
    "Clock",
    "SystemClock",
    "FixedClock",
    # Exceptions
    "InvalidDate",
    "InvalidTime",
    "ParseError",
    "UnrecognizedTimezoneName",
    # Constants
    "UTC",
    "EST",
    "CST",
    "MST",
    "PST",
    "Weekday",
    "get_default_timezone",
]


class Weekday(enum.Enum):
    """The days of the week; ``.value`` corresponds with ISO numbering."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


class Component(enum.Enum):
    """Labels for the numbers in a string passed to one of the
    ``parse()`` methods. The first three belong to :class:`Date`,
    the rest to :class:`Time`.

    Example
    -------
    >>> Date.parse("05/01/2023", Component.DAY, Component.MONTH, Component.YEAR)
    Date(2023-01-05)
    """

    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"
    MILLISECOND = "millisecond"
    MICROSECOND = "microsecond"
    NANOSECOND = "nanosecond"


_DATE_COMPONENTS = frozenset(
    [Component.YEAR, Component.MONTH, Component.DAY]
)
_TIME_COMPONENTS = frozenset(Component) - _DATE_COMPONENTS

# Helpers that pre-compute/lookup as much as possible
_object_new = object.__new__
_MAX_DELTA_DAYS = 9999 * 366
_MAX_DELTA_NANOS = _MAX_DELTA_DAYS * NS_PER_DAY
_UNSET = object()


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


def _check_int(value: object, name: str) -> None:
    if type(value) is not int:
        raise TypeError(
            f"{name} must be an int, got {type(value).__name__}"
        )


@final
class Timezone(_ImmutableBase):
    """A fixed offset from UTC, in whole hours.

    Offsets are positive east of UTC, so ``Timezone(-5)`` is five hours
    behind UTC (Eastern Standard Time).

    Example
    -------
    >>> Timezone(2)
    Timezone(UTC+02)
    >>> PST.offset_difference(CST)
    -2
    """

    __slots__ = ("_offset",)

    def __init__(self, utc_offset: int) -> None:
        _check_int(utc_offset, "utc_offset")
        if not -24 < utc_offset < 24:
            raise ValueError(f"UTC offset out of range: {utc_offset}")
        self._offset = utc_offset

    @property
    def utc_offset(self) -> int:
        return self._offset

    def offset_difference(self, other: Timezone, /) -> int:
        """The difference in hours between the UTC offsets of two timezones

        Example
        -------
        >>> EST.offset_difference(CST)
        1
        >>> CST.offset_difference(EST)
        -1
        """
        if not isinstance(other, Timezone):
            raise TypeError(f"Expected Timezone, got {type(other)!r}")
        return self._offset - other._offset

    @classmethod
    def from_name(cls, name: str, /) -> Timezone:
        """Look up a timezone by name, abbreviation or signed offset

        Daylight saving names resolve to the standard offset of the zone.
        Signed offsets outside -23..+23 are unrecognized.

        Example
        -------
        >>> Timezone.from_name("Eastern Standard Time")
        Timezone(UTC-05)
        >>> Timezone.from_name("+3")
        Timezone(UTC+03)
        """
        if not isinstance(name, str):
            raise TypeError(f"Expected str, got {type(name)!r}")
        if (offset := lookup_offset(name)) is None:
            raise UnrecognizedTimezoneName.for_name(name)
        return cls(offset)

    @classmethod
    def local(cls) -> Timezone:
        """The timezone of the host. It is read once and then cached.

        Raises :class:`UnrecognizedTimezoneName` if the host reports
        a timezone name that isn't known.
        """
        return get_local_tz()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Timezone):
            return NotImplemented
        return self._offset == other._offset

    def __hash__(self) -> int:
        return hash(self._offset)

    def __str__(self) -> str:
        return f"UTC{self._offset:+03d}" if self._offset else "UTC"

    def __repr__(self) -> str:
        return f"Timezone({self})"

    @no_type_check
    def __reduce__(self):
        return Timezone, (self._offset,)


UTC = Timezone(0)
EST = Timezone(-5)
CST = Timezone(-6)
MST = Timezone(-7)
PST = Timezone(-8)

_default_tz = UTC


def get_default_timezone() -> Timezone:
    """The timezone used whenever a ``timezone`` argument is omitted.

    Configure it with :func:`civiltime.reset_default_timezone`.
    """
    return _default_tz


def _set_default_tz(tz: Timezone) -> None:
    global _default_tz
    if not isinstance(tz, Timezone):
        raise TypeError(f"Expected Timezone, got {type(tz)!r}")
    _default_tz = tz


def _resolve_tz(tz: Timezone | None) -> Timezone:
    if tz is None:
        return _default_tz
    elif isinstance(tz, Timezone):
        return tz
    raise TypeError(f"timezone must be a Timezone, got {type(tz)!r}")


@final
class Date(_ImmutableBase):
    """A date without a time component

    Example
    -------
    >>> d = Date(2021, 1, 2)
    Date(2021-01-02)
    """

    __slots__ = ("_year", "_month", "_day")

    MIN: ClassVar[Date]
    """The minimum possible date"""
    MAX: ClassVar[Date]
    """The maximum possible date"""
    EPOCH: ClassVar[Date]
    """The UNIX epoch, 1970-01-01. Used for omitted date components."""

    def __init__(self, year: int, month: int, day: int) -> None:
        _check_int(year, "year")
        _check_int(month, "month")
        _check_int(day, "day")
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise InvalidDate(f"year out of range: {year}")
        if not 1 <= month <= 12:
            raise InvalidDate(f"month out of range: {month}")
        if not 1 <= day <= days_in_month(year, month):
            raise InvalidDate(
                f"day out of range for {year:04d}-{month:02d}: {day}"
            )
        self._year = year
        self._month = month
        self._day = day

    @classmethod
    def today(
        cls, timezone: Timezone | None = None, *, clock: Clock | None = None
    ) -> Date:
        """The current date in the given (or default) timezone

        Alias for ``Datetime.now(timezone).date()``.
        """
        # Use now() so this function gets patched like the other now functions
        return Datetime.now(timezone, clock=clock).date()

    @property
    def year(self) -> int:
        return self._year

    @property
    def month(self) -> int:
        return self._month

    @property
    def day(self) -> int:
        return self._day

    @staticmethod
    def is_leap_year(year: int, /) -> bool:
        """Whether the year is a leap year in the Gregorian calendar

        Example
        -------
        >>> Date.is_leap_year(2000)
        True
        >>> Date.is_leap_year(1900)
        False
        """
        return is_leap(year)

    @staticmethod
    def days_in_month(year: int, month: int, /) -> int:
        """The number of days in the given month

        Example
        -------
        >>> Date.days_in_month(2024, 2)
        29
        """
        if not 1 <= month <= 12:
            raise InvalidDate(f"month out of range: {month}")
        return days_in_month(year, month)

    def is_leap(self) -> bool:
        """Whether this date falls in a leap year"""
        return is_leap(self._year)

    def day_of_week(self) -> Weekday:
        """The day of the week

        Example
        -------
        >>> Date(2021, 1, 2).day_of_week()
        Weekday.SATURDAY
        """
        # 0001-01-01 is a Monday
        return Weekday((self._ordinal() + 6) % 7 + 1)

    def replace(self, **kwargs: Any) -> Date:
        """Create a new instance with the given fields replaced

        Example
        -------
        >>> d = Date(2021, 1, 2)
        >>> d.replace(day=4)
        Date(2021-01-04)
        """
        fields = {"year": self._year, "month": self._month, "day": self._day}
        for name, value in kwargs.items():
            if name not in fields:
                raise TypeError(f"Unknown field: {name!r}")
            fields[name] = value
        return Date(**fields)

    def add_days(self, n: int, /) -> Date:
        """Move the date ``n`` days forward (or back, if negative),
        rolling over months and years as needed.

        Example
        -------
        >>> Date(2023, 12, 31).add_days(1)
        Date(2024-01-01)
        >>> Date(2024, 3, 1).add_days(-1)
        Date(2024-02-29)
        """
        _check_int(n, "days")
        return Date._from_ordinal(self._ordinal() + n)

    def subtract_days(self, n: int, /) -> Date:
        """Inverse of :meth:`add_days`"""
        _check_int(n, "days")
        return Date._from_ordinal(self._ordinal() - n)

    def increment(self) -> Date:
        """The next day

        Example
        -------
        >>> Date(2023, 1, 31).increment()
        Date(2023-02-01)
        """
        return Date._from_ordinal(self._ordinal() + 1)

    def decrement(self) -> Date:
        """The previous day

        Example
        -------
        >>> Date(2024, 1, 1).decrement()
        Date(2023-12-31)
        """
        return Date._from_ordinal(self._ordinal() - 1)

    def days_until(self, other: Date, /) -> int:
        """Calculate the number of days from this date to another date.
        If the other date is before this date, the result is negative.

        Example
        -------
        >>> Date(2021, 1, 2).days_until(Date(2021, 1, 5))
        3
        """
        return other._ordinal() - self._ordinal()

    def days_since(self, other: Date, /) -> int:
        """Calculate the number of days this day is after another date.
        If the other date is after this date, the result is negative.

        Example
        -------
        >>> Date(2021, 1, 5).days_since(Date(2021, 1, 2))
        3
        """
        return self._ordinal() - other._ordinal()

    @classmethod
    def parse(cls, s: str, /, *components: Component) -> Date:
        """Create from a string, given which component each number
        in the string represents

        Example
        -------
        >>> Date.parse("2023-01-05", Component.YEAR, Component.MONTH, Component.DAY)
        Date(2023-01-05)
        >>> Date.parse("5.1.2023", Component.DAY, Component.MONTH, Component.YEAR)
        Date(2023-01-05)

        Raises :class:`ParseError` if the string and components don't match,
        and :class:`InvalidDate` if the numbers don't form a valid date.
        """
        values = _parse_labelled(s, components, _DATE_COMPONENTS, "date")
        if len(values) != 3:
            raise ParseError(
                "A date requires exactly the year, month, and day components"
            )
        return cls(**values)

    def to_string(self, separator: str = "-") -> str:
        """Format as ``YYYY-MM-DD``, with a configurable separator

        Example
        -------
        >>> Date(2021, 1, 2).to_string()
        '2021-01-02'
        >>> Date(2021, 1, 2).to_string("/")
        '2021/01/02'
        """
        return (
            f"{self._year:04d}{separator}{self._month:02d}"
            f"{separator}{self._day:02d}"
        )

    __str__ = to_string

    def __repr__(self) -> str:
        return f"Date({self})"

    def __add__(self, other: Days) -> Date:
        """Add a number of days

        Example
        -------
        >>> Date(2021, 1, 2) + days(30)
        Date(2021-02-01)
        """
        if not isinstance(other, Days):
            return NotImplemented
        return self.add_days(other._amount)

    @overload
    def __sub__(self, other: Days) -> Date: ...

    @overload
    def __sub__(self, other: Date) -> Days: ...

    def __sub__(self, other: Days | Date) -> Date | Days:
        """Subtract a number of days, or calculate the days between two dates

        Example
        -------
        >>> Date(2021, 1, 2) - days(2)
        Date(2020-12-31)
        >>> Date(2021, 3, 1) - Date(2021, 2, 1)
        Days(28)
        """
        if isinstance(other, Days):
            return self.subtract_days(other._amount)
        elif isinstance(other, Date):
            return Days(self._ordinal() - other._ordinal())
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        """Compare for equality

        Example
        -------
        >>> d = Date(2021, 1, 2)
        >>> d == Date(2021, 1, 2)
        True
        >>> d == Date(2021, 1, 3)
        False
        """
        if not isinstance(other, Date):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __lt__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return self._key() >= other._key()

    def _key(self) -> tuple[int, int, int]:
        return (self._year, self._month, self._day)

    def _ordinal(self) -> int:
        return ymd_to_ordinal(self._year, self._month, self._day)

    @classmethod
    def _from_ordinal(cls, n: int, /) -> Date:
        if not MIN_ORDINAL <= n <= MAX_ORDINAL:
            raise InvalidDate("Date out of range")
        return cls._from_ymd_unchecked(*ordinal_to_ymd(n))

    @classmethod
    def _from_ymd_unchecked(cls, year: int, month: int, day: int, /) -> Date:
        self = _object_new(cls)
        self._year = year
        self._month = month
        self._day = day
        return self

    @no_type_check
    def __reduce__(self):
        return _unpkl_date, (pack("<HBB", *self._key()),)


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_date(data: bytes) -> Date:
    return Date(*unpack("<HBB", data))


Date.MIN = Date(MIN_YEAR, 1, 1)
Date.MAX = Date(MAX_YEAR, 12, 31)
Date.EPOCH = Date(1970, 1, 1)


class Carry(NamedTuple):
    """The result of shifting a :class:`Time`: the new time of day,
    and the signed number of whole days that were crossed."""

    time: Time
    days: int


@final
class Time(_ImmutableBase):
    """Time of day in a timezone, with nanosecond precision

    Example
    -------
    >>> Time(12, 30, 0)
    Time(12:30:00.000.000.000 UTC)
    >>> Time(9, 5, 1, 250, timezone=EST)
    Time(9:05:01.250.000.000 UTC-05)
    """

    __slots__ = ("_hour", "_minute", "_second", "_nanos", "_tz")

    MIDNIGHT: ClassVar[Time]
    """The time at midnight (UTC)"""
    NOON: ClassVar[Time]
    """The time at noon (UTC)"""
    MAX: ClassVar[Time]
    """The maximum time, just before midnight (UTC)"""

    def __init__(
        self,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
        microsecond: int = 0,
        nanosecond: int = 0,
        *,
        timezone: Timezone | None = None,
    ) -> None:
        for name, value, limit in (
            ("hour", hour, 24),
            ("minute", minute, 60),
            ("second", second, 60),
            ("millisecond", millisecond, 1_000),
            ("microsecond", microsecond, 1_000),
            ("nanosecond", nanosecond, 1_000),
        ):
            _check_int(value, name)
            if not 0 <= value < limit:
                raise InvalidTime(f"{name} out of range: {value}")
        self._hour = hour
        self._minute = minute
        self._second = second
        self._nanos = millisecond * NS_PER_MS + microsecond * NS_PER_US + nanosecond
        self._tz = _resolve_tz(timezone)

    @classmethod
    def now(
        cls, timezone: Timezone | None = None, *, clock: Clock | None = None
    ) -> Time:
        """The current time of day in the given (or default) timezone

        Alias for ``Datetime.now(timezone).time()``.
        """
        return Datetime.now(timezone, clock=clock).time()

    @property
    def hour(self) -> int:
        return self._hour

    @property
    def minute(self) -> int:
        return self._minute

    @property
    def second(self) -> int:
        return self._second

    @property
    def millisecond(self) -> int:
        return self._nanos // NS_PER_MS

    @property
    def microsecond(self) -> int:
        return self._nanos // NS_PER_US % 1_000

    @property
    def nanosecond(self) -> int:
        return self._nanos % 1_000

    @property
    def timezone(self) -> Timezone:
        return self._tz

    def replace(self, **kwargs: Any) -> Time:
        """Create a new instance with the given fields replaced

        Example
        -------
        >>> t = Time(12, 30, 0)
        >>> t.replace(minute=3, microsecond=4)
        Time(12:03:00.000.004.000 UTC)
        """
        fields = self._fields()
        for name, value in kwargs.items():
            if name not in fields:
                raise TypeError(f"Unknown field: {name!r}")
            fields[name] = value
        return Time(**fields)

    def add(self, *args: Any, **kwargs: Any) -> Carry:
        """Shift the time of day forward.

        Accepts a single :class:`TimeDelta`, unit amount (e.g. ``hours(2)``),
        or :class:`Time` (as a duration since midnight),
        or keyword arguments (``hours=2, minutes=30``).

        The result wraps around midnight. The number of days crossed
        is returned alongside the new time, since a time of day
        can't hold it by itself.

        Example
        -------
        >>> Time(23, 59, 59, 999, 999, 999).add(nanoseconds(1))
        Carry(time=Time(0:00:00.000.000.000 UTC), days=1)
        >>> Time(1).add(hours=-3)
        Carry(time=Time(22:00:00.000.000.000 UTC), days=-1)
        """
        return self._shift_nanos(_shift_nanos_from_args(1, args, kwargs))

    def subtract(self, *args: Any, **kwargs: Any) -> Carry:
        """Inverse of :meth:`add`. The day carry is negative when
        the result crosses midnight backwards.

        Example
        -------
        >>> Time(0, 30).subtract(minutes=45)
        Carry(time=Time(23:45:00.000.000.000 UTC), days=-1)
        """
        return self._shift_nanos(_shift_nanos_from_args(-1, args, kwargs))

    def exact_eq(self, other: Time, /) -> bool:
        """Compare the fields *and* the timezone.
        The comparison operators ignore the timezone.

        Example
        -------
        >>> Time(12, timezone=UTC) == Time(12, timezone=EST)
        True
        >>> Time(12, timezone=UTC).exact_eq(Time(12, timezone=EST))
        False
        """
        if type(self) is not type(other):
            raise TypeError("Cannot compare different types")
        return (self._key(), self._tz) == (other._key(), other._tz)

    @classmethod
    def parse(
        cls,
        s: str,
        /,
        *components: Component,
        timezone: Timezone | None = None,
    ) -> Time:
        """Create from a string, given which component each number
        in the string represents. Missing components are zero.

        Example
        -------
        >>> Time.parse("3:04:05", Component.HOUR, Component.MINUTE, Component.SECOND)
        Time(3:04:05.000.000.000 UTC)
        >>> Time.parse("30-12", Component.MINUTE, Component.HOUR)
        Time(12:30:00.000.000.000 UTC)
        """
        values = _parse_labelled(s, components, _TIME_COMPONENTS, "time")
        return cls(**values, timezone=timezone)

    def to_string(
        self, separator: str = ":", subsecond_separator: str = "."
    ) -> str:
        """Format as ``H:MM:SS.mmm.uuu.nnn``

        Example
        -------
        >>> Time(3, 4, 5, 6, 7, 8).to_string()
        '3:04:05.006.007.008'
        >>> Time(3, 4, 5).to_string("-", ",")
        '3-04-05,000,000,000'
        """
        return (
            f"{self._hour}{separator}{self._minute:02d}{separator}"
            f"{self._second:02d}{subsecond_separator}{self.millisecond:03d}"
            f"{subsecond_separator}{self.microsecond:03d}"
            f"{subsecond_separator}{self.nanosecond:03d}"
        )

    __str__ = to_string

    def __repr__(self) -> str:
        return f"Time({self} {self._tz})"

    def __eq__(self, other: object) -> bool:
        """Compare the time of day, ignoring the timezone.
        Use :meth:`exact_eq` to take the timezone into account.

        Example
        -------
        >>> t = Time(12, 30, 0)
        >>> t == Time(12, 30, 0)
        True
        >>> t == Time(12, 30, 1)
        False
        """
        if not isinstance(other, Time):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __lt__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self._key() >= other._key()

    def _key(self) -> tuple[int, int, int, int]:
        return (self._hour, self._minute, self._second, self._nanos)

    def _fields(self) -> dict[str, Any]:
        return {
            "hour": self._hour,
            "minute": self._minute,
            "second": self._second,
            "millisecond": self.millisecond,
            "microsecond": self.microsecond,
            "nanosecond": self.nanosecond,
            "timezone": self._tz,
        }

    # These totals are only meaningful within a single day,
    # so they're kept out of the public API.

    def _total_minutes(self) -> int:
        return self._hour * 60 + self._minute

    def _total_seconds(self) -> int:
        return self._total_minutes() * 60 + self._second

    def _total_milliseconds(self) -> int:
        return self._total_seconds() * 1_000 + self._nanos // NS_PER_MS

    def _total_microseconds(self) -> int:
        return self._total_seconds() * 1_000_000 + self._nanos // NS_PER_US

    def _total_nanoseconds(self) -> int:
        return self._total_seconds() * NS_PER_SEC + self._nanos

    def _shift_nanos(self, ns: int, /) -> Carry:
        day_carry, ns_of_day = divmod(self._total_nanoseconds() + ns, NS_PER_DAY)
        return Carry(Time._from_nanos_unchecked(ns_of_day, self._tz), day_carry)

    def _with_tz(self, tz: Timezone, /) -> Time:
        return Time._from_nanos_unchecked(self._total_nanoseconds(), tz)

    @classmethod
    def _from_nanos_unchecked(cls, ns: int, tz: Timezone, /) -> Time:
        assert 0 <= ns < NS_PER_DAY
        self = _object_new(cls)
        secs, self._nanos = divmod(ns, NS_PER_SEC)
        mins, self._second = divmod(secs, 60)
        self._hour, self._minute = divmod(mins, 60)
        self._tz = tz
        return self

    @no_type_check
    def __reduce__(self):
        return (
            _unpkl_time,
            (
                pack(
                    "<BBBIb",
                    self._hour,
                    self._minute,
                    self._second,
                    self._nanos,
                    self._tz._offset,
                ),
            ),
        )


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_time(data: bytes) -> Time:
    hour, minute, second, nanos, offset = unpack("<BBBIb", data)
    return Time._from_nanos_unchecked(
        (hour * 3_600 + minute * 60 + second) * NS_PER_SEC + nanos,
        Timezone(offset),
    )


Time.MIDNIGHT = Time(timezone=UTC)
Time.NOON = Time(12, timezone=UTC)
Time.MAX = Time(23, 59, 59, 999, 999, 999, timezone=UTC)


@final
class TimeDelta(_ImmutableBase):
    """A signed duration with nanosecond precision

    The inputs are normalized, so 90 minutes becomes 1 hour and 30 minutes,
    for example. Days are always exactly 24 hours.

    Examples
    --------
    >>> d = TimeDelta(hours=1, minutes=30)
    TimeDelta(1:30:00.000.000.000)
    >>> d.in_minutes()
    90.0
    """

    __slots__ = ("_total_ns",)

    def __init__(
        self,
        *,
        days: float = 0,
        hours: float = 0,
        minutes: float = 0,
        seconds: float = 0,
        milliseconds: float = 0,
        microseconds: float = 0,
        nanoseconds: int = 0,
    ) -> None:
        _check_int(nanoseconds, "nanoseconds")
        ns = self._total_ns = (
            # Cast individual components to int to avoid floating point errors
            int(days * NS_PER_DAY)
            + int(hours * NS_PER_HOUR)
            + int(minutes * NS_PER_MIN)
            + int(seconds * NS_PER_SEC)
            + int(milliseconds * NS_PER_MS)
            + int(microseconds * NS_PER_US)
            + nanoseconds
        )
        if abs(ns) > _MAX_DELTA_NANOS:
            raise ValueError("TimeDelta out of range")

    ZERO: ClassVar[TimeDelta]
    """A delta of zero"""
    MAX: ClassVar[TimeDelta]
    """The maximum possible delta"""
    MIN: ClassVar[TimeDelta]
    """The minimum possible delta"""

    def in_days_of_24h(self) -> float:
        """The total size in days (of exactly 24 hours each)"""
        return self._total_ns / NS_PER_DAY

    def in_hours(self) -> float:
        """The total size in hours

        Example
        -------
        >>> d = TimeDelta(hours=1, minutes=30)
        >>> d.in_hours()
        1.5
        """
        return self._total_ns / NS_PER_HOUR

    def in_minutes(self) -> float:
        """The total size in minutes

        Example
        -------
        >>> d = TimeDelta(hours=1, minutes=30, seconds=30)
        >>> d.in_minutes()
        90.5
        """
        return self._total_ns / NS_PER_MIN

    def in_seconds(self) -> float:
        """The total size in seconds

        Example
        -------
        >>> d = TimeDelta(minutes=2, seconds=1, microseconds=500_000)
        >>> d.in_seconds()
        121.5
        """
        return self._total_ns / NS_PER_SEC

    def in_milliseconds(self) -> float:
        """The total size in milliseconds"""
        return self._total_ns / NS_PER_MS

    def in_microseconds(self) -> float:
        """The total size in microseconds"""
        return self._total_ns / NS_PER_US

    def in_nanoseconds(self) -> int:
        """The total size in nanoseconds

        >>> d = TimeDelta(seconds=2, nanoseconds=50)
        >>> d.in_nanoseconds()
        2_000_000_050
        """
        return self._total_ns

    def in_units(self) -> tuple[int, int, int, int, int, int, int]:
        """Split into days, hours, minutes, seconds, milliseconds,
        microseconds, and nanoseconds. Each part has the sign of the whole.

        Example
        -------
        >>> TimeDelta(hours=25, microseconds=-1).in_units()
        (1, 0, 59, 59, 999, 999, 0)
        >>> (-TimeDelta(days=1, nanoseconds=3)).in_units()
        (-1, 0, 0, 0, 0, 0, -3)
        """
        days, rem = divmod(abs(self._total_ns), NS_PER_DAY)
        hrs, rem = divmod(rem, NS_PER_HOUR)
        mins, rem = divmod(rem, NS_PER_MIN)
        secs, rem = divmod(rem, NS_PER_SEC)
        ms, rem = divmod(rem, NS_PER_MS)
        us, ns = divmod(rem, NS_PER_US)
        parts = (days, hrs, mins, secs, ms, us, ns)
        return parts if self._total_ns >= 0 else tuple(-p for p in parts)  # type: ignore[return-value]

    def __add__(self, other: TimeDelta | _Unit) -> TimeDelta:
        """Add two deltas together

        Example
        -------
        >>> d = TimeDelta(hours=1, minutes=30)
        >>> d + TimeDelta(minutes=30)
        TimeDelta(2:00:00.000.000.000)
        >>> d + hours(1)
        TimeDelta(2:30:00.000.000.000)
        """
        if isinstance(other, _Unit):
            other = other.to_delta()
        elif not isinstance(other, TimeDelta):
            return NotImplemented
        return TimeDelta(nanoseconds=self._total_ns + other._total_ns)

    def __sub__(self, other: TimeDelta | _Unit) -> TimeDelta:
        """Subtract two deltas

        Example
        -------
        >>> d = TimeDelta(hours=1, minutes=30)
        >>> d - TimeDelta(minutes=30)
        TimeDelta(1:00:00.000.000.000)
        """
        if isinstance(other, _Unit):
            other = other.to_delta()
        elif not isinstance(other, TimeDelta):
            return NotImplemented
        return TimeDelta(nanoseconds=self._total_ns - other._total_ns)

    def __eq__(self, other: object) -> bool:
        """Compare for equality

        Example
        -------
        >>> d = TimeDelta(hours=1, minutes=30)
        >>> d == TimeDelta(minutes=90)
        True
        >>> d == TimeDelta(hours=2)
        False
        """
        if not isinstance(other, TimeDelta):
            return NotImplemented
        return self._total_ns == other._total_ns

    def __hash__(self) -> int:
        return hash(self._total_ns)

    def __lt__(self, other: TimeDelta) -> bool:
        if not isinstance(other, TimeDelta):
            return NotImplemented
        return self._total_ns < other._total_ns

    def __le__(self, other: TimeDelta) -> bool:
        if not isinstance(other, TimeDelta):
            return NotImplemented
        return self._total_ns <= other._total_ns

    def __gt__(self, other: TimeDelta) -> bool:
        if not isinstance(other, TimeDelta):
            return NotImplemented
        return self._total_ns > other._total_ns

    def __ge__(self, other: TimeDelta) -> bool:
        if not isinstance(other, TimeDelta):
            return NotImplemented
        return self._total_ns >= other._total_ns

    def __bool__(self) -> bool:
        """True if the value is non-zero

        Example
        -------
        >>> bool(TimeDelta())
        False
        >>> bool(TimeDelta(minutes=1))
        True
        """
        return bool(self._total_ns)

    def __mul__(self, other: float) -> TimeDelta:
        """Multiply by a number

        Example
        -------
        >>> d = TimeDelta(hours=1, minutes=30)
        >>> d * 2.5
        TimeDelta(3:45:00.000.000.000)
        """
        if not isinstance(other, (int, float)):
            return NotImplemented
        return TimeDelta(nanoseconds=int(self._total_ns * other))

    def __rmul__(self, other: float) -> TimeDelta:
        return self * other

    def __neg__(self) -> TimeDelta:
        """Negate the value

        Example
        -------
        >>> d = TimeDelta(hours=1, minutes=30)
        >>> -d
        TimeDelta(-1:30:00.000.000.000)
        """
        return TimeDelta._from_nanos_unchecked(-self._total_ns)

    def __pos__(self) -> TimeDelta:
        return self

    @overload
    def __truediv__(self, other: float) -> TimeDelta: ...

    @overload
    def __truediv__(self, other: TimeDelta) -> float: ...

    def __truediv__(self, other: float | TimeDelta) -> TimeDelta | float:
        """Divide by a number or another delta

        Example
        -------
        >>> d = TimeDelta(hours=1, minutes=30)
        >>> d / 2.5
        TimeDelta(0:36:00.000.000.000)
        >>> d / TimeDelta(minutes=30)
        3.0
        """
        if isinstance(other, TimeDelta):
            return self._total_ns / other._total_ns
        elif isinstance(other, (int, float)):
            return TimeDelta(nanoseconds=int(self._total_ns / other))
        return NotImplemented

    def __abs__(self) -> TimeDelta:
        """The absolute value

        Example
        -------
        >>> d = TimeDelta(hours=-1, minutes=-30)
        >>> abs(d)
        TimeDelta(1:30:00.000.000.000)
        """
        return TimeDelta._from_nanos_unchecked(abs(self._total_ns))

    def __str__(self) -> str:
        """Format as ``[-]H:MM:SS.mmm.uuu.nnn``, where the hours
        may exceed 24"""
        hrs, rem = divmod(abs(self._total_ns), NS_PER_HOUR)
        mins, rem = divmod(rem, NS_PER_MIN)
        secs, rem = divmod(rem, NS_PER_SEC)
        return (
            f"{'-' * (self._total_ns < 0)}{hrs}:{mins:02d}:{secs:02d}"
            f".{rem // NS_PER_MS:03d}.{rem // NS_PER_US % 1_000:03d}"
            f".{rem % 1_000:03d}"
        )

    def __repr__(self) -> str:
        return f"TimeDelta({self})"

    @no_type_check
    def __reduce__(self):
        return _unpkl_tdelta, (pack("<qI", *divmod(self._total_ns, NS_PER_SEC)),)

    @classmethod
    def _from_nanos_unchecked(cls, ns: int) -> TimeDelta:
        new = _object_new(cls)
        new._total_ns = ns
        return new


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_tdelta(data: bytes) -> TimeDelta:
    s, ns = unpack("<qI", data)
    return TimeDelta(seconds=s, nanoseconds=ns)


TimeDelta.ZERO = TimeDelta()
TimeDelta.MAX = TimeDelta(days=_MAX_DELTA_DAYS)
TimeDelta.MIN = TimeDelta(days=-_MAX_DELTA_DAYS)


class _Unit(_ImmutableBase):
    """A signed whole amount of a single unit of time.

    (This base class itself is not for public use.)
    """

    __slots__ = ("_amount",)
    _unit_ns: ClassVar[int]

    def __init__(self, amount: int, /) -> None:
        _check_int(amount, "amount")
        if abs(amount * self._unit_ns) > _MAX_DELTA_NANOS:
            raise ValueError(f"{type(self).__name__} out of range")
        self._amount = amount

    @property
    def amount(self) -> int:
        return self._amount

    def to_delta(self) -> TimeDelta:
        """Convert to a :class:`TimeDelta`

        Example
        -------
        >>> hours(36).to_delta()
        TimeDelta(36:00:00.000.000.000)
        """
        return TimeDelta._from_nanos_unchecked(self._amount * self._unit_ns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _Unit):
            return NotImplemented
        return type(self) is type(other) and self._amount == other._amount

    def __hash__(self) -> int:
        return hash((type(self), self._amount))

    def __neg__(self) -> _Unit:
        return type(self)(-self._amount)

    def __pos__(self) -> _Unit:
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._amount})"

    @no_type_check
    def __reduce__(self):
        return type(self), (self._amount,)


class Days(_Unit):
    """A number of calendar days. Applied to the date only."""

    __slots__ = ()
    _unit_ns = NS_PER_DAY


class Hours(_Unit):
    __slots__ = ()
    _unit_ns = NS_PER_HOUR


class Minutes(_Unit):
    __slots__ = ()
    _unit_ns = NS_PER_MIN


class Seconds(_Unit):
    __slots__ = ()
    _unit_ns = NS_PER_SEC


class Milliseconds(_Unit):
    __slots__ = ()
    _unit_ns = NS_PER_MS


class Microseconds(_Unit):
    __slots__ = ()
    _unit_ns = NS_PER_US


class Nanoseconds(_Unit):
    __slots__ = ()
    _unit_ns = 1


Duration = Union[TimeDelta, _Unit, Time]


def _duration_nanos(arg: object) -> int:
    if isinstance(arg, TimeDelta):
        return arg._total_ns
    elif isinstance(arg, _Unit):
        return arg._amount * arg._unit_ns
    elif isinstance(arg, Time):
        # a time of day is treated as the duration since midnight
        return arg._total_nanoseconds()
    raise TypeError(
        f"Expected TimeDelta, Time, or a unit amount, got {type(arg)!r}"
    )


def _shift_nanos_from_args(
    sign: int, args: tuple[Any, ...], kwargs: dict[str, Any]
) -> int:
    if kwargs:
        if args:
            raise TypeError("Cannot mix positional and keyword arguments")
        return sign * TimeDelta(**kwargs)._total_ns
    elif len(args) == 1:
        return sign * _duration_nanos(args[0])
    elif args:
        raise TypeError(f"Expected at most 1 argument, got {len(args)}")
    return 0


@final
class Datetime(_ImmutableBase):
    """A date and time of day in a fixed-offset timezone,
    denoting a single instant.

    Comparison and subtraction take the timezone into account:
    the same wall clock reading in two timezones is two different instants.

    Example
    -------
    >>> d = Datetime(2023, 12, 31, 23, 59, 59, 999, 999, 999)
    >>> d
    Datetime(2023-12-31 23:59:59.999.999.999 UTC)
    >>> d + nanoseconds(1)
    Datetime(2024-01-01 0:00:00.000.000.000 UTC)
    """

    __slots__ = ("_date", "_time")

    def __init__(
        self,
        year: int = 1970,
        month: int = 1,
        day: int = 1,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
        microsecond: int = 0,
        nanosecond: int = 0,
        *,
        timezone: Timezone | None = None,
    ) -> None:
        self._date = Date(year, month, day)
        self._time = Time(
            hour,
            minute,
            second,
            millisecond,
            microsecond,
            nanosecond,
            timezone=timezone,
        )

    @classmethod
    def combine(cls, date: Date, time: Time | None = None, /) -> Datetime:
        """Create from a date and a time.
        Without a time, it's midnight in the default timezone.

        Example
        -------
        >>> Datetime.combine(Date(2021, 1, 2), Time(3, 4, timezone=EST))
        Datetime(2021-01-02 3:04:00.000.000.000 UTC-05)
        """
        if not isinstance(date, Date):
            raise TypeError(f"Expected Date, got {type(date)!r}")
        if time is None:
            time = Time()
        elif not isinstance(time, Time):
            raise TypeError(f"Expected Time, got {type(time)!r}")
        return cls._from_parts(date, time)

    @classmethod
    def now(
        cls,
        timezone: Timezone | None = None,
        *,
        days: int = 0,
        hours: float = 0,
        minutes: float = 0,
        seconds: float = 0,
        milliseconds: float = 0,
        microseconds: float = 0,
        nanoseconds: int = 0,
        clock: Clock | None = None,
    ) -> Datetime:
        """The current date and time in the given (or default) timezone,
        optionally offset by the given amounts.

        The current time is read from ``clock`` if given,
        and otherwise from the process clock
        (see :func:`civiltime.patch_current_time`).

        Example
        -------
        >>> Datetime.now(EST)
        Datetime(2024-03-02 10:44:12.052.519.000 UTC-05)
        >>> Datetime.now(days=1)  # this time tomorrow
        Datetime(2024-03-03 15:44:12.052.641.000 UTC)
        """
        tz = _resolve_tz(timezone)
        date, time = (clock or _clock).now(tz)
        return cls._from_parts(date, time)._shift_nanos(
            TimeDelta(
                days=days,
                hours=hours,
                minutes=minutes,
                seconds=seconds,
                milliseconds=milliseconds,
                microseconds=microseconds,
                nanoseconds=nanoseconds,
            )._total_ns
        )

    @classmethod
    def from_ms(
        cls,
        timestamp: int,
        /,
        to_timezone: Timezone | None = None,
        from_timezone: Timezone = UTC,
    ) -> Datetime:
        """Create from a UNIX timestamp in milliseconds.

        The timestamp counts in the clock of ``from_timezone`` (UTC by default).
        The result is expressed in ``to_timezone`` (the default timezone
        if omitted). Inverse of :meth:`to_ms`.

        Example
        -------
        >>> Datetime.from_ms(1_700_000_000_000)
        Datetime(2023-11-14 22:13:20.000.000.000 UTC)
        >>> Datetime.from_ms(0, EST)
        Datetime(1969-12-31 19:00:00.000.000.000 UTC-05)
        """
        _check_int(timestamp, "timestamp")
        to_tz = _resolve_tz(to_timezone)
        from_tz = _resolve_tz(from_timezone)
        whole_days, ms_of_day = divmod(
            timestamp + to_tz.offset_difference(from_tz) * MS_PER_HOUR,
            MS_PER_DAY,
        )
        return cls._from_parts(
            Date._from_ordinal(EPOCH_ORDINAL + whole_days),
            Time._from_nanos_unchecked(ms_of_day * NS_PER_MS, to_tz),
        )

    def to_ms(self, timezone: Timezone = UTC) -> int:
        """Convert to a UNIX timestamp in milliseconds,
        counted in the clock of ``timezone`` (UTC by default).
        Sub-millisecond precision is truncated.

        Example
        -------
        >>> Datetime(1970, 1, 2).to_ms()
        86_400_000
        >>> Datetime(1970, 1, 1, 1, timezone=Timezone(1)).to_ms()
        0
        """
        return (
            (self._date._ordinal() - EPOCH_ORDINAL) * MS_PER_DAY
            + self._time._total_milliseconds()
            + _resolve_tz(timezone).offset_difference(self._time._tz)
            * MS_PER_HOUR
        )

    @classmethod
    def parse(
        cls,
        s: str,
        /,
        *components: Component,
        timezone: Timezone | None = None,
    ) -> Datetime:
        """Create from a string, given which component each number
        in the string represents.

        The first three components label the date, which is read from the
        first 10 characters. The rest label the time, read from what remains.

        Example
        -------
        >>> Datetime.parse(
        ...     "2023-01-05 13:45:10",
        ...     Component.YEAR, Component.MONTH, Component.DAY,
        ...     Component.HOUR, Component.MINUTE, Component.SECOND,
        ... )
        Datetime(2023-01-05 13:45:10.000.000.000 UTC)
        """
        if len(components) < 3:
            raise ParseError(
                "The first three components must label the date"
            )
        return cls._from_parts(
            Date.parse(s[:10], *components[:3]),
            Time.parse(s[10:], *components[3:], timezone=timezone),
        )

    @property
    def year(self) -> int:
        return self._date._year

    @property
    def month(self) -> int:
        return self._date._month

    @property
    def day(self) -> int:
        return self._date._day

    @property
    def hour(self) -> int:
        return self._time._hour

    @property
    def minute(self) -> int:
        return self._time._minute

    @property
    def second(self) -> int:
        return self._time._second

    @property
    def millisecond(self) -> int:
        return self._time.millisecond

    @property
    def microsecond(self) -> int:
        return self._time.microsecond

    @property
    def nanosecond(self) -> int:
        return self._time.nanosecond

    @property
    def timezone(self) -> Timezone:
        return self._time._tz

    def date(self) -> Date:
        """The date part of the datetime

        Example
        -------
        >>> Datetime(2021, 1, 2, 3, 4, 5).date()
        Date(2021-01-02)
        """
        return self._date

    def time(self) -> Time:
        """The time-of-day part of the datetime, including the timezone

        Example
        -------
        >>> Datetime(2021, 1, 2, 3, 4, 5, timezone=CST).time()
        Time(3:04:05.000.000.000 UTC-06)
        """
        return self._time

    def replace(self, **kwargs: Any) -> Datetime:
        """Create a new instance with the given fields replaced.
        Unlike :meth:`to_timezone`, replacing the timezone keeps the
        wall clock reading and thus changes the instant.

        Example
        -------
        >>> d = Datetime(2020, 8, 15, 23, 12)
        >>> d.replace(year=2021)
        Datetime(2021-08-15 23:12:00.000.000.000 UTC)
        """
        fields = {
            "year": self._date._year,
            "month": self._date._month,
            "day": self._date._day,
            **self._time._fields(),
        }
        for name, value in kwargs.items():
            if name not in fields:
                raise TypeError(f"Unknown field: {name!r}")
            fields[name] = value
        return Datetime(**fields)

    def to_timezone(self, tz: Timezone, /) -> Datetime:
        """The same instant, expressed in another timezone

        Example
        -------
        >>> Datetime(2023, 1, 1, 2, timezone=UTC).to_timezone(EST)
        Datetime(2022-12-31 21:00:00.000.000.000 UTC-05)
        """
        if not isinstance(tz, Timezone):
            raise TypeError(f"Expected Timezone, got {type(tz)!r}")
        return Datetime._from_parts(
            self._date, self._time._with_tz(tz)
        )._shift_nanos(tz.offset_difference(self._time._tz) * NS_PER_HOUR)

    def add(self, *args: Any, **kwargs: Any) -> Datetime:
        """Add a duration to this datetime.

        Accepts a single :class:`TimeDelta`, unit amount (e.g. ``hours(2)``),
        or :class:`Time` (as a duration since midnight),
        or keyword arguments (``days=1, hours=2``).

        Example
        -------
        >>> d = Datetime(2024, 2, 28, 22)
        >>> d.add(hours=3)
        Datetime(2024-02-29 1:00:00.000.000.000 UTC)
        >>> d.add(days(2))
        Datetime(2024-03-01 22:00:00.000.000.000 UTC)
        """
        return self._shift(1, args, kwargs)

    def subtract(self, *args: Any, **kwargs: Any) -> Datetime:
        """Inverse of :meth:`add`

        Example
        -------
        >>> Datetime(2024, 1, 1).subtract(nanoseconds=1)
        Datetime(2023-12-31 23:59:59.999.999.999 UTC)
        """
        return self._shift(-1, args, kwargs)

    def add_days(self, n: int, /) -> Datetime:
        """Move the date ``n`` days, keeping the time of day"""
        return Datetime._from_parts(self._date.add_days(n), self._time)

    def subtract_days(self, n: int, /) -> Datetime:
        """Inverse of :meth:`add_days`"""
        return Datetime._from_parts(self._date.subtract_days(n), self._time)

    def increment(self) -> Datetime:
        """The same time of day on the next day"""
        return Datetime._from_parts(self._date.increment(), self._time)

    def decrement(self) -> Datetime:
        """The same time of day on the previous day"""
        return Datetime._from_parts(self._date.decrement(), self._time)

    def exact_eq(self, other: Datetime, /) -> bool:
        """Compare objects by their values
        (instead of whether they represent the same instant).

        Note
        ----
        If ``a.exact_eq(b)`` is true, then
        ``a == b`` is also true, but the converse is not necessarily true.

        Examples
        --------
        >>> a = Datetime(2020, 8, 15, 12, timezone=Timezone(1))
        >>> b = Datetime(2020, 8, 15, 13, timezone=Timezone(2))
        >>> a == b
        True  # equivalent instants
        >>> a.exact_eq(b)
        False  # different values (hour and timezone)
        """
        if type(self) is not type(other):
            raise TypeError("Cannot compare different types")
        return self._date == other._date and self._time.exact_eq(other._time)

    def to_string(
        self,
        separator: str = " ",
        *,
        date_separator: str = "-",
        time_separator: str = ":",
    ) -> str:
        """Format as ``YYYY-MM-DD H:MM:SS.mmm.uuu.nnn``

        Example
        -------
        >>> Datetime(2000, 1, 2, 3, 4, 5, 6, 7, 8).to_string()
        '2000-01-02 3:04:05.006.007.008'
        >>> Datetime(2000, 1, 2, 3, 4, 5).to_string("T", date_separator="")
        '20000102T3:04:05.000.000.000'
        """
        return (
            self._date.to_string(date_separator)
            + separator
            + self._time.to_string(time_separator)
        )

    __str__ = to_string

    def __repr__(self) -> str:
        return f"Datetime({self} {self._time._tz})"

    def __add__(self, other: Duration) -> Datetime:
        """Add a duration. See :meth:`add`."""
        if not isinstance(other, (TimeDelta, _Unit, Time)):
            return NotImplemented
        return self._shift(1, (other,), {})

    @overload
    def __sub__(self, other: Datetime) -> TimeDelta: ...

    @overload
    def __sub__(self, other: Duration) -> Datetime: ...

    def __sub__(self, other: Datetime | Duration) -> TimeDelta | Datetime:
        """Subtract a duration, or calculate the time between two datetimes.

        The difference between datetimes takes their timezones into account.

        Example
        -------
        >>> Datetime(2023, 1, 1, 12, timezone=UTC) - Datetime(
        ...     2023, 1, 1, 12, timezone=Timezone(5)
        ... )
        TimeDelta(5:00:00.000.000.000)
        >>> Datetime(2023, 1, 1) - hours(1)
        Datetime(2022-12-31 23:00:00.000.000.000 UTC)
        """
        if isinstance(other, Datetime):
            return TimeDelta._from_nanos_unchecked(
                self._instant_nanos() - other._instant_nanos()
            )
        elif isinstance(other, (TimeDelta, _Unit, Time)):
            return self._shift(-1, (other,), {})
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        """Check if two datetimes represent the same instant

        Example
        -------
        >>> Datetime(2020, 8, 15, 23, timezone=UTC) == Datetime(
        ...     2020, 8, 15, 18, timezone=EST
        ... )
        True
        """
        if not isinstance(other, Datetime):
            return NotImplemented
        return self._instant_nanos() == other._instant_nanos()

    def __hash__(self) -> int:
        return hash(self._instant_nanos())

    def __lt__(self, other: Datetime) -> bool:
        if not isinstance(other, Datetime):
            return NotImplemented
        return self._instant_nanos() < other._instant_nanos()

    def __le__(self, other: Datetime) -> bool:
        if not isinstance(other, Datetime):
            return NotImplemented
        return self._instant_nanos() <= other._instant_nanos()

    def __gt__(self, other: Datetime) -> bool:
        if not isinstance(other, Datetime):
            return NotImplemented
        return self._instant_nanos() > other._instant_nanos()

    def __ge__(self, other: Datetime) -> bool:
        if not isinstance(other, Datetime):
            return NotImplemented
        return self._instant_nanos() >= other._instant_nanos()

    def _instant_nanos(self) -> int:
        # nanoseconds since the UNIX epoch, normalized to UTC
        return (
            (self._date._ordinal() - EPOCH_ORDINAL) * NS_PER_DAY
            + self._time._total_nanoseconds()
            - self._time._tz._offset * NS_PER_HOUR
        )

    def _shift(
        self, sign: int, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> Datetime:
        if len(args) == 1 and not kwargs and isinstance(args[0], Days):
            # calendar days only move the date
            return self.add_days(sign * args[0]._amount)
        return self._shift_nanos(_shift_nanos_from_args(sign, args, kwargs))

    def _shift_nanos(self, ns: int, /) -> Datetime:
        time, day_carry = self._time._shift_nanos(ns)
        return Datetime._from_parts(self._date.add_days(day_carry), time)

    @classmethod
    def _from_parts(cls, date: Date, time: Time, /) -> Datetime:
        self = _object_new(cls)
        self._date = date
        self._time = time
        return self

    @classmethod
    def _from_unix_nanos(cls, ns: int, tz: Timezone, /) -> Datetime:
        day_offset, ns_of_day = divmod(ns + tz._offset * NS_PER_HOUR, NS_PER_DAY)
        return cls._from_parts(
            Date._from_ordinal(EPOCH_ORDINAL + day_offset),
            Time._from_nanos_unchecked(ns_of_day, tz),
        )

    @no_type_check
    def __reduce__(self):
        return (
            _unpkl_datetime,
            (
                pack(
                    "<HBBBBBIb",
                    *self._date._key(),
                    *self._time._key(),
                    self._time._tz._offset,
                ),
            ),
        )


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_datetime(data: bytes) -> Datetime:
    year, month, day, hour, minute, second, nanos, offset = unpack(
        "<HBBBBBIb", data
    )
    return Datetime._from_parts(
        Date(year, month, day),
        Time._from_nanos_unchecked(
            (hour * 3_600 + minute * 60 + second) * NS_PER_SEC + nanos,
            Timezone(offset),
        ),
    )


class Clock(ABC):
    """A source of the current date and time.

    Pass one as the ``clock`` argument of :meth:`Datetime.now`
    (and friends) to control what "now" is, for example in tests.
    """

    __slots__ = ()

    @abstractmethod
    def now(self, timezone: Timezone, /) -> tuple[Date, Time]:
        """The current date and time of day in the given timezone"""


@final
class SystemClock(Clock):
    """The wall clock of the host"""

    __slots__ = ()

    def now(self, timezone: Timezone, /) -> tuple[Date, Time]:
        dt = Datetime._from_unix_nanos(time_ns(), timezone)
        return dt._date, dt._time

    def __repr__(self) -> str:
        return "SystemClock()"


@final
class FixedClock(Clock):
    """A clock with a fixed date, a fixed time of day, or both.

    Whichever part isn't fixed is read from the ``fallback`` clock
    (the system clock by default). A fixed time of day is reported
    in whatever timezone is asked for.

    Example
    -------
    >>> clock = FixedClock(date=Date(2022, 1, 1))
    >>> Datetime.now(clock=clock).date()
    Date(2022-01-01)
    """

    __slots__ = ("_date", "_time", "_fallback")

    def __init__(
        self,
        date: Date | None = None,
        time: Time | None = None,
        *,
        fallback: Clock | None = None,
    ) -> None:
        if date is not None and not isinstance(date, Date):
            raise TypeError(f"Expected Date, got {type(date)!r}")
        if time is not None and not isinstance(time, Time):
            raise TypeError(f"Expected Time, got {type(time)!r}")
        self._date = date
        self._time = time
        self._fallback = SystemClock() if fallback is None else fallback

    @property
    def date(self) -> Date | None:
        return self._date

    @property
    def time(self) -> Time | None:
        return self._time

    def now(self, timezone: Timezone, /) -> tuple[Date, Time]:
        if self._date is not None and self._time is not None:
            return self._date, self._time._with_tz(timezone)
        live_date, live_time = self._fallback.now(timezone)
        return (
            live_date if self._date is None else self._date,
            live_time if self._time is None else self._time._with_tz(timezone),
        )

    def __repr__(self) -> str:
        return f"FixedClock(date={self._date!r}, time={self._time!r})"


_clock: Clock = SystemClock()


def _get_clock() -> Clock:
    return _clock


def _set_clock(clock: Clock) -> None:
    global _clock
    if not isinstance(clock, Clock):
        raise TypeError(f"Expected Clock, got {type(clock)!r}")
    _clock = clock


class InvalidDate(ValueError):
    """A year, month, and day that don't form a valid date,
    or a date outside the supported range"""


class InvalidTime(ValueError):
    """A time of day with a field outside its range"""


class ParseError(ValueError):
    """A string that doesn't match the requested components"""


class UnrecognizedTimezoneName(ValueError):
    """A timezone name that doesn't match any known timezone"""

    @classmethod
    def for_name(cls, name: str) -> UnrecognizedTimezoneName:
        return cls(f"Unrecognized timezone name: {name!r}")


# A "-" directly before a token is its sign, not a separator
_find_tokens = re.compile(r"(?<![^\s\-:./,_T])-?[^\s\-:./,_T]+").findall


def _parse_labelled(
    s: str,
    components: tuple[Component, ...],
    allowed: frozenset[Component],
    kind: str,
) -> dict[str, int]:
    if not isinstance(s, str):
        raise TypeError(f"Expected str, got {type(s)!r}")
    for c in components:
        if c not in allowed:
            raise ParseError(f"{c!r} is not a {kind} component")
    if len(set(components)) != len(components):
        raise ParseError(f"Duplicate {kind} components: {components!r}")

    tokens = _find_tokens(s)
    if len(tokens) != len(components):
        raise ParseError(
            f"Expected {len(components)} numbers in {s!r}, found {len(tokens)}"
        )
    values = {}
    for token, component in zip(tokens, components):
        if not (token.isascii() and token.isdigit()):
            raise ParseError(f"Invalid {component.value}: {token!r}")
        values[component.value] = int(token)
    return values


def days(i: int, /) -> Days:
    """Create a :class:`Days` amount. ``days(1) == Days(1)``"""
    return Days(i)


def hours(i: int, /) -> Hours:
    """Create an :class:`Hours` amount. ``hours(1) == Hours(1)``"""
    return Hours(i)


def minutes(i: int, /) -> Minutes:
    """Create a :class:`Minutes` amount. ``minutes(1) == Minutes(1)``"""
    return Minutes(i)


def seconds(i: int, /) -> Seconds:
    """Create a :class:`Seconds` amount. ``seconds(1) == Seconds(1)``"""
    return Seconds(i)


def milliseconds(i: int, /) -> Milliseconds:
    """Create a :class:`Milliseconds` amount.
    ``milliseconds(1) == Milliseconds(1)``
    """
    return Milliseconds(i)


def microseconds(i: int, /) -> Microseconds:
    """Create a :class:`Microseconds` amount.
    ``microseconds(1) == Microseconds(1)``
    """
    return Microseconds(i)


def nanoseconds(i: int, /) -> Nanoseconds:
    """Create a :class:`Nanoseconds` amount.
    ``nanoseconds(1) == Nanoseconds(1)``
    """
    return Nanoseconds(i)


# We expose the public members in the root of the module.
# For clarity, we remove the "_pycivil" part from the names,
# since this is an implementation detail.
for name in __all__:
    member = locals()[name]
    if getattr(member, "__module__", None) == __name__:  # pragma: no branch
        member.__module__ = "civiltime"

# clear up loop variables so they don't leak into the namespace
del name
del member

for _unpkl in (_unpkl_date, _unpkl_time, _unpkl_tdelta, _unpkl_datetime):
    _unpkl.__module__ = "civiltime"


# disable further subclassing
final(_Unit)
final(Days)
final(Hours)
final(Minutes)
final(Seconds)
final(Milliseconds)
final(Microseconds)
final(Nanoseconds)
