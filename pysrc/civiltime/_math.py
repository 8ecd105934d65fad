"""Calendar and time-of-day arithmetic helpers."""

NS_PER_US = 1_000
NS_PER_MS = 1_000_000
NS_PER_SEC = 1_000_000_000
NS_PER_MIN = 60_000_000_000
NS_PER_HOUR = 3_600_000_000_000
NS_PER_DAY = 86_400_000_000_000
MS_PER_HOUR = 3_600_000
MS_PER_DAY = 86_400_000

MIN_YEAR = 1
MAX_YEAR = 9999


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


# 1-indexed days per month
_MONTHDAYS = [0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]

# 1-indexed days in the year before the first of each month (non-leap)
_DAYS_BEFORE_MONTH = [0, 0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334]


def days_in_month(year: int, month: int) -> int:
    return _MONTHDAYS[month] + (month == 2 and is_leap(year))


def days_before_year(year: int) -> int:
    y = year - 1
    return y * 365 + y // 4 - y // 100 + y // 400


# Days in the 400, 100 and 4 year cycles of the Gregorian calendar
_DI400Y = days_before_year(401)
_DI100Y = days_before_year(101)
_DI4Y = days_before_year(5)


def ymd_to_ordinal(year: int, month: int, day: int) -> int:
    """Day number of a date, with 0001-01-01 as day 1"""
    return (
        days_before_year(year)
        + _DAYS_BEFORE_MONTH[month]
        + (month > 2 and is_leap(year))
        + day
    )


def ordinal_to_ymd(n: int) -> tuple[int, int, int]:
    """Inverse of :func:`ymd_to_ordinal`"""
    # Work from the nearest 400-year boundary, after which the pattern
    # of leap years repeats.
    n400, n = divmod(n - 1, _DI400Y)
    n100, n = divmod(n, _DI100Y)
    n4, n = divmod(n, _DI4Y)
    n1, n = divmod(n, 365)

    year = n400 * 400 + n100 * 100 + n4 * 4 + n1 + 1
    if n1 == 4 or n100 == 4:
        # the last day of a 4- or 400-year cycle
        return year - 1, 12, 31

    leapyear = n1 == 3 and (n4 != 24 or n100 == 3)
    # estimate the month: either exact or one too large
    month = (n + 50) >> 5
    preceding = _DAYS_BEFORE_MONTH[month] + (month > 2 and leapyear)
    if preceding > n:
        month -= 1
        preceding -= _MONTHDAYS[month] + (month == 2 and leapyear)
    return year, month, n - preceding + 1


EPOCH_ORDINAL = ymd_to_ordinal(1970, 1, 1)
MIN_ORDINAL = 1
MAX_ORDINAL = ymd_to_ordinal(MAX_YEAR, 12, 31)
