from __future__ import annotations

from ._pycivil import *
from ._pycivil import (  # for the docs
    __all__,
    _get_clock,
    _set_clock,
    _set_default_tz,
    _unpkl_date,
    _unpkl_datetime,
    _unpkl_tdelta,
    _unpkl_time,
)
from ._range import DatetimeRange, Range

import logging as _logging
import os as _os
from contextlib import contextmanager as _contextmanager
from dataclasses import dataclass as _dataclass
from typing import Iterator as _Iterator

from ._pycivil import __version__
from ._tz import reset_local_tz as _reset_local_tz

_logger = _logging.getLogger(__name__)


@_dataclass
class _TimePatch:
    _clock: FixedClock

    def set(self, date: Date | None = None, time: Time | None = None) -> None:
        """Change the patched date and/or time of day"""
        self._clock = new = FixedClock(
            self._clock.date if date is None else date,
            self._clock.time if time is None else time,
        )
        _set_clock(new)


@_contextmanager
def patch_current_time(
    date: Date | None = None, time: Time | None = None
) -> _Iterator[_TimePatch]:
    """Patch the current date, time of day, or both (for testing purposes).
    Behaves as a context manager or decorator, with similar semantics to
    ``unittest.mock.patch``.

    Whichever part isn't patched keeps following the system clock.

    Important
    ---------

    * This function should be used only for testing purposes. It is not
      thread-safe or part of the stable API.
    * This function only affects civiltime's ``now`` functions. It does not
      affect the standard library's time functions or any other libraries.
      Use the ``time_machine`` package if you also want to patch other libraries.

    Example
    -------

    >>> from civiltime import Date, Datetime, Time, patch_current_time
    >>> with patch_current_time(Date(1980, 3, 2), Time(2)) as p:
    ...     assert Datetime.now() == Datetime(1980, 3, 2, 2)
    ...     p.set(time=Time(4))
    ...     assert Time.now() == Time(4)
    ...
    >>> assert Date.today() != Date(1980, 3, 2)
    """
    previous = _get_clock()
    clock = FixedClock(date, time)
    _logger.debug("patching current time with %r", clock)
    _set_clock(clock)
    try:
        yield _TimePatch(clock)
    finally:
        _set_clock(previous)
        _logger.debug("restored clock %r", previous)


DEFAULT_TZ_ENV = "CIVILTIME_DEFAULT_TZ"
"""The environment variable read by :func:`reset_default_timezone`"""


def reset_default_timezone(target: Timezone | str | None = None, /) -> None:
    """Reset or set the timezone used when a ``timezone`` argument is omitted.

    The target may be a :class:`Timezone`, or a name accepted by
    :meth:`Timezone.from_name`. The name ``"local"`` stands for the
    timezone of the host.
    Without a target, the ``CIVILTIME_DEFAULT_TZ`` environment variable
    is read. If it's unset as well, the default is UTC.

    Note
    ----
    Existing values keep the timezone they were created with.
    """
    if target is None:
        target = _os.environ.get(DEFAULT_TZ_ENV) or UTC
    if isinstance(target, str):
        tz = (
            Timezone.local()
            if target.strip().lower() == "local"
            else Timezone.from_name(target)
        )
    elif isinstance(target, Timezone):
        tz = target
    else:
        raise TypeError(
            f"Expected Timezone, str, or None, got {type(target)!r}"
        )
    _set_default_tz(tz)
    _logger.debug("default timezone set to %s", tz)


def reset_local_timezone() -> None:
    """Forget the cached local timezone, so it's read from the host again
    on next use. Call this after changing the ``TZ`` environment variable.

    Note
    ----
    This doesn't affect the default timezone. If it was set to ``"local"``,
    call :func:`reset_default_timezone` as well.
    """
    _reset_local_tz()


def __getattr__(name: str) -> Timezone:
    # LOCAL is resolved lazily, so importing the package never reads the host
    if name == "LOCAL":
        return Timezone.local()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    *__all__,
    "Range",
    "DatetimeRange",
    "patch_current_time",
    "reset_default_timezone",
    "reset_local_timezone",
]

reset_default_timezone()  # read the configured default once at startup
