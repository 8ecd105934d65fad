"""Resolving timezone names and caching the local timezone."""

from __future__ import annotations

import logging
import re
from threading import Lock
from typing import TYPE_CHECKING

from . import system

if TYPE_CHECKING:
    from .._pycivil import Timezone

__all__ = [
    "lookup_offset",
    "get_local_tz",
    "reset_local_tz",
]

logger = logging.getLogger(__name__)

# Names reported by the various platforms, mapped to whole-hour UTC offsets.
# Daylight names map to the standard offset: daylight saving is not modelled.
_NAMED_OFFSETS = {
    # UTC
    "UTC": 0,
    "UCT": 0,
    "GMT": 0,
    "Z": 0,
    "Coordinated Universal Time": 0,
    "Etc/UTC": 0,
    "Etc/UCT": 0,
    "Etc/GMT": 0,
    "Etc/Universal": 0,
    # Eastern
    "EST": -5,
    "EDT": -5,
    "Eastern Standard Time": -5,
    "Eastern Daylight Time": -5,
    "America/New_York": -5,
    "US/Eastern": -5,
    # Central
    "CST": -6,
    "CDT": -6,
    "Central Standard Time": -6,
    "Central Daylight Time": -6,
    "America/Chicago": -6,
    "US/Central": -6,
    # Mountain
    "MST": -7,
    "MDT": -7,
    "Mountain Standard Time": -7,
    "Mountain Daylight Time": -7,
    "America/Denver": -7,
    "America/Phoenix": -7,
    "US/Mountain": -7,
    # Pacific
    "PST": -8,
    "PDT": -8,
    "Pacific Standard Time": -8,
    "Pacific Daylight Time": -8,
    "America/Los_Angeles": -8,
    "US/Pacific": -8,
}

_match_signed_offset = re.compile(r"[+-]\d{1,2}", re.ASCII).fullmatch


def lookup_offset(name: str) -> int | None:
    """Find the UTC offset (in hours) for a zone name or a signed
    offset string like ``+5`` or ``-08``. Returns None if not recognized."""
    name = name.strip()
    if name.startswith(":"):
        name = name[1:]  # strip leading colon, as in the TZ variable
    try:
        return _NAMED_OFFSETS[name]
    except KeyError:
        pass
    if _match_signed_offset(name) and -24 < (offset := int(name)) < 24:
        return offset
    return None


_CACHED_LOCAL_TZ: Timezone | None = None
_local_tz_lock = Lock()


def get_local_tz() -> Timezone:
    global _CACHED_LOCAL_TZ
    # Double-checked, so the host is only read once even if several
    # threads ask for the local zone at the same time.
    if _CACHED_LOCAL_TZ is None:
        with _local_tz_lock:
            if _CACHED_LOCAL_TZ is None:
                _CACHED_LOCAL_TZ = _read_local_tz()
    return _CACHED_LOCAL_TZ


def reset_local_tz() -> None:
    """Forget the cached local timezone, so it is read again on next use."""
    global _CACHED_LOCAL_TZ
    with _local_tz_lock:
        _CACHED_LOCAL_TZ = None


def _read_local_tz() -> Timezone:
    from .._pycivil import Timezone, UnrecognizedTimezoneName

    name = system.get_tz_name()
    if (offset := lookup_offset(name)) is None:
        raise UnrecognizedTimezoneName.for_name(name)
    logger.debug("resolved local timezone %r to UTC offset %+d", name, offset)
    return Timezone(offset)
