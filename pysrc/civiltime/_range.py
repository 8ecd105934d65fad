"""Half-open ranges between two comparable values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ._pycivil import Datetime

T = TypeVar("T")


@dataclass(frozen=True)
class Range(Generic[T]):
    """The values from ``start`` (inclusive) up to ``end`` (exclusive)

    Example
    -------
    >>> r = Range(Date(2024, 1, 1), Date(2024, 2, 1))
    >>> Date(2024, 1, 31) in r
    True
    >>> Date(2024, 2, 1) in r
    False
    >>> r.duration()
    Days(31)
    """

    start: T
    end: T

    def __post_init__(self) -> None:
        if self.end < self.start:  # type: ignore[operator]
            raise ValueError(
                f"Range requires start <= end, got {self.start} and {self.end}"
            )

    def __contains__(self, value: object) -> bool:
        return self.start <= value < self.end  # type: ignore[operator]

    def is_empty(self) -> bool:
        return not self.start < self.end  # type: ignore[operator]

    def overlaps(self, other: Range[T], /) -> bool:
        """Whether the two ranges share at least one value.
        Ranges that only touch at an end don't overlap."""
        return max(self.start, other.start) < min(self.end, other.end)  # type: ignore[operator]

    def duration(self) -> Any:
        """The difference between ``end`` and ``start``"""
        return self.end - self.start  # type: ignore[operator]


@dataclass(frozen=True)
class DatetimeRange(Range[Datetime]):
    """A range of instants

    Example
    -------
    >>> r = DatetimeRange(Datetime(2024, 1, 1), Datetime(2024, 1, 1, 6))
    >>> Datetime(2024, 1, 1, 3, timezone=EST) in r
    False
    >>> r.duration()
    TimeDelta(6:00:00.000.000.000)
    """
