"""Immutable value types used by the line aggregate."""

from dataclasses import dataclass
from datetime import time, timedelta
from decimal import Decimal
from typing import ClassVar, Self


@dataclass(frozen=True, order=True)
class Duration:
    """Elapsed travel time between two stations."""

    value: timedelta

    def __post_init__(self) -> None:
        """Reject negative durations."""
        if self.value < timedelta(0):
            msg = f"Duration must not be negative, got {self.value}"
            raise ValueError(msg)

    @classmethod
    def of_minutes(cls, minutes: float) -> Self:
        """
        Build a duration from a number of minutes.

        Raises:
            ValueError: If the minutes do not fit in a timedelta
        """
        try:
            return cls(timedelta(minutes=minutes))
        except OverflowError as e:
            msg = f"Duration of {minutes} minutes is out of range"
            raise ValueError(msg) from e

    @classmethod
    def from_time(cls, t: time) -> Self:
        """Read a time of day as the time elapsed since midnight."""
        return cls(timedelta(hours=t.hour, minutes=t.minute, seconds=t.second, microseconds=t.microsecond))

    @property
    def minutes(self) -> float:
        """Duration expressed in minutes."""
        return self.value.total_seconds() / 60

    def is_positive(self) -> bool:
        """Check whether the duration is strictly greater than zero."""
        return self.value > timedelta(0)

    def __add__(self, other: "Duration") -> "Duration":
        """Sum two durations."""
        return Duration(self.value + other.value)

    def __sub__(self, other: "Duration") -> "Duration":
        """Subtract a duration (raises ValueError if the result is negative)."""
        return Duration(self.value - other.value)


@dataclass(frozen=True, order=True)
class Distance:
    """
    Travel distance between two stations.

    Backed by Decimal so that splitting and merging sections is exact:
    Distance(2.0) - Distance(0.8) == Distance(1.2). Precision is capped at
    DECIMAL_PLACES (metres), the scale of the sections table, so any sum or
    difference of distances is stored without rounding.
    """

    DECIMAL_PLACES: ClassVar[int] = 3

    value: Decimal

    def __init__(self, value: Decimal | float | int | str) -> None:
        """
        Normalize the wrapped value to Decimal (floats go through str).

        Raises:
            ValueError: If the value is not finite or has more than DECIMAL_PLACES decimals
        """
        if isinstance(value, float):
            value = str(value)
        value = Decimal(value)
        if not value.is_finite():
            msg = f"Distance must be a finite number, got {value}"
            raise ValueError(msg)
        exponent = value.normalize().as_tuple().exponent
        if isinstance(exponent, int) and -exponent > self.DECIMAL_PLACES:
            msg = f"Distance supports at most {self.DECIMAL_PLACES} decimal places, got {value}"
            raise ValueError(msg)
        object.__setattr__(self, "value", value)

    def is_positive(self) -> bool:
        """Check whether the distance is strictly greater than zero."""
        return self.value > 0

    def __add__(self, other: "Distance") -> "Distance":
        """Sum two distances."""
        return Distance(self.value + other.value)

    def __sub__(self, other: "Distance") -> "Distance":
        """Subtract two distances (may yield a non-positive distance)."""
        return Distance(self.value - other.value)

    def __float__(self) -> float:
        """Distance as a float, for display."""
        return float(self.value)


@dataclass(frozen=True)
class TimeTable:
    """Operating hours of a line. 24:00 is represented by time.max."""

    start: time
    end: time

    def __post_init__(self) -> None:
        """Validate that the line does not close before it opens."""
        if self.start > self.end:
            msg = f"TimeTable start {self.start} must not be after end {self.end}"
            raise ValueError(msg)

    @classmethod
    def all_day(cls) -> Self:
        """Operating hours covering the whole day (00:00-24:00)."""
        return cls(time.min, time.max)
