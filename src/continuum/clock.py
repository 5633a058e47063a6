"""Wall-clock arithmetic on ``HH:MM`` times of day."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

LOGGER = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")


class ParseError(ValueError):
    """Raised when a string is not a valid 24-hour ``HH:MM`` time."""


@dataclass(frozen=True, slots=True)
class TimeOfDay:
    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ParseError(f"hour out of range: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ParseError(f"minute out of range: {self.minute}")

    @property
    def minutes_since_midnight(self) -> int:
        return self.hour * 60 + self.minute

    @classmethod
    def from_minutes(cls, minutes: int) -> "TimeOfDay":
        """Build a time of day from minutes since midnight, modulo 24h."""

        hour, minute = divmod(minutes % MINUTES_PER_DAY, 60)
        return cls(hour=hour, minute=minute)

    def __str__(self) -> str:
        return format_time_of_day(self)


ClockValue = Union[TimeOfDay, datetime]


def parse_time_of_day(value: str) -> TimeOfDay:
    """Parse a strict ``HH:MM`` string into a :class:`TimeOfDay`."""

    match = TIME_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise ParseError(f"expected HH:MM, got {value!r}")
    return TimeOfDay(hour=int(match.group(1)), minute=int(match.group(2)))


def parse_time_of_day_or_default(value: Optional[str], default: str) -> TimeOfDay:
    """Parse ``value`` and fall back to ``default`` when it is missing or malformed."""

    if value is not None:
        try:
            return parse_time_of_day(value)
        except ParseError:
            LOGGER.warning("Malformed time %r, falling back to %s", value, default)
    return parse_time_of_day(default)


def format_time_of_day(value: TimeOfDay) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def time_of_day_from_instant(instant: datetime) -> TimeOfDay:
    """Project an instant onto its wall-clock time, discarding date and seconds."""

    return TimeOfDay(hour=instant.hour, minute=instant.minute)


def _as_time_of_day(value: ClockValue) -> TimeOfDay:
    if isinstance(value, datetime):
        return time_of_day_from_instant(value)
    return value


def clockwise_distance_minutes(start: ClockValue, end: ClockValue) -> int:
    """Minutes travelled forward on the clock face from ``start`` to ``end``.

    Instants are projected to their time of day first, so the result is
    always in ``[0, 1440)`` and never spans calendar days.
    """

    start_minutes = _as_time_of_day(start).minutes_since_midnight
    end_minutes = _as_time_of_day(end).minutes_since_midnight
    return (end_minutes - start_minutes) % MINUTES_PER_DAY


def _on_same_day(time_of_day: TimeOfDay, base: datetime) -> datetime:
    return base.replace(
        hour=time_of_day.hour, minute=time_of_day.minute, second=0, microsecond=0
    )


def resolve_next_occurrence(time_of_day: TimeOfDay, after: datetime) -> datetime:
    """Return the next instant the clock reads ``time_of_day``.

    A time of day equal to ``after``'s own (to the minute) resolves to today.
    """

    candidate = _on_same_day(time_of_day, after)
    if time_of_day.minutes_since_midnight >= time_of_day_from_instant(after).minutes_since_midnight:
        return candidate
    return candidate + timedelta(days=1)


def resolve_previous_occurrence(time_of_day: TimeOfDay, before: datetime) -> datetime:
    """Return the last instant the clock read ``time_of_day``, yesterday on a tie."""

    candidate = _on_same_day(time_of_day, before)
    if time_of_day.minutes_since_midnight < time_of_day_from_instant(before).minutes_since_midnight:
        return candidate
    return candidate - timedelta(days=1)


__all__ = [
    "MINUTES_PER_DAY",
    "ParseError",
    "TimeOfDay",
    "ClockValue",
    "parse_time_of_day",
    "parse_time_of_day_or_default",
    "format_time_of_day",
    "time_of_day_from_instant",
    "clockwise_distance_minutes",
    "resolve_next_occurrence",
    "resolve_previous_occurrence",
]
