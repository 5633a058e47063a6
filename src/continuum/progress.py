"""Day/night progress computed from the configured waking-day boundaries.

Every consumer (status view, widget timeline, notification scheduler) goes
through :func:`classify`, so the percentage shown anywhere is the same. All
functions are pure: configuration is passed in, never looked up.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from itertools import islice
from typing import Iterator, List, Optional

from continuum.clock import (
    MINUTES_PER_DAY,
    ClockValue,
    TimeOfDay,
    clockwise_distance_minutes,
    format_time_of_day,
    parse_time_of_day_or_default,
    resolve_next_occurrence,
)
from continuum.models import NotificationSettings

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "23:00"


class PeriodKind(str, Enum):
    DAY = "day"
    NIGHT = "night"


@dataclass(frozen=True, slots=True)
class DayConfig:
    start: TimeOfDay
    end: TimeOfDay

    @classmethod
    def from_strings(cls, start: Optional[str], end: Optional[str]) -> "DayConfig":
        """Build a config from stored strings, substituting defaults for bad values."""

        return cls(
            start=parse_time_of_day_or_default(start, DEFAULT_START_TIME),
            end=parse_time_of_day_or_default(end, DEFAULT_END_TIME),
        )

    @classmethod
    def default(cls) -> "DayConfig":
        return cls.from_strings(DEFAULT_START_TIME, DEFAULT_END_TIME)

    def as_strings(self) -> tuple[str, str]:
        return format_time_of_day(self.start), format_time_of_day(self.end)


@dataclass(frozen=True, slots=True)
class ProgressSample:
    instant: Optional[datetime]
    period_kind: PeriodKind
    percent_complete: int

    @property
    def percent_remaining(self) -> int:
        return 100 - self.percent_complete


@dataclass(frozen=True, slots=True)
class MilestoneInstant:
    threshold: int
    instant: datetime


def waking_minutes(config: DayConfig) -> int:
    return clockwise_distance_minutes(config.start, config.end)


def sleeping_minutes(config: DayConfig) -> int:
    return MINUTES_PER_DAY - waking_minutes(config)


def sleep_to_wake_ratio(config: DayConfig) -> Optional[float]:
    wake = waking_minutes(config)
    if wake == 0:
        return None
    return sleeping_minutes(config) / wake


def classify(config: DayConfig, instant: ClockValue) -> ProgressSample:
    """Return the period ``instant`` falls in and how much of it has elapsed.

    A zero-length waking day is reported as the start of a day. The instant
    at which the day ends still counts as day, at 100%.
    """

    stamp = instant if isinstance(instant, datetime) else None
    wake = waking_minutes(config)
    if wake == 0:
        return ProgressSample(stamp, PeriodKind.DAY, 0)

    since_start = clockwise_distance_minutes(config.start, instant)
    if since_start <= wake:
        return ProgressSample(stamp, PeriodKind.DAY, since_start * 100 // wake)

    since_end = clockwise_distance_minutes(config.end, instant)
    sleep = MINUTES_PER_DAY - wake
    return ProgressSample(stamp, PeriodKind.NIGHT, since_end * 100 // sleep)


def percent_remaining(config: DayConfig, instant: ClockValue) -> int:
    """Percentage of the waking day still ahead, 0 outside of it."""

    sample = classify(config, instant)
    if sample.period_kind is PeriodKind.DAY and waking_minutes(config) > 0:
        return sample.percent_remaining
    return 0


def period_end_instant(config: DayConfig, instant: datetime) -> datetime:
    """Absolute instant at which the current day or night period ends."""

    if classify(config, instant).period_kind is PeriodKind.DAY:
        return resolve_next_occurrence(config.end, instant)
    return resolve_next_occurrence(config.start, instant)


def forecast_step_minutes(horizon_minutes: int, max_samples: int) -> int:
    """Step that lets ``max_samples`` samples reach the end of the horizon."""

    if max_samples < 2:
        return 1
    return max(1, math.ceil(horizon_minutes / (max_samples - 1)))


def add_elapsed_minutes(instant: datetime, minutes: int) -> datetime:
    """Add ``minutes`` of elapsed time rather than wall-clock time."""

    if instant.tzinfo is None:
        return instant + timedelta(minutes=minutes)
    shifted = instant.astimezone(timezone.utc) + timedelta(minutes=minutes)
    return shifted.astimezone(instant.tzinfo)


def generate_forecast(
    config: DayConfig,
    start: datetime,
    horizon_minutes: int,
    max_samples: int,
) -> Iterator[ProgressSample]:
    """Yield evenly spaced samples over ``[start, start + horizon_minutes]``.

    At most ``max_samples`` samples are produced whatever the horizon; the
    consumer's memory ceiling depends on it.
    """

    if max_samples < 1 or horizon_minutes < 0:
        return
    step = forecast_step_minutes(horizon_minutes, max_samples)
    base = start.replace(second=0, microsecond=0)
    offsets = range(0, horizon_minutes + 1, step)
    for offset in islice(offsets, max_samples):
        yield classify(config, add_elapsed_minutes(base, offset))


def next_notification_instants(
    config: DayConfig,
    settings: NotificationSettings,
    start: datetime,
) -> List[MilestoneInstant]:
    """Fire instants for each enabled percent-remaining milestone after ``start``.

    Milestones already passed today are dropped; the next reschedule picks
    them up for the following day.
    """

    wake = waking_minutes(config)
    if not settings.enabled or not settings.thresholds or wake == 0:
        return []

    day_start = resolve_next_occurrence(config.start, start)
    milestones: List[MilestoneInstant] = []
    for threshold in sorted(settings.thresholds, reverse=True):
        minutes_from_start = wake * (100 - threshold) // 100
        instant = add_elapsed_minutes(day_start, minutes_from_start)
        if instant > start:
            milestones.append(MilestoneInstant(threshold=threshold, instant=instant))
    return milestones


__all__ = [
    "DEFAULT_START_TIME",
    "DEFAULT_END_TIME",
    "PeriodKind",
    "DayConfig",
    "ProgressSample",
    "MilestoneInstant",
    "waking_minutes",
    "sleeping_minutes",
    "sleep_to_wake_ratio",
    "classify",
    "percent_remaining",
    "period_end_instant",
    "forecast_step_minutes",
    "add_elapsed_minutes",
    "generate_forecast",
    "next_notification_instants",
]
