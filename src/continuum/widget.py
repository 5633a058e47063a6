"""Timeline entries for the home-screen and lock-screen widget."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Literal, Optional

from continuum.config import get_settings
from continuum.progress import DayConfig, PeriodKind, classify, generate_forecast

RefreshPolicy = Literal["at_end"]


@dataclass(frozen=True, slots=True)
class TimelineEntry:
    date: datetime
    progress: int
    mode: PeriodKind

    @property
    def remaining(self) -> int:
        return 100 - self.progress

    @property
    def caption(self) -> str:
        return f"{self.progress}% through the {self.mode.value}"


@dataclass(frozen=True, slots=True)
class Timeline:
    entries: List[TimelineEntry]
    policy: RefreshPolicy = "at_end"


def placeholder(now: datetime) -> TimelineEntry:
    return TimelineEntry(date=now, progress=20, mode=PeriodKind.DAY)


def snapshot(config: DayConfig, now: datetime) -> TimelineEntry:
    sample = classify(config, now)
    return TimelineEntry(date=now, progress=sample.percent_complete, mode=sample.period_kind)


def build_timeline(
    config: DayConfig,
    now: datetime,
    horizon_minutes: Optional[int] = None,
    max_samples: Optional[int] = None,
) -> Timeline:
    """Build a bounded timeline starting at ``now``, refreshed once it runs out."""

    settings = get_settings()
    horizon = settings.widget_horizon_minutes if horizon_minutes is None else horizon_minutes
    limit = settings.widget_max_samples if max_samples is None else max_samples
    entries = [
        TimelineEntry(date=sample.instant, progress=sample.percent_complete, mode=sample.period_kind)
        for sample in generate_forecast(config, now, horizon, limit)
    ]
    return Timeline(entries=entries)


__all__ = ["RefreshPolicy", "TimelineEntry", "Timeline", "placeholder", "snapshot", "build_timeline"]
