"""Data models persisted by the application layer."""
from __future__ import annotations

import uuid
from datetime import datetime, time
from typing import ClassVar, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

from continuum.clock import ParseError, clockwise_distance_minutes, parse_time_of_day

AVAILABLE_THRESHOLDS = (90, 75, 50, 25, 10)
PREVIEW_LENGTH = 150

ScheduleItemKind = Literal["timeRange", "duration"]


class NotificationSettings(BaseModel):
    """Percent-remaining milestones the user wants to be notified about."""

    available_thresholds: ClassVar[tuple[int, ...]] = AVAILABLE_THRESHOLDS

    enabled: bool = False
    thresholds: Set[int] = Field(default_factory=set)

    @field_validator("thresholds")
    @classmethod
    def _thresholds_from_menu(cls, value: Set[int]) -> Set[int]:
        unknown = sorted(value - set(AVAILABLE_THRESHOLDS))
        if unknown:
            raise ValueError(f"unsupported thresholds: {unknown}")
        return value


class ScheduleItem(BaseModel):
    """Named block inside the waking day, either a clock range or a duration."""

    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str = Field(..., min_length=1)
    kind: ScheduleItemKind = Field(..., alias="type")
    start_time_str: Optional[str] = Field(None, alias="startTimeStr")
    end_time_str: Optional[str] = Field(None, alias="endTimeStr")
    duration_minutes: Optional[int] = Field(None, alias="durationMinutes", ge=0)
    order: int = 0

    @field_validator("start_time_str", "end_time_str")
    @classmethod
    def _strict_time(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                parse_time_of_day(value)
            except ParseError as exc:
                raise ValueError(str(exc)) from exc
        return value

    @property
    def total_minutes(self) -> int:
        if self.kind == "timeRange":
            if self.start_time_str is None or self.end_time_str is None:
                return 0
            return clockwise_distance_minutes(
                parse_time_of_day(self.start_time_str),
                parse_time_of_day(self.end_time_str),
            )
        return self.duration_minutes or 0

    def percentage_of_waking(self, waking_minutes: int) -> int:
        if waking_minutes <= 0:
            return 0
        return self.total_minutes * 100 // waking_minutes

    @property
    def display_time_info(self) -> str:
        if self.kind == "timeRange":
            if self.start_time_str is None or self.end_time_str is None:
                return ""
            return f"{self.start_time_str} - {self.end_time_str}"
        if self.duration_minutes is None:
            return ""
        hours, minutes = divmod(self.duration_minutes, 60)
        if hours and minutes:
            return f"{hours}h {minutes}m"
        if hours:
            return f"{hours}h"
        return f"{minutes}m"


class JournalEntry(BaseModel):
    """Freeform note attached to a moment of a day."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    date: datetime
    created_at: datetime
    updated_at: datetime
    content: str = ""

    @staticmethod
    def normalized_date(value: datetime) -> datetime:
        return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)

    @property
    def preview(self) -> str:
        trimmed = self.content.strip()
        if len(trimmed) > PREVIEW_LENGTH:
            return trimmed[:PREVIEW_LENGTH] + "..."
        return trimmed


__all__ = [
    "AVAILABLE_THRESHOLDS",
    "ScheduleItemKind",
    "NotificationSettings",
    "ScheduleItem",
    "JournalEntry",
]
