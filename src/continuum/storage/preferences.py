"""Shared key-value preferences read by the status view, widget and scheduler."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List

from pydantic import TypeAdapter, ValidationError

from continuum.clock import format_time_of_day
from continuum.models import NotificationSettings, ScheduleItem
from continuum.progress import DayConfig
from continuum.storage.file_store import FileStore

LOGGER = logging.getLogger(__name__)

START_TIME_KEY = "startTimeStr"
END_TIME_KEY = "endTimeStr"
ONBOARDING_KEY = "hasCompletedOnboarding"
NOTIFICATION_SETTINGS_KEY = "notificationSettings"
SCHEDULE_ITEMS_KEY = "scheduleItems"

_SCHEDULE_ITEMS = TypeAdapter(List[ScheduleItem])


class PreferencesStore:
    def __init__(self, file_store: FileStore, filename: str = "preferences.json"):
        self._file_store = file_store
        self._filename = filename
        self._lock = asyncio.Lock()
        self._values: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        raw = self._file_store.read_text(self._filename)
        if raw is None:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning("Preferences file %s is not valid JSON, using defaults", self._filename)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Preferences file %s is not an object, using defaults", self._filename)
            return {}
        return data

    async def _set(self, updates: Dict[str, Any]) -> None:
        async with self._lock:
            self._values.update(updates)
            await self._file_store.write_json(self._filename, self._values)

    def day_config(self) -> DayConfig:
        start = self._values.get(START_TIME_KEY)
        end = self._values.get(END_TIME_KEY)
        return DayConfig.from_strings(
            start if isinstance(start, str) else None,
            end if isinstance(end, str) else None,
        )

    async def set_day_config(self, config: DayConfig) -> None:
        await self._set(
            {
                START_TIME_KEY: format_time_of_day(config.start),
                END_TIME_KEY: format_time_of_day(config.end),
            }
        )

    def has_completed_onboarding(self) -> bool:
        return self._values.get(ONBOARDING_KEY) is True

    async def set_onboarding_completed(self, completed: bool = True) -> None:
        await self._set({ONBOARDING_KEY: completed})

    def notification_settings(self) -> NotificationSettings:
        blob = self._values.get(NOTIFICATION_SETTINGS_KEY)
        if not isinstance(blob, str):
            return NotificationSettings()
        try:
            return NotificationSettings.model_validate_json(blob)
        except ValidationError:
            LOGGER.warning("Stored notification settings are invalid, using defaults")
            return NotificationSettings()

    async def save_notification_settings(self, settings: NotificationSettings) -> None:
        await self._set({NOTIFICATION_SETTINGS_KEY: settings.model_dump_json()})

    def schedule_items(self) -> List[ScheduleItem]:
        blob = self._values.get(SCHEDULE_ITEMS_KEY)
        if not isinstance(blob, str):
            return []
        try:
            items = _SCHEDULE_ITEMS.validate_json(blob)
        except ValidationError:
            LOGGER.warning("Stored schedule items are invalid, using an empty schedule")
            return []
        return sorted(items, key=lambda item: item.order)

    async def save_schedule_items(self, items: List[ScheduleItem]) -> None:
        payload = _SCHEDULE_ITEMS.dump_json(items, by_alias=True).decode("utf-8")
        await self._set({SCHEDULE_ITEMS_KEY: payload})


__all__ = [
    "START_TIME_KEY",
    "END_TIME_KEY",
    "ONBOARDING_KEY",
    "NOTIFICATION_SETTINGS_KEY",
    "SCHEDULE_ITEMS_KEY",
    "PreferencesStore",
]
