"""Ordered personal schedule and each item's share of the waking day."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from continuum.models import ScheduleItem
from continuum.progress import DayConfig, waking_minutes
from continuum.storage.preferences import PreferencesStore


@dataclass(slots=True)
class ScheduleShare:
    item: ScheduleItem
    percent_of_waking: int


class ScheduleService:
    def __init__(self, preferences: PreferencesStore):
        self._preferences = preferences
        self.items: List[ScheduleItem] = preferences.schedule_items()

    async def _save(self) -> None:
        await self._preferences.save_schedule_items(self.items)

    async def add_item(self, item: ScheduleItem) -> ScheduleItem:
        next_order = max((existing.order for existing in self.items), default=-1) + 1
        added = item.model_copy(update={"order": next_order})
        self.items.append(added)
        await self._save()
        return added

    async def update_item(self, item: ScheduleItem) -> bool:
        for index, existing in enumerate(self.items):
            if existing.id == item.id:
                self.items[index] = item
                await self._save()
                return True
        return False

    async def delete_item(self, item: ScheduleItem) -> None:
        self.items = [existing for existing in self.items if existing.id != item.id]
        await self._save()

    async def move_item(self, source: int, destination: int) -> None:
        """Move the item at ``source`` before the item currently at ``destination``.

        ``destination`` indexes the list before removal, so ``len(items)``
        moves to the end. Orders are renumbered from zero.
        """

        moved = self.items.pop(source)
        if destination > source:
            destination -= 1
        self.items.insert(min(destination, len(self.items)), moved)
        self.items = [
            existing.model_copy(update={"order": index})
            for index, existing in enumerate(self.items)
        ]
        await self._save()

    def shares(self, config: DayConfig) -> List[ScheduleShare]:
        wake = waking_minutes(config)
        return [ScheduleShare(item=item, percent_of_waking=item.percentage_of_waking(wake)) for item in self.items]


__all__ = ["ScheduleShare", "ScheduleService"]
