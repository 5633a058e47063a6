from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date, datetime, time, timedelta, tzinfo
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from continuum.models import JournalEntry
from continuum.storage.file_store import FileStore

LOGGER = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(List[JournalEntry])


class JournalStore:
    """Journal entries kept in a single JSON document, queryable by date range."""

    def __init__(self, file_store: FileStore, filename: str = "journal.json"):
        self._file_store = file_store
        self._filename = filename
        self._lock = asyncio.Lock()
        self._entries: List[JournalEntry] = self._load()

    def _load(self) -> List[JournalEntry]:
        raw = self._file_store.read_text(self._filename)
        if raw is None:
            return []
        try:
            return _ENTRIES.validate_json(raw)
        except ValidationError:
            LOGGER.warning("Journal file %s could not be decoded, starting empty", self._filename)
            return []

    async def _commit(self, entries: List[JournalEntry]) -> None:
        """Write ``entries`` and only then make them the in-memory state."""

        payload = _ENTRIES.dump_json(entries, indent=2).decode("utf-8")
        await self._file_store.write_text(self._filename, payload)
        self._entries = entries

    def _find(self, entry_id: uuid.UUID) -> JournalEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(str(entry_id))

    async def add(self, when: datetime, content: str = "", *, now: Optional[datetime] = None) -> JournalEntry:
        stamp = now or datetime.now(when.tzinfo)
        entry = JournalEntry(date=when, created_at=stamp, updated_at=stamp, content=content)
        async with self._lock:
            await self._commit([*self._entries, entry])
        return entry

    async def update(self, entry_id: uuid.UUID, content: str, *, now: Optional[datetime] = None) -> JournalEntry:
        async with self._lock:
            current = self._find(entry_id)
            updated = current.model_copy(
                update={"content": content, "updated_at": now or datetime.now(current.updated_at.tzinfo)}
            )
            await self._commit([updated if entry is current else entry for entry in self._entries])
        return updated

    async def delete(self, entry_id: uuid.UUID) -> None:
        async with self._lock:
            removed = self._find(entry_id)
            await self._commit([entry for entry in self._entries if entry is not removed])

    def entries_between(self, start: datetime, end: datetime) -> List[JournalEntry]:
        """Entries with ``start <= date < end``, oldest first."""

        matching = [entry for entry in self._entries if start <= entry.date < end]
        return sorted(matching, key=lambda entry: entry.date)

    def entries_for_day(self, day: date, tz: Optional[tzinfo] = None) -> List[JournalEntry]:
        start = datetime.combine(day, time.min, tzinfo=tz)
        return self.entries_between(start, start + timedelta(days=1))

    def today_content(self, now: datetime) -> str:
        start = JournalEntry.normalized_date(now)
        entries = self.entries_between(start, start + timedelta(days=1))
        return entries[0].content if entries else ""


__all__ = ["JournalStore"]
