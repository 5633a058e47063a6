import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from continuum.models import JournalEntry
from continuum.storage.file_store import FileStore
from continuum.storage.journal import JournalStore

UTC = timezone.utc


def _at(day: int, hour: int) -> datetime:
    return datetime(2024, 5, day, hour, 0, tzinfo=UTC)


def test_preview_trims_and_truncates():
    stamp = _at(1, 9)
    entry = JournalEntry(date=stamp, created_at=stamp, updated_at=stamp, content="  " + "x" * 200 + "\n")
    assert entry.preview == "x" * 150 + "..."
    short = entry.model_copy(update={"content": "  hello  "})
    assert short.preview == "hello"


def test_normalized_date_is_start_of_day():
    assert JournalEntry.normalized_date(_at(3, 17)) == datetime(2024, 5, 3, tzinfo=UTC)


@pytest.mark.anyio
async def test_entries_between_is_half_open(tmp_path):
    store = JournalStore(FileStore(tmp_path))
    await store.add(_at(2, 8), "second", now=_at(2, 8))
    await store.add(_at(1, 23), "first", now=_at(1, 23))
    await store.add(_at(3, 0), "third", now=_at(3, 0))

    entries = store.entries_between(_at(1, 0), _at(3, 0))
    assert [entry.content for entry in entries] == ["first", "second"]
    assert [entry.content for entry in store.entries_for_day(date(2024, 5, 3), UTC)] == ["third"]
    assert store.today_content(_at(2, 20)) == "second"
    assert store.today_content(_at(4, 20)) == ""


@pytest.mark.anyio
async def test_update_and_delete_persist(tmp_path):
    store = JournalStore(FileStore(tmp_path))
    entry = await store.add(_at(1, 9), "draft", now=_at(1, 9))
    updated = await store.update(entry.id, "final", now=_at(1, 9) + timedelta(hours=2))
    assert updated.updated_at == _at(1, 11)
    assert updated.created_at == _at(1, 9)

    reloaded = JournalStore(FileStore(tmp_path))
    assert reloaded.today_content(_at(1, 12)) == "final"

    await reloaded.delete(entry.id)
    assert JournalStore(FileStore(tmp_path)).entries_for_day(date(2024, 5, 1), UTC) == []

    with pytest.raises(KeyError):
        await reloaded.delete(uuid.uuid4())


def test_corrupt_journal_starts_empty(tmp_path):
    (tmp_path / "journal.json").write_text("[{\"content\": 1}]", encoding="utf-8")
    store = JournalStore(FileStore(tmp_path))
    assert store.entries_between(_at(1, 0), _at(30, 0)) == []


@pytest.mark.anyio
async def test_failed_write_leaves_entries_untouched(tmp_path, monkeypatch):
    file_store = FileStore(tmp_path)
    store = JournalStore(file_store)
    entry = await store.add(_at(1, 9), "kept", now=_at(1, 9))

    async def _disk_full(relative_path, content):
        raise OSError("No space left on device")

    monkeypatch.setattr(file_store, "write_text", _disk_full)

    with pytest.raises(OSError):
        await store.update(entry.id, "lost", now=_at(1, 10))
    with pytest.raises(OSError):
        await store.add(_at(1, 11), "never saved", now=_at(1, 11))
    with pytest.raises(OSError):
        await store.delete(entry.id)

    remaining = store.entries_for_day(date(2024, 5, 1), UTC)
    assert [(item.content, item.updated_at) for item in remaining] == [("kept", _at(1, 9))]
