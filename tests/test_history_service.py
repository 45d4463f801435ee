"""GenerationHistoryService tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from modules.services.history_service import (
    HISTORY_STORAGE_KEY,
    GenerationHistoryService,
    HistoryEntry,
)
from modules.services.storage_service import StorageService


def fixed_clock() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def storage(tmp_path) -> StorageService:
    return StorageService(tmp_path / "storage.json")


def make_entry(history: GenerationHistoryService, label: str) -> HistoryEntry:
    return history.create_entry(
        prompt=label,
        aspect_ratio="1:1",
        image_size="2K",
        image_url=f"data:image/jpeg;base64,{label}",
    )


def test_load_without_stored_history(storage):
    history = GenerationHistoryService(storage)

    assert history.load() == []
    assert len(history) == 0


def test_record_prepends_and_persists(storage):
    history = GenerationHistoryService(storage)
    first = make_entry(history, "first")
    history.record(first)
    second = make_entry(history, "second")

    entries = history.record(second)

    assert [entry.prompt for entry in entries] == ["second", "first"]
    stored = json.loads(storage.get_item(HISTORY_STORAGE_KEY))
    assert [item["prompt"] for item in stored] == ["second", "first"]
    assert stored[0] == {
        "id": second.id,
        "prompt": "second",
        "aspect_ratio": "1:1",
        "image_size": "2K",
        "image_url": "data:image/jpeg;base64,second",
    }


def test_record_keeps_twelve_most_recent(storage):
    history = GenerationHistoryService(storage)
    for index in range(1, 13):
        history.record(make_entry(history, f"h{index}"))
    assert len(history) == 12

    entries = history.record(make_entry(history, "h13"))

    assert len(entries) == 12
    assert [entry.prompt for entry in entries] == ["h13"] + [f"h{index}" for index in range(12, 1, -1)]
    assert "h1" not in [entry.prompt for entry in entries]


def test_entry_ids_are_unique_and_descending(storage):
    history = GenerationHistoryService(storage, clock=fixed_clock)

    for index in range(5):
        history.record(make_entry(history, f"p{index}"))

    ids = [entry.id for entry in history.list()]
    assert len(set(ids)) == 5
    assert ids == sorted(ids, reverse=True)
    assert ids[-1] == "2024-05-01T12:00:00.000Z"
    assert ids[0] == "2024-05-01T12:00:00.004Z"


def test_history_roundtrips_through_storage(storage):
    history = GenerationHistoryService(storage)
    history.record(make_entry(history, "kept"))

    reloaded = GenerationHistoryService(storage)

    assert reloaded.load() == history.list()


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        json.dumps({"prompt": "not a list"}),
        json.dumps([{"id": "x", "prompt": "missing fields"}]),
        json.dumps([{"id": 1, "prompt": 2, "aspect_ratio": 3, "image_size": 4, "image_url": 5}]),
        json.dumps(["just a string"]),
    ],
)
def test_corrupt_history_is_discarded(storage, raw):
    storage.set_item(HISTORY_STORAGE_KEY, raw)
    storage.set_item("unrelated", "stays")
    history = GenerationHistoryService(storage)

    assert history.load() == []
    assert storage.get_item(HISTORY_STORAGE_KEY) is None
    assert storage.get_item("unrelated") == "stays"


def test_load_truncates_oversized_history(storage):
    items = [
        {
            "id": f"2024-05-01T12:00:{59 - index:02d}.000Z",
            "prompt": f"p{index}",
            "aspect_ratio": "9:16",
            "image_size": "2K",
            "image_url": "data:image/jpeg;base64,QUJD",
        }
        for index in range(15)
    ]
    storage.set_item(HISTORY_STORAGE_KEY, json.dumps(items))
    history = GenerationHistoryService(storage)

    entries = history.load()

    assert len(entries) == 12
    assert entries[0].prompt == "p0"


def test_list_returns_a_copy(storage):
    history = GenerationHistoryService(storage)
    history.record(make_entry(history, "only"))

    snapshot = history.list()
    snapshot.clear()

    assert len(history.list()) == 1
    assert history.list(limit=0) == []


def test_failed_write_leaves_history_unchanged(tmp_path):
    storage_dir = tmp_path / "storage.json"
    storage_dir.mkdir()
    history = GenerationHistoryService(StorageService(storage_dir))
    history.load()

    with pytest.raises(OSError):
        history.record(make_entry(history, "lost"))

    assert history.list() == []
    assert len(history) == 0
