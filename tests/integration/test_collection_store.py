import json
import logging

import pytest

from verdict.storage import BoundedCollectionStore, FileBackend, MemoryBackend, StorageKeys


@pytest.mark.asyncio
async def test_load_missing_key_returns_default(store):
    assert await store.load(StorageKeys.ANALYSES) == []
    assert await store.load(StorageKeys.ANALYSES, default=[{"id": "x"}]) == [{"id": "x"}]


@pytest.mark.asyncio
async def test_corrupted_collection_reads_as_empty(caplog):
    backend = MemoryBackend({StorageKeys.ANALYSES: "{not json"})
    store = BoundedCollectionStore(backend)
    caplog.set_level(logging.WARNING, logger="verdict.storage.collection_store")

    assert await store.load(StorageKeys.ANALYSES) == []
    assert "unreadable" in caplog.text


@pytest.mark.asyncio
async def test_non_list_payload_reads_as_empty():
    store = BoundedCollectionStore(MemoryBackend({StorageKeys.ANALYSES: '{"id": "a"}'}))
    assert await store.load(StorageKeys.ANALYSES) == []


@pytest.mark.asyncio
async def test_prepend_keeps_newest_first_within_cap(store):
    for index in range(4):
        stored = await store.prepend(StorageKeys.TEMPLATES, {"id": f"t{index}"}, cap=3)

    assert [item["id"] for item in stored] == ["t3", "t2", "t1"]
    assert await store.load(StorageKeys.TEMPLATES) == stored


@pytest.mark.asyncio
async def test_update_without_match_writes_nothing(store, backend):
    await store.save(StorageKeys.TEMPLATES, [{"id": "a", "useCount": 0}])
    writes = backend.write_count

    assert await store.update(StorageKeys.TEMPLATES, lambda item: item["id"] == "zzz", dict) is None
    assert backend.write_count == writes


@pytest.mark.asyncio
async def test_update_replaces_first_match(store):
    await store.save(StorageKeys.TEMPLATES, [{"id": "a", "n": 1}, {"id": "b", "n": 1}])

    def bump(item):
        item["n"] += 1
        return item

    updated = await store.update(StorageKeys.TEMPLATES, lambda item: item["id"] == "b", bump)

    assert updated == {"id": "b", "n": 2}
    assert await store.load(StorageKeys.TEMPLATES) == [{"id": "a", "n": 1}, {"id": "b", "n": 2}]


@pytest.mark.asyncio
async def test_remove_returns_count(store):
    await store.save(StorageKeys.TEMPLATES, [{"id": "a"}, {"id": "b"}, {"id": "a"}])

    assert await store.remove(StorageKeys.TEMPLATES, lambda item: item["id"] == "a") == 2
    assert await store.load(StorageKeys.TEMPLATES) == [{"id": "b"}]
    assert await store.remove(StorageKeys.TEMPLATES, lambda item: item["id"] == "a") == 0


@pytest.mark.asyncio
async def test_load_object_ignores_corruption_and_wrong_shape():
    backend = MemoryBackend({StorageKeys.DRAFT: "][", StorageKeys.SETTINGS: "[1, 2]"})
    store = BoundedCollectionStore(backend)

    assert await store.load_object(StorageKeys.DRAFT) is None
    assert await store.load_object(StorageKeys.SETTINGS) is None


@pytest.mark.asyncio
async def test_file_backend_persists_between_instances(tmp_path):
    first = BoundedCollectionStore(FileBackend(tmp_path))
    await first.save(StorageKeys.ANALYSES, [{"id": "analysis_1", "label": "Café"}])

    second = BoundedCollectionStore(FileBackend(tmp_path))
    assert await second.load(StorageKeys.ANALYSES) == [{"id": "analysis_1", "label": "Café"}]

    raw = (tmp_path / f"{StorageKeys.ANALYSES}.json").read_text(encoding="utf-8")
    assert json.loads(raw)[0]["label"] == "Café"
    assert not list(tmp_path.glob("*.tmp"))


@pytest.mark.asyncio
async def test_file_backend_remove_is_idempotent(tmp_path):
    backend = FileBackend(tmp_path)
    await backend.set_item("verdict_draft", "{}")
    await backend.multi_remove(["verdict_draft", "never_written"])

    assert await backend.get_item("verdict_draft") is None
