"""Tests for the JSON key-value directory."""

import json
from pathlib import Path

import pytest

from facturier.core.exceptions import StorageError
from facturier.infrastructure.storage.json_store import JsonStorage
from facturier.infrastructure.storage.json_store.kv import JsonCollection, JsonKeyValueStore


@pytest.fixture
def kv(tmp_path: Path) -> JsonKeyValueStore:
    store = JsonKeyValueStore(tmp_path / "store")
    store.initialize()
    return store


class TestCollection:
    def test_missing_file_is_empty(self, kv):
        assert JsonCollection(kv, "clients").all() == []

    def test_put_writes_file(self, kv):
        JsonCollection(kv, "clients").put({"id": 1, "name": "Émilie"})

        data = json.loads((kv.directory / "clients.json").read_text(encoding="utf-8"))
        assert data["records"] == [{"id": 1, "name": "Émilie"}]

    def test_put_replaces_same_id(self, kv):
        clients = JsonCollection(kv, "clients")
        clients.put({"id": 1, "name": "a"})
        clients.put({"id": 1, "name": "b"})
        assert clients.all() == [{"id": 1, "name": "b"}]

    def test_returned_records_are_copies(self, kv):
        clients = JsonCollection(kv, "clients")
        clients.put({"id": 1, "tags": []})
        clients.get(1)["tags"].append("x")
        assert clients.get(1) == {"id": 1, "tags": []}

    def test_counter_is_monotonic(self, kv):
        clients = JsonCollection(kv, "clients")
        first = clients.allocate()
        clients.put({"id": first})
        clients.delete(first)
        assert clients.allocate() == first + 1

    def test_bump_never_lowers(self, kv):
        clients = JsonCollection(kv, "clients")
        clients.bump(10)
        clients.bump(3)
        assert clients.allocate() == 11

    def test_delete_missing(self, kv):
        assert JsonCollection(kv, "clients").delete(5) is False

    def test_reload_from_disk(self, kv):
        JsonCollection(kv, "clients").put({"id": 1})
        fresh = JsonKeyValueStore(kv.directory)
        assert JsonCollection(fresh, "clients").get(1) == {"id": 1}


class TestAtomic:
    async def test_writes_flushed_on_exit(self, kv):
        clients = JsonCollection(kv, "clients")
        async with kv.atomic():
            clients.put({"id": 1})
            assert not (kv.directory / "clients.json").exists()
        assert (kv.directory / "clients.json").exists()

    async def test_error_discards_changes(self, kv):
        clients = JsonCollection(kv, "clients")
        clients.put({"id": 1})

        with pytest.raises(RuntimeError):
            async with kv.atomic():
                clients.put({"id": 2})
                raise RuntimeError("boom")

        assert clients.all() == [{"id": 1}]
        fresh = JsonKeyValueStore(kv.directory)
        assert JsonCollection(fresh, "clients").all() == [{"id": 1}]

    async def test_failed_flush_discards_changes(self, kv, monkeypatch):
        clients = JsonCollection(kv, "clients")
        clients.put({"id": 1})
        real_write = kv._write

        def failing_write(name):
            if name == "clients":
                raise StorageError("disk full", code="STORAGE_WRITE_FAILED")
            real_write(name)

        monkeypatch.setattr(kv, "_write", failing_write)
        with pytest.raises(StorageError):
            async with kv.atomic():
                clients.put({"id": 2})
        monkeypatch.setattr(kv, "_write", real_write)

        assert clients.all() == [{"id": 1}]
        clients.put({"id": 3})
        fresh = JsonKeyValueStore(kv.directory)
        assert JsonCollection(fresh, "clients").all() == [{"id": 1}, {"id": 3}]

    async def test_failed_flush_restores_written_collections(self, kv, monkeypatch):
        JsonCollection(kv, "a").put({"id": 1})
        real_write = kv._write

        def failing_write(name):
            if name == "b":
                raise StorageError("disk full", code="STORAGE_WRITE_FAILED")
            real_write(name)

        monkeypatch.setattr(kv, "_write", failing_write)
        with pytest.raises(StorageError):
            async with kv.atomic():
                JsonCollection(kv, "a").put({"id": 2})
                JsonCollection(kv, "b").put({"id": 1})

        fresh = JsonKeyValueStore(kv.directory)
        assert JsonCollection(fresh, "a").all() == [{"id": 1}]
        assert JsonCollection(fresh, "b").all() == []

    async def test_no_temp_files_left(self, kv):
        async with kv.atomic():
            JsonCollection(kv, "a").put({"id": 1})
            JsonCollection(kv, "b").put({"id": 1})
        assert sorted(p.name for p in kv.directory.iterdir()) == ["a.json", "b.json"]


class TestCorruptFiles:
    def test_invalid_json(self, kv):
        (kv.directory / "clients.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError) as exc_info:
            JsonCollection(kv, "clients").all()
        assert exc_info.value.code == "STORAGE_READ_FAILED"

    def test_unexpected_layout(self, kv):
        (kv.directory / "clients.json").write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonCollection(kv, "clients").all()


class TestStoreWriteFailure:
    async def test_failed_create_is_not_visible(self, tmp_path, client_data, monkeypatch):
        storage = JsonStorage(tmp_path / "store")
        await storage.initialize()

        def failing_write(name):
            raise StorageError("disk full", code="STORAGE_WRITE_FAILED")

        monkeypatch.setattr(storage.kv, "_write", failing_write)
        with pytest.raises(StorageError):
            await storage.clients.create_client(client_data)

        assert await storage.clients.list_clients() == []
