"""Tests for SyncService: locking, fallback reads and fallback writes."""

import asyncio
import json

import pytest

from dashsync.core.exceptions import EmptyOverwriteBlocked, StoreUnavailableError
from dashsync.core.locks import DomainLockRegistry
from dashsync.services.fallback import FallbackStore
from dashsync.services.registry import DOMAINS
from dashsync.services.sales import SalesAdapter
from dashsync.services.sync import SyncService
from dashsync.services.todos import TodosAdapter
from factories import todo, todo_payload

todos = TodosAdapter()


def _service(store, tmp_path, **kwargs):
    return SyncService(store, FallbackStore(tmp_path), DomainLockRegistry(DOMAINS), **kwargs)


class FailingStore:
    async def fetch_rows(self, table, order_by=()):
        raise ConnectionError("store is down")


class TestLocks:
    async def test_same_domain_saves_wait_for_the_lock(self, memory_store, tmp_path):
        svc = _service(memory_store, tmp_path)

        async with svc.locks.hold("todos"):
            task = asyncio.create_task(svc.save_snapshot(todos, todo_payload(todos=[todo("t1")])))
            await asyncio.sleep(0.01)
            assert memory_store.calls == []

        await task
        assert memory_store.keys("todos") == {"t1"}

    async def test_overlapping_saves_both_apply(self, memory_store, tmp_path):
        svc = _service(memory_store, tmp_path)
        await svc.save_snapshot(todos, todo_payload(todos=[todo("t1")]))

        await asyncio.gather(
            svc.save_snapshot(todos, todo_payload(todos=[todo("t1"), todo("t2")])),
            svc.save_snapshot(todos, todo_payload(todos=[todo("t1"), todo("t2"), todo("t3")])),
        )

        assert memory_store.keys("todos") == {"t1", "t2", "t3"}

    def test_unknown_domain_refused(self):
        locks = DomainLockRegistry(["todos"])

        with pytest.raises(ValueError):
            locks.lock_for("notes")
        assert len(locks) == 1


class TestReads:
    async def test_unconfigured_store_reads_fallback_file(self, tmp_path):
        (tmp_path / "todos.json").write_text(
            json.dumps(todo_payload(todos=[todo("t1")])), encoding="utf-8"
        )

        data = await _service(None, tmp_path).load_snapshot(todos)

        assert [t["id"] for t in data["todos"]] == ["t1"]

    async def test_failed_read_falls_back(self, tmp_path):
        data = await _service(FailingStore(), tmp_path).load_snapshot(todos)

        assert data == todos.empty_state()

    async def test_fallback_palette_normalized(self, tmp_path):
        (tmp_path / "sales.json").write_text(json.dumps({
            "sales": [],
            "collections": [{"id": "c1", "name": "Core", "color": "#abcdef", "availableColors": ["#abcdef"]}],
        }), encoding="utf-8")

        data = await _service(None, tmp_path).load_snapshot(SalesAdapter())

        assert data["collections"][0]["availableColors"] == [{"value": "#abcdef", "name": "#ABCDEF"}]
        assert data["products"] == []

    async def test_invalid_fallback_served_as_stored(self, tmp_path):
        raw = {"todos": [{"id": "t1"}]}
        (tmp_path / "todos.json").write_text(json.dumps(raw), encoding="utf-8")

        data = await _service(None, tmp_path).load_snapshot(todos)

        assert data == raw

    async def test_dashboard_has_every_domain(self, memory_store, tmp_path):
        svc = _service(memory_store, tmp_path)
        await svc.save_snapshot(todos, todo_payload(todos=[todo("t1")]))

        data = await svc.load_dashboard()

        assert set(data) == {"todos", "sales", "expenses", "quickLinks", "calendar"}
        assert [t["id"] for t in data["todos"]["todos"]] == ["t1"]


class TestFallbackWrites:
    async def test_disabled_by_default(self, tmp_path):
        with pytest.raises(StoreUnavailableError):
            await _service(None, tmp_path).save_snapshot(todos, todo_payload(todos=[todo("t1")]))

    async def test_overwrite_when_enabled(self, tmp_path):
        svc = _service(None, tmp_path, fallback_writes_enabled=True)

        result = await svc.save_snapshot(todos, todo_payload(todos=[todo("t1")]))

        assert result is None
        stored = json.loads((tmp_path / "todos.json").read_text(encoding="utf-8"))
        assert [t["id"] for t in stored["todos"]] == ["t1"]

    async def test_empty_overwrite_of_file_blocked(self, tmp_path):
        svc = _service(None, tmp_path, fallback_writes_enabled=True)
        await svc.save_snapshot(todos, todo_payload(todos=[todo("t1")]))

        with pytest.raises(EmptyOverwriteBlocked):
            await svc.save_snapshot(todos, todo_payload())

    async def test_absent_collections_keep_file_contents(self, tmp_path):
        svc = _service(None, tmp_path, fallback_writes_enabled=True)
        await svc.save_snapshot(
            todos, todo_payload(todos=[todo("t1")], categories=[{"id": "work", "name": "Work", "color": "#000000"}])
        )

        await svc.save_snapshot(todos, {"todos": [todo("t2")]})

        stored = json.loads((tmp_path / "todos.json").read_text(encoding="utf-8"))
        assert [c["id"] for c in stored["categories"]] == ["work"]
        assert [t["id"] for t in stored["todos"]] == ["t2"]
