"""Pytest configuration and fixtures."""

import asyncio
from collections import defaultdict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Table

import dashsync.models  # noqa: F401
from dashsync.config import settings
from dashsync.database import Base, build_engine
from dashsync.main import app
from dashsync.services.store import SqlRecordStore


class ForeignKeyViolation(Exception):
    pass


class InjectedFailure(Exception):
    pass


class MemoryStore:
    """In-memory ``RecordStore`` that enforces the models' foreign keys.

    ON DELETE CASCADE and SET NULL are applied like the database would.
    Every call is logged in ``calls`` as ``(operation, table, argument)``,
    upserts of ``(table, key)`` pairs listed in ``fail_on`` raise, and so do
    deletes against tables named in ``fail_deletes``.
    """

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, dict]] = defaultdict(dict)
        self.calls: list[tuple[str, str, object]] = []
        self.fail_on: set[tuple[str, str]] = set()
        self.fail_deletes: set[str] = set()
        self.in_flight = 0
        self.max_in_flight = 0
        self._referencing: dict[str, list] = defaultdict(list)
        for table in Base.metadata.tables.values():
            for fk in table.foreign_keys:
                self._referencing[fk.column.table.name].append((table, fk))

    async def _enter(self, operation: str, table: Table, argument: object) -> None:
        self.calls.append((operation, table.name, argument))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        # Yield so concurrent callers interleave.
        await asyncio.sleep(0)
        self.in_flight -= 1

    def keys(self, table_name: str) -> set[str]:
        return set(self.rows[table_name])

    def writes(self) -> list[tuple[str, str, object]]:
        return [call for call in self.calls if not call[0].startswith("fetch")]

    # --- RecordStore ---

    async def ping(self):
        return None

    async def fetch_keys(self, table):
        await self._enter("fetch_keys", table, None)
        return set(self.rows[table.name])

    async def fetch_child_keys(self, table, parent_column, parent_key):
        await self._enter("fetch_child_keys", table, parent_key)
        return {k for k, row in self.rows[table.name].items() if row[parent_column] == parent_key}

    async def upsert(self, table, row, update_columns):
        await self._enter("upsert", table, row["id"])
        if (table.name, row["id"]) in self.fail_on:
            raise InjectedFailure(f"cannot write {table.name}/{row['id']}")
        for fk in table.foreign_keys:
            value = row.get(fk.parent.name)
            if value is not None and value not in self.rows[fk.column.table.name]:
                raise ForeignKeyViolation(f"{table.name}.{fk.parent.name} -> {value}")
        existing = self.rows[table.name].get(row["id"])
        if existing is None:
            self.rows[table.name][row["id"]] = dict(row)
        else:
            existing.update({column: row[column] for column in update_columns if column in row})

    async def delete_keys(self, table, keys):
        await self._enter("delete_keys", table, sorted(keys))
        self._check_delete(table)
        return self._remove(table.name, keys)

    async def delete_child_keys(self, table, parent_column, parent_key, keys):
        await self._enter("delete_child_keys", table, (parent_key, sorted(keys)))
        scoped = [
            k for k in keys
            if k in self.rows[table.name] and self.rows[table.name][k][parent_column] == parent_key
        ]
        return self._remove(table.name, scoped)

    async def delete_children(self, table, parent_column, parent_keys):
        await self._enter("delete_children", table, sorted(parent_keys))
        self._check_delete(table)
        parents = set(parent_keys)
        doomed = [k for k, row in self.rows[table.name].items() if row[parent_column] in parents]
        return self._remove(table.name, doomed)

    async def fetch_rows(self, table, order_by=()):
        await self._enter("fetch_rows", table, None)
        rows = [dict(row) for row in self.rows[table.name].values()]
        for column, descending in reversed(order_by):
            rows.sort(key=lambda r: r[column], reverse=descending)
        return rows

    def _check_delete(self, table: Table) -> None:
        if table.name in self.fail_deletes:
            raise InjectedFailure(f"cannot delete from {table.name}")

    def _remove(self, table_name: str, keys) -> int:
        removed = 0
        for key in list(keys):
            if key not in self.rows[table_name]:
                continue
            for child_table, fk in self._referencing[table_name]:
                column = fk.parent.name
                for child_key, row in list(self.rows[child_table.name].items()):
                    if row.get(column) != key:
                        continue
                    if fk.ondelete == "CASCADE":
                        self._remove(child_table.name, [child_key])
                    elif fk.ondelete == "SET NULL":
                        row[column] = None
                    else:
                        raise ForeignKeyViolation(f"{child_table.name}/{child_key} references {key}")
            del self.rows[table_name][key]
            removed += 1
        return removed


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
async def sqlite_engine(tmp_path):
    """On-disk SQLite database with the full schema and foreign keys enforced."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'dashsync.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine):
    return SqlRecordStore(sqlite_engine, delete_chunk_size=2)


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client with no database configured and a scratch fallback directory."""
    monkeypatch.setattr(settings, "DATABASE_URL", "")
    monkeypatch.setattr(settings, "FALLBACK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr(settings, "FALLBACK_WRITES_ENABLED", False)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def store_client(client, memory_store):
    """Test client whose sync endpoints write to ``memory_store``."""
    client.app.state.store = memory_store
    return client
