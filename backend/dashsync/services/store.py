"""Row-level access to the relational store.

The reconciliation engine only needs a handful of primitives: read keys,
upsert one row by primary key, delete rows by key. Each primitive runs in
its own short transaction, so the engine behaves the same on backends that
cannot hold a transaction open across statements (serverless Postgres over
HTTP). Nothing here groups several statements into one transaction.
"""

import logging
from collections.abc import Collection, Iterator, Sequence
from typing import Any, Protocol

from sqlalchemy import Table, delete, select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Storage primitives the reconciliation engine is written against."""

    async def fetch_keys(self, table: Table) -> set[str]: ...

    async def fetch_child_keys(
        self, table: Table, parent_column: str, parent_key: str
    ) -> set[str]: ...

    async def upsert(
        self, table: Table, row: dict[str, Any], update_columns: Sequence[str]
    ) -> None: ...

    async def delete_keys(self, table: Table, keys: Collection[str]) -> int: ...

    async def delete_child_keys(
        self, table: Table, parent_column: str, parent_key: str, keys: Collection[str]
    ) -> int: ...

    async def delete_children(
        self, table: Table, parent_column: str, parent_keys: Collection[str]
    ) -> int: ...

    async def fetch_rows(
        self, table: Table, order_by: Sequence[tuple[str, bool]] = ()
    ) -> list[dict[str, Any]]: ...


def _chunks(keys: Collection[str], size: int) -> Iterator[list[str]]:
    ordered = sorted(keys)
    for start in range(0, len(ordered), size):
        yield ordered[start:start + size]


class SqlRecordStore:
    """``RecordStore`` backed by an SQLAlchemy async engine."""

    def __init__(self, engine: AsyncEngine, delete_chunk_size: int = 500) -> None:
        self.engine = engine
        self.delete_chunk_size = delete_chunk_size

    def _insert(self, table: Table):
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            return pg_insert(table)
        if dialect == "sqlite":
            return sqlite_insert(table)
        raise NotImplementedError(f"Upsert is not supported on dialect {dialect!r}")

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def fetch_keys(self, table: Table) -> set[str]:
        async with self.engine.connect() as conn:
            result = await conn.execute(select(table.c.id))
            return {row[0] for row in result}

    async def fetch_child_keys(
        self, table: Table, parent_column: str, parent_key: str
    ) -> set[str]:
        query = select(table.c.id).where(table.c[parent_column] == parent_key)
        async with self.engine.connect() as conn:
            result = await conn.execute(query)
            return {row[0] for row in result}

    async def upsert(
        self, table: Table, row: dict[str, Any], update_columns: Sequence[str]
    ) -> None:
        """INSERT the row; on a primary-key conflict UPDATE ``update_columns``."""
        stmt = self._insert(table).values(**row)
        if update_columns:
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.id],
                set_={column: stmt.excluded[column] for column in update_columns},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=[table.c.id])
        async with self.engine.begin() as conn:
            await conn.execute(stmt)

    async def delete_keys(self, table: Table, keys: Collection[str]) -> int:
        deleted = 0
        for chunk in _chunks(keys, self.delete_chunk_size):
            async with self.engine.begin() as conn:
                result = await conn.execute(delete(table).where(table.c.id.in_(chunk)))
                deleted += result.rowcount
        return deleted

    async def delete_child_keys(
        self, table: Table, parent_column: str, parent_key: str, keys: Collection[str]
    ) -> int:
        deleted = 0
        for chunk in _chunks(keys, self.delete_chunk_size):
            stmt = delete(table).where(
                table.c[parent_column] == parent_key,
                table.c.id.in_(chunk),
            )
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
                deleted += result.rowcount
        return deleted

    async def delete_children(
        self, table: Table, parent_column: str, parent_keys: Collection[str]
    ) -> int:
        deleted = 0
        for chunk in _chunks(parent_keys, self.delete_chunk_size):
            async with self.engine.begin() as conn:
                result = await conn.execute(
                    delete(table).where(table.c[parent_column].in_(chunk))
                )
                deleted += result.rowcount
        return deleted

    async def fetch_rows(
        self, table: Table, order_by: Sequence[tuple[str, bool]] = ()
    ) -> list[dict[str, Any]]:
        query = select(table)
        for column, descending in order_by:
            col = table.c[column]
            query = query.order_by(col.desc() if descending else col.asc())
        async with self.engine.connect() as conn:
            result = await conn.execute(query)
            return [dict(row._mapping) for row in result]
