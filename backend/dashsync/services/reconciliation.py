"""Snapshot reconciliation engine.

Makes the stored rows of one domain match a client snapshot:

1. read the existing key set of every top-level table (concurrently),
2. run the empty-overwrite guard,
3. diff every collection the client sent and run the full-delete guard,
4. upsert reference tables, then primary tables, then reconcile each
   surviving parent's children scoped to that parent,
5. delete stale rows in reverse dependency order, children of deleted
   parents before the parents themselves.

Guards run before the first write, so a blocked request has no side
effects. After that there is no transaction: a failed row aborts the
remaining stages but does not undo rows already written. Re-sending the
same snapshot converges.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from sqlalchemy import Table

from dashsync.core.exceptions import (
    EmptyOverwriteBlocked,
    FullDeleteBlocked,
    PartialWriteError,
)
from dashsync.services.domain import ChildSpec, CollectionSpec, DomainAdapter, Record, Snapshot
from dashsync.services.store import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


# --- Diff Engine ---

@dataclass
class CollectionPlan:
    to_insert: list[Record] = field(default_factory=list)
    to_update: list[Record] = field(default_factory=list)
    to_delete: list[str] = field(default_factory=list)
    duplicates: int = 0

    @property
    def surviving(self) -> list[Record]:
        return self.to_insert + self.to_update


def diff(existing_keys: set[str], incoming: Iterable[Record]) -> CollectionPlan:
    """Split incoming records into inserts and updates, and find stale keys.

    Duplicate keys in ``incoming`` collapse to the last occurrence.
    """
    latest: dict[str, Record] = {}
    seen = 0
    for record in incoming:
        seen += 1
        latest[record.key] = record
    plan = CollectionPlan(duplicates=seen - len(latest))
    for key, record in latest.items():
        if key in existing_keys:
            plan.to_update.append(record)
        else:
            plan.to_insert.append(record)
    plan.to_delete = sorted(existing_keys - latest.keys())
    return plan


@dataclass
class ReconciliationPlan:
    domain: str
    existing: dict[str, set[str]]
    collections: dict[str, CollectionPlan]

    @property
    def total_existing(self) -> int:
        return sum(len(keys) for keys in self.existing.values())

    @property
    def total_to_delete(self) -> int:
        return sum(len(plan.to_delete) for plan in self.collections.values())


# --- Safety Guard ---

def check_empty_overwrite(
    adapter: DomainAdapter, snapshot: Snapshot, has_existing_data: bool
) -> None:
    """Refuse empty primary collections while the domain still holds data."""
    if not has_existing_data:
        return
    if any(snapshot.get(name) for name in adapter.primary_names):
        return
    logger.warning(
        "SAFETY BLOCK: empty %s snapshot sent while the store holds data",
        adapter.name,
    )
    raise EmptyOverwriteBlocked(
        adapter.name, "Cannot save empty state when database contains data"
    )


def check_full_delete(plan: ReconciliationPlan) -> None:
    """Refuse a plan that deletes every existing top-level row of the domain."""
    if plan.total_existing > 0 and plan.total_to_delete == plan.total_existing:
        logger.warning(
            "SAFETY BLOCK: %s plan would delete all %d existing rows",
            plan.domain,
            plan.total_existing,
        )
        raise FullDeleteBlocked(
            plan.domain, "Safety check failed: Cannot delete all existing data"
        )


def build_plan(
    adapter: DomainAdapter, snapshot: Snapshot, existing: dict[str, set[str]]
) -> ReconciliationPlan:
    collections: dict[str, CollectionPlan] = {}
    for spec in adapter.collections:
        incoming = snapshot.get(spec.name)
        # An absent collection is left untouched.
        if incoming is None:
            continue
        plan = diff(existing[spec.name], incoming)
        if plan.duplicates:
            logger.warning(
                "%s: %d duplicate key(s) in %s, last occurrence wins",
                adapter.name,
                plan.duplicates,
                spec.name,
            )
        collections[spec.name] = plan
    return ReconciliationPlan(domain=adapter.name, existing=existing, collections=collections)


# --- Result ---

@dataclass
class TableCounts:
    inserted: int = 0
    updated: int = 0
    deleted: int = 0


@dataclass
class ReconciliationResult:
    domain: str
    tables: dict[str, TableCounts] = field(default_factory=dict)

    def table(self, name: str) -> TableCounts:
        return self.tables.setdefault(name, TableCounts())

    def record_plan(self, table: str, plan: CollectionPlan) -> None:
        counts = self.table(table)
        counts.inserted += len(plan.to_insert)
        counts.updated += len(plan.to_update)

    @property
    def inserted(self) -> int:
        return sum(c.inserted for c in self.tables.values())

    @property
    def updated(self) -> int:
        return sum(c.updated for c in self.tables.values())

    @property
    def deleted(self) -> int:
        return sum(c.deleted for c in self.tables.values())

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            name: {"inserted": c.inserted, "updated": c.updated, "deleted": c.deleted}
            for name, c in self.tables.items()
        }


# --- Executors ---

class ReconciliationEngine:
    """Applies snapshots to a ``RecordStore``.

    ``batch_size`` caps the number of store calls in flight at once, across
    every stage, so a large snapshot cannot exhaust the connection pool.
    """

    def __init__(self, store: RecordStore, *, batch_size: int = 5) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.batch_size = batch_size
        self._slots = asyncio.Semaphore(batch_size)

    async def _io(self, call: Callable[[], Awaitable[T]]) -> T:
        async with self._slots:
            return await call()

    async def load_existing(self, adapter: DomainAdapter) -> dict[str, set[str]]:
        """Read the current key set of every top-level table of the domain."""
        specs = adapter.collections
        key_sets = await asyncio.gather(
            *(self._io(lambda spec=spec: self.store.fetch_keys(spec.table)) for spec in specs)
        )
        return {spec.name: keys for spec, keys in zip(specs, key_sets)}

    async def plan(self, adapter: DomainAdapter, snapshot: Snapshot) -> ReconciliationPlan:
        """Read existing state, run both guards and return the plan. Writes nothing."""
        existing = await self.load_existing(adapter)
        check_empty_overwrite(adapter, snapshot, any(existing.values()))
        plan = build_plan(adapter, snapshot, existing)
        check_full_delete(plan)
        return plan

    async def reconcile(self, adapter: DomainAdapter, snapshot: Snapshot) -> ReconciliationResult:
        plan = await self.plan(adapter, snapshot)
        result = ReconciliationResult(domain=adapter.name)

        for spec in adapter.upsert_order():
            collection_plan = plan.collections.get(spec.name)
            if collection_plan is None:
                continue
            await self._upsert_records(spec.table, spec.update_columns, collection_plan.surviving)
            result.record_plan(spec.table.name, collection_plan)
            for child in spec.children:
                await self._reconcile_children(child, collection_plan.surviving, result)

        for spec in adapter.delete_order():
            collection_plan = plan.collections.get(spec.name)
            if collection_plan is None or not collection_plan.to_delete:
                continue
            await self._delete_records(spec, collection_plan.to_delete, result)

        logger.info(
            "Reconciled %s: inserted=%d updated=%d deleted=%d",
            adapter.name,
            result.inserted,
            result.updated,
            result.deleted,
        )
        return result

    async def _run_batched(
        self,
        table: str,
        items: Sequence[T],
        key_of: Callable[[T], str],
        operation: Callable[[T], Awaitable[Any]],
    ) -> None:
        """Run ``operation`` over ``items`` in bounded concurrent batches.

        Every item of a batch is awaited even if a sibling fails; the first
        batch with a failure raises ``PartialWriteError`` and later batches
        never start.
        """
        for start in range(0, len(items), self.batch_size):
            batch = items[start:start + self.batch_size]
            outcomes = await asyncio.gather(
                *(operation(item) for item in batch), return_exceptions=True
            )
            failures: list[tuple[str, BaseException]] = []
            for item, outcome in zip(batch, outcomes):
                if isinstance(outcome, PartialWriteError):
                    failures.extend(outcome.failures)
                elif isinstance(outcome, Exception):
                    logger.error("Write failed on %s/%s: %s", table, key_of(item), outcome)
                    failures.append((key_of(item), outcome))
                elif isinstance(outcome, BaseException):
                    raise outcome
            if failures:
                raise PartialWriteError(table, failures)

    async def _upsert_records(
        self, table: Table, update_columns: Sequence[str], records: Sequence[Record]
    ) -> None:
        await self._run_batched(
            table.name,
            records,
            lambda record: record.key,
            lambda record: self._io(
                lambda: self.store.upsert(table, record.fields, update_columns)
            ),
        )

    async def _reconcile_children(
        self, child: ChildSpec, parents: Sequence[Record], result: ReconciliationResult
    ) -> None:
        """Diff, upsert and prune each parent's children, scoped to that parent."""

        async def reconcile_one(parent: Record) -> None:
            existing = await self._io(
                lambda: self.store.fetch_child_keys(child.table, child.parent_column, parent.key)
            )
            plan = diff(existing, parent.children.get(child.name, []))
            await self._upsert_records(child.table, child.update_columns, plan.surviving)
            result.record_plan(child.table.name, plan)
            if plan.to_delete:
                deleted = await self._io(
                    lambda: self.store.delete_child_keys(
                        child.table, child.parent_column, parent.key, plan.to_delete
                    )
                )
                result.table(child.table.name).deleted += deleted

        await self._run_batched(
            child.table.name, parents, lambda parent: parent.key, reconcile_one
        )

    async def _delete_records(
        self, spec: CollectionSpec, keys: list[str], result: ReconciliationResult
    ) -> None:
        for child in spec.children:
            deleted = await self._delete(
                child.table.name,
                keys,
                lambda child=child: self.store.delete_children(
                    child.table, child.parent_column, keys
                ),
            )
            result.table(child.table.name).deleted += deleted
        deleted = await self._delete(
            spec.table.name, keys, lambda: self.store.delete_keys(spec.table, keys)
        )
        result.table(spec.table.name).deleted += deleted

    async def _delete(
        self, table: str, keys: list[str], operation: Callable[[], Awaitable[int]]
    ) -> int:
        try:
            return await self._io(operation)
        except Exception as exc:
            for key in keys:
                logger.error("Delete failed on %s/%s: %s", table, key, exc)
            raise PartialWriteError(table, [(key, exc) for key in keys]) from exc
