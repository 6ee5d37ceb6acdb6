"""Snapshot sync service: loads and saves whole-domain snapshots.

Reads come from the relational store, falling back to the flat-file
snapshot when no store is configured or the read fails. Writes go through
the reconciliation engine while holding the domain's lock.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any

from dashsync.core.exceptions import StoreUnavailableError
from dashsync.core.locks import DomainLockRegistry
from dashsync.services.domain import DomainAdapter
from dashsync.services.fallback import FallbackStore
from dashsync.services.reconciliation import (
    ReconciliationEngine,
    ReconciliationResult,
    check_empty_overwrite,
)
from dashsync.services.registry import DOMAINS
from dashsync.services.store import RecordStore

logger = logging.getLogger(__name__)

CHILD_ORDER = (("created_at", False),)


class SyncService:
    def __init__(
        self,
        store: RecordStore | None,
        fallback: FallbackStore,
        locks: DomainLockRegistry,
        *,
        batch_size: int = 5,
        fallback_writes_enabled: bool = False,
    ):
        self.store = store
        self.fallback = fallback
        self.locks = locks
        self.batch_size = batch_size
        self.fallback_writes_enabled = fallback_writes_enabled

    # --- Reads ---

    async def load_snapshot(self, adapter: DomainAdapter) -> dict[str, Any]:
        """Return the domain's full snapshot with children nested."""
        if self.store is None:
            return await self._read_fallback(adapter)
        try:
            return await self._read_store(adapter)
        except Exception:
            logger.exception("Reading %s from the store failed, serving fallback file", adapter.name)
            return await self._read_fallback(adapter)

    async def load_dashboard(self) -> dict[str, Any]:
        """Every domain's snapshot, keyed by the domain's response key."""
        adapters = list(DOMAINS.values())
        snapshots = await asyncio.gather(*(self.load_snapshot(a) for a in adapters))
        return {adapter.response_key: snap for adapter, snap in zip(adapters, snapshots)}

    async def _read_store(self, adapter: DomainAdapter) -> dict[str, Any]:
        specs = adapter.collections
        child_specs = [child for spec in specs for child in spec.children]
        results = await asyncio.gather(
            *(self.store.fetch_rows(spec.table, spec.order_by) for spec in specs),
            *(self.store.fetch_rows(child.table, CHILD_ORDER) for child in child_specs),
        )
        rows = {spec.name: result for spec, result in zip(specs, results)}

        children: dict[str, dict[str, list[dict[str, Any]]]] = {}
        for child, child_rows in zip(child_specs, results[len(specs):]):
            grouped: dict[str, list[dict[str, Any]]] = defaultdict(list)
            for row in child_rows:
                grouped[row[child.parent_column]].append(row)
            children[child.name] = grouped
        return adapter.to_wire(rows, children)

    async def _read_fallback(self, adapter: DomainAdapter) -> dict[str, Any]:
        data = await asyncio.to_thread(
            self.fallback.read, adapter.fallback_file, adapter.empty_state()
        )
        return adapter.normalize_fallback(data)

    # --- Writes ---

    async def save_snapshot(
        self, adapter: DomainAdapter, data: Any
    ) -> ReconciliationResult | None:
        """Validate ``data`` and make the store match it.

        Returns the per-table counts, or None for a flat-file write.
        """
        payload = adapter.parse(data)
        snapshot = adapter.to_snapshot(payload)

        async with self.locks.hold(adapter.name):
            if self.store is None:
                await self._write_fallback(adapter, payload, snapshot)
                return None
            engine = ReconciliationEngine(self.store, batch_size=self.batch_size)
            return await engine.reconcile(adapter, snapshot)

    async def _write_fallback(self, adapter, payload, snapshot) -> None:
        if not self.fallback_writes_enabled:
            raise StoreUnavailableError()

        current = await asyncio.to_thread(
            self.fallback.read, adapter.fallback_file, adapter.empty_state()
        )
        has_existing_data = any(
            isinstance(value, list) and value for value in current.values()
        )
        check_empty_overwrite(adapter, snapshot, has_existing_data)

        incoming = payload.model_dump(mode="json", by_alias=True)
        # Collections the client did not send keep their stored contents.
        merged = {**current, **{k: v for k, v in incoming.items() if v is not None}}
        await asyncio.to_thread(self.fallback.write, adapter.fallback_file, merged)
        logger.warning("Store not configured; overwrote %s", adapter.fallback_file)
