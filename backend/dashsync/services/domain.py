"""Domain adapters: the per-entity-type wiring for the reconciliation engine.

An adapter converts a validated wire snapshot into generic ``Record``
objects (key, column values, nested children) and converts stored rows back
into the wire shape. It also declares which tables make up the domain and
the order they are written in. The engine never looks at domain fields.
"""

import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ValidationError
from sqlalchemy import Table

from dashsync.core.exceptions import SnapshotValidationError

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes from the client as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Stage(enum.IntEnum):
    """Write order. Reference tables are written before the rows that point at them."""

    REFERENCE = 0
    PRIMARY = 1


@dataclass
class Record:
    key: str
    fields: dict[str, Any]
    children: dict[str, list["Record"]] = field(default_factory=dict)


@dataclass
class Snapshot:
    """A decoded snapshot. ``None`` marks a collection the client did not send."""

    domain: str
    collections: dict[str, list[Record] | None]

    def get(self, name: str) -> list[Record] | None:
        return self.collections.get(name)


RowBuilder = Callable[[Any, datetime], dict[str, Any]]
ChildRowBuilder = Callable[[Any, str, datetime], dict[str, Any]]


def reference_row(item: Any, now: datetime) -> dict[str, Any]:
    """Row for a named, coloured lookup option."""
    return {
        "id": item.id,
        "name": item.name,
        "color": item.color,
        "created_at": as_utc(item.created_at) or now,
    }


def checklist_row(parent_column: str) -> ChildRowBuilder:
    """Row builder for subtask-style children (text plus a done flag)."""

    def build(sub: Any, parent_key: str, now: datetime) -> dict[str, Any]:
        return {
            "id": sub.id,
            parent_column: parent_key,
            "text": sub.text,
            "completed": sub.completed,
            "created_at": now,
        }

    return build


def _mutable_columns(table: Table, immutable: Iterable[str]) -> tuple[str, ...]:
    frozen = set(immutable)
    return tuple(column.name for column in table.columns if column.name not in frozen)


@dataclass(frozen=True)
class ChildSpec:
    """A child collection owned by the rows of its parent collection."""

    name: str
    table: Table
    parent_column: str
    to_row: ChildRowBuilder
    immutable_columns: tuple[str, ...] = ("id", "created_at")

    @property
    def update_columns(self) -> tuple[str, ...]:
        return _mutable_columns(self.table, self.immutable_columns)


@dataclass(frozen=True)
class CollectionSpec:
    """A top-level collection of a domain and the table it lives in."""

    name: str
    table: Table
    stage: Stage
    to_row: RowBuilder
    children: tuple[ChildSpec, ...] = ()
    order_by: tuple[tuple[str, bool], ...] = ()
    immutable_columns: tuple[str, ...] = ("id", "created_at")

    @property
    def update_columns(self) -> tuple[str, ...]:
        return _mutable_columns(self.table, self.immutable_columns)

    @property
    def is_primary(self) -> bool:
        return self.stage == Stage.PRIMARY


class DomainAdapter:
    """Base class for the per-domain adapters.

    Subclasses set ``name`` (URL segment), ``response_key`` (key in the
    dashboard aggregate), ``snapshot_model`` (pydantic wire model),
    ``collections`` (in dependency order, referenced tables first) and
    ``fallback_file``.
    """

    name: str
    response_key: str
    snapshot_model: type[BaseModel]
    collections: tuple[CollectionSpec, ...]
    fallback_file: str

    # --- Table wiring ---

    @property
    def primary_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.collections if spec.is_primary)

    def upsert_order(self) -> list[CollectionSpec]:
        # sorted() is stable, so declared order is kept inside a stage.
        return sorted(self.collections, key=lambda spec: spec.stage)

    def delete_order(self) -> list[CollectionSpec]:
        return list(reversed(self.upsert_order()))

    def empty_state(self) -> dict[str, list]:
        return self.dump({name: [] for name in self.snapshot_model.model_fields})

    # --- Wire -> engine ---

    def parse(self, data: Any) -> BaseModel:
        """Validate raw JSON into the domain's wire model."""
        if not isinstance(data, dict):
            raise SnapshotValidationError()
        try:
            return self.snapshot_model.model_validate(data)
        except ValidationError as exc:
            details = [
                {
                    "field": " -> ".join(str(part) for part in err.get("loc", [])),
                    "message": err.get("msg", "Invalid value"),
                }
                for err in exc.errors()
            ]
            raise SnapshotValidationError(details=details) from exc

    def to_snapshot(self, payload: BaseModel) -> Snapshot:
        return self.build_snapshot(
            payload, lambda child, item: getattr(item, child.name, None) or []
        )

    def build_snapshot(
        self,
        payload: BaseModel,
        child_items: Callable[[ChildSpec, Any], list],
    ) -> Snapshot:
        now = utcnow()
        collections: dict[str, list[Record] | None] = {}
        for spec in self.collections:
            items = getattr(payload, spec.name)
            if items is None:
                collections[spec.name] = None
                continue
            records = []
            for item in items:
                row = spec.to_row(item, now)
                children = {
                    child.name: [
                        Record(key=sub.id, fields=child.to_row(sub, row["id"], now))
                        for sub in child_items(child, item)
                    ]
                    for child in spec.children
                }
                records.append(Record(key=row["id"], fields=row, children=children))
            self._check_child_ownership(spec, records)
            collections[spec.name] = records
        return Snapshot(domain=self.name, collections=collections)

    @staticmethod
    def _check_child_ownership(spec: CollectionSpec, records: list[Record]) -> None:
        for child in spec.children:
            owner: dict[str, str] = {}
            for record in records:
                for sub in record.children.get(child.name, []):
                    previous = owner.setdefault(sub.key, record.key)
                    if previous != record.key:
                        raise SnapshotValidationError(
                            details=[{
                                "field": f"{spec.name} -> {child.name}",
                                "message": (
                                    f"{child.name} id {sub.key!r} appears under "
                                    f"{previous!r} and {record.key!r}"
                                ),
                            }]
                        )

    # --- Stored rows -> wire ---

    def to_wire(
        self,
        rows: dict[str, list[dict[str, Any]]],
        children: dict[str, dict[str, list[dict[str, Any]]]],
    ) -> dict[str, Any]:
        """Build the wire snapshot from stored rows.

        ``rows`` maps collection name to its rows; ``children`` maps child
        collection name to rows grouped by parent key.
        """
        data: dict[str, Any] = {}
        for spec in self.collections:
            items = rows.get(spec.name, [])
            if spec.children:
                items = [
                    {
                        **row,
                        **{
                            child.name: children.get(child.name, {}).get(row["id"], [])
                            for child in spec.children
                        },
                    }
                    for row in items
                ]
            data[spec.name] = items
        return self.dump(data)

    def dump(self, data: dict[str, Any]) -> dict[str, Any]:
        dumped = self.snapshot_model.model_validate(data).model_dump(
            mode="json", by_alias=True
        )
        return {key: [] if value is None else value for key, value in dumped.items()}

    def normalize_fallback(self, data: dict[str, Any]) -> dict[str, Any]:
        """Run a flat-file snapshot through the wire model.

        Files written by older clients may not validate; those are served
        as they are.
        """
        try:
            return self.dump(data)
        except ValidationError as exc:
            logger.warning(
                "Fallback snapshot for %s does not validate (%d errors), serving as stored",
                self.name,
                exc.error_count(),
            )
            return data
