"""Pydantic schemas for the snapshot sync endpoints."""

from pydantic import BaseModel


class TableCountsRead(BaseModel):
    inserted: int
    updated: int
    deleted: int


class SyncResponse(BaseModel):
    success: bool = True
    method: str = "upsert"
    counts: dict[str, TableCountsRead] | None = None
