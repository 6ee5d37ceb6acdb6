"""Wire schemas for the sales domain."""

from datetime import datetime
from typing import Any

from pydantic import Field, model_validator

from dashsync.models.enums import DeliveryMethod, SaleStatus
from dashsync.schemas import ChildItem, WireModel


def format_color_label(value: str, provided_name: str | None = None) -> str:
    """Label for a palette entry: the given name, else the hex value upper-cased."""
    if provided_name and provided_name.strip():
        return provided_name.strip()
    trimmed = value.strip() if isinstance(value, str) else ""
    if not trimmed:
        return "Unknown"
    return trimmed.upper() if trimmed.startswith("#") else trimmed


def normalize_available_colors(raw: Any, base_color: Any) -> list[dict[str, str]]:
    """Clean a collection's colour palette.

    Entries may be plain strings or ``{value, name}`` objects. Blank and
    repeated values are dropped, and the collection's own colour is put
    first when the palette does not already contain it.
    """
    normalized: list[dict[str, str]] = []
    seen: set[str] = set()

    for entry in raw if isinstance(raw, list) else []:
        if isinstance(entry, str):
            value, name = entry.strip(), None
        elif isinstance(entry, dict):
            value = entry.get("value").strip() if isinstance(entry.get("value"), str) else ""
            name = entry.get("name") if isinstance(entry.get("name"), str) else None
        else:
            continue
        if not value or value in seen:
            continue
        normalized.append({"value": value, "name": format_color_label(value, name)})
        seen.add(value)

    fallback = base_color.strip() if isinstance(base_color, str) else ""
    if fallback and fallback not in seen:
        normalized.insert(0, {"value": fallback, "name": format_color_label(fallback)})
    return normalized


class ColorOption(WireModel):
    value: str
    name: str


class SaleChannelItem(WireModel):
    id: str = Field(min_length=1, max_length=255)
    name: str
    created_at: datetime | None = None


class CollectionItem(WireModel):
    id: str = Field(min_length=1, max_length=255)
    name: str
    color: str = Field(max_length=7)
    available_colors: list[ColorOption] = Field(default_factory=list)
    created_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def normalize_palette(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw = data.pop("availableColors", None)
        raw = data.pop("available_colors", raw)
        data["availableColors"] = normalize_available_colors(raw, data.get("color"))
        return data


class ProductItem(WireModel):
    id: str = Field(min_length=1, max_length=255)
    name: str
    revenue: int
    collection_id: str = Field(min_length=1, max_length=255)
    created_at: datetime | None = None


class SaleItem(WireModel):
    id: str = Field(min_length=1, max_length=255)
    name: str
    product_id: str | None = None
    revenue: int | None = None
    selected_color: str | None = None
    placement_date: datetime
    delivery_method: DeliveryMethod
    channel_id: str | None = None
    status: SaleStatus
    notes: str | None = None
    subtasks: list[ChildItem] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SalesSnapshot(WireModel):
    sales: list[SaleItem] | None = None
    collections: list[CollectionItem] | None = None
    products: list[ProductItem] | None = None
    channels: list[SaleChannelItem] | None = None
