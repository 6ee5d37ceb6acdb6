"""Sales domain: sales with subtasks, plus the catalogue they point at.

Catalogue rows (channels, collections, products) are written before the
sales that reference them and deleted after.
"""

from datetime import datetime
from typing import Any

from dashsync.models.sales import Collection, Product, Sale, SaleChannel, SaleSubtask
from dashsync.schemas.sales import (
    CollectionItem,
    ProductItem,
    SaleChannelItem,
    SaleItem,
    SalesSnapshot,
)
from dashsync.services.domain import (
    ChildSpec,
    CollectionSpec,
    DomainAdapter,
    Stage,
    as_utc,
    checklist_row,
)


def channel_row(item: SaleChannelItem, now: datetime) -> dict[str, Any]:
    return {"id": item.id, "name": item.name, "created_at": as_utc(item.created_at) or now}


def collection_row(item: CollectionItem, now: datetime) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "color": item.color,
        "available_colors": [option.model_dump() for option in item.available_colors],
        "created_at": as_utc(item.created_at) or now,
    }


def product_row(item: ProductItem, now: datetime) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "revenue": item.revenue,
        "collection_id": item.collection_id,
        "created_at": as_utc(item.created_at) or now,
    }


def sale_row(item: SaleItem, now: datetime) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "product_id": item.product_id or None,
        "revenue": item.revenue,
        "selected_color": item.selected_color,
        "placement_date": as_utc(item.placement_date),
        "delivery_method": item.delivery_method.value,
        "channel_id": item.channel_id or None,
        "status": item.status.value,
        "notes": item.notes,
        "created_at": as_utc(item.created_at) or now,
        "updated_at": as_utc(item.updated_at) or now,
    }


class SalesAdapter(DomainAdapter):
    name = "sales"
    response_key = "sales"
    snapshot_model = SalesSnapshot
    fallback_file = "sales.json"
    collections = (
        CollectionSpec(
            "channels", SaleChannel.__table__, Stage.REFERENCE, channel_row,
            order_by=(("name", False),),
        ),
        CollectionSpec(
            "collections", Collection.__table__, Stage.REFERENCE, collection_row,
            order_by=(("name", False),),
        ),
        CollectionSpec(
            "products", Product.__table__, Stage.REFERENCE, product_row,
            order_by=(("name", False),),
        ),
        CollectionSpec(
            "sales", Sale.__table__, Stage.PRIMARY, sale_row,
            children=(
                ChildSpec("subtasks", SaleSubtask.__table__, "sale_id", checklist_row("sale_id")),
            ),
            order_by=(("created_at", True),),
        ),
    )
