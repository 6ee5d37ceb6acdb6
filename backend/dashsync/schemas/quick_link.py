"""Wire schemas for the quick links domain."""

from datetime import datetime

from pydantic import Field

from dashsync.schemas import WireModel


class QuickLinkItem(WireModel):
    id: str = Field(min_length=1, max_length=255)
    name: str
    url: str
    favicon_url: str | None = None
    order_index: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class QuickLinkSnapshot(WireModel):
    quick_links: list[QuickLinkItem] | None = None
