"""Quick links domain."""

from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

from dashsync.models.quick_link import QuickLink
from dashsync.schemas.quick_link import QuickLinkItem, QuickLinkSnapshot
from dashsync.services.domain import CollectionSpec, DomainAdapter, Stage, as_utc

FAVICON_SERVICE = "https://www.google.com/s2/favicons?domain={host}&sz=64"


def favicon_for(url: str) -> str:
    """Favicon URL for a link's host, or "" when the URL has no host."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return ""
    if not host:
        return ""
    return FAVICON_SERVICE.format(host=host)


def quick_link_row(item: QuickLinkItem, now: datetime) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "url": item.url,
        "favicon_url": item.favicon_url or favicon_for(item.url),
        "order_index": item.order_index,
        "created_at": as_utc(item.created_at) or now,
        "updated_at": as_utc(item.updated_at) or now,
    }


class QuickLinksAdapter(DomainAdapter):
    name = "quick-links"
    response_key = "quickLinks"
    snapshot_model = QuickLinkSnapshot
    fallback_file = "quick-links.json"
    collections = (
        CollectionSpec(
            "quick_links", QuickLink.__table__, Stage.PRIMARY, quick_link_row,
            order_by=(("order_index", False),),
        ),
    )
