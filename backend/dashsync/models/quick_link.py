"""Quick link model."""

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dashsync.database import Base
from dashsync.models.base import StringPrimaryKeyMixin, TimestampMixin


class QuickLink(StringPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "quick_links"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    favicon_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    __table_args__ = (
        Index("ix_quick_links_order", "order_index"),
    )
