"""Sales, sale subtasks and the catalogue tables they reference."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dashsync.database import Base
from dashsync.models.base import (
    CreatedAtMixin,
    ReferenceModel,
    StringPrimaryKeyMixin,
    TimestampMixin,
)

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


class SaleChannel(StringPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "sale_channels"

    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Collection(ReferenceModel):
    __tablename__ = "collections"

    available_colors: Mapped[list | None] = mapped_column(JSONType, nullable=True)

    # Relationships
    products: Mapped[list["Product"]] = relationship(
        back_populates="collection", passive_deletes=True
    )


class Product(StringPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Cents
    revenue: Mapped[int] = mapped_column(Integer, nullable=False)
    collection_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("collections.id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    collection: Mapped["Collection"] = relationship(back_populates="products")


class Sale(StringPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "sales"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    # Cents, overrides the product's default revenue when set
    revenue: Mapped[int | None] = mapped_column(Integer, nullable=True)
    selected_color: Mapped[str | None] = mapped_column(String(64), nullable=True)
    placement_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    delivery_method: Mapped[str] = mapped_column(String(20), nullable=False)
    channel_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("sale_channels.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    subtasks: Mapped[list["SaleSubtask"]] = relationship(
        back_populates="sale", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index("ix_sales_product", "product_id"),
        Index("ix_sales_channel", "channel_id"),
    )


class SaleSubtask(StringPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "sale_subtasks"

    sale_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )

    # Relationships
    sale: Mapped["Sale"] = relationship(back_populates="subtasks")

    __table_args__ = (
        Index("ix_sale_subtasks_sale", "sale_id"),
    )
