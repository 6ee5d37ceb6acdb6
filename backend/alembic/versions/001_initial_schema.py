"""Initial schema - all dashboard tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(255), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _reference_table(name: str) -> None:
    op.create_table(
        name,
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("color", sa.String(7), nullable=False),
        _created_at(),
    )


def upgrade() -> None:
    # --- Todos ---

    _reference_table("categories")
    _reference_table("owners")

    op.create_table(
        "todos",
        _id(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("category", sa.String(255), nullable=False),
        sa.Column("owner", sa.String(255), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed", sa.Boolean, server_default="false", nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        _created_at(),
        _updated_at(),
    )

    op.create_table(
        "subtasks",
        _id(),
        sa.Column("todo_id", sa.String(255), sa.ForeignKey("todos.id", ondelete="CASCADE"), nullable=False),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("completed", sa.Boolean, server_default="false", nullable=False),
        _created_at(),
    )
    op.create_index("ix_subtasks_todo", "subtasks", ["todo_id"])

    # --- Sales ---

    op.create_table(
        "sale_channels",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        _created_at(),
    )

    op.create_table(
        "collections",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("color", sa.String(7), nullable=False),
        sa.Column("available_colors", postgresql.JSONB, nullable=True),
        _created_at(),
    )

    op.create_table(
        "products",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("revenue", sa.Integer, nullable=False),
        sa.Column(
            "collection_id", sa.String(255),
            sa.ForeignKey("collections.id", ondelete="CASCADE"), nullable=False,
        ),
        _created_at(),
    )

    op.create_table(
        "sales",
        _id(),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("product_id", sa.String(255), sa.ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
        sa.Column("revenue", sa.Integer, nullable=True),
        sa.Column("selected_color", sa.String(64), nullable=True),
        sa.Column("placement_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("delivery_method", sa.String(20), nullable=False),
        sa.Column("channel_id", sa.String(255), sa.ForeignKey("sale_channels.id", ondelete="SET NULL"), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_sales_product", "sales", ["product_id"])
    op.create_index("ix_sales_channel", "sales", ["channel_id"])

    op.create_table(
        "sale_subtasks",
        _id(),
        sa.Column("sale_id", sa.String(255), sa.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("completed", sa.Boolean, server_default="false", nullable=False),
        _created_at(),
    )
    op.create_index("ix_sale_subtasks_sale", "sale_subtasks", ["sale_id"])

    # --- Expenses ---

    _reference_table("expense_categories")
    _reference_table("expense_paid_by")

    op.create_table(
        "expenses",
        _id(),
        sa.Column("paid_by", sa.String(255), nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("vendor", sa.Text, server_default="", nullable=False),
        sa.Column("cost_cents", sa.Integer, server_default="0", nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("category", sa.String(255), nullable=False),
        _created_at(),
        _updated_at(),
    )

    # --- Quick links ---

    op.create_table(
        "quick_links",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("url", sa.Text, nullable=False),
        sa.Column("favicon_url", sa.Text, nullable=True),
        sa.Column("order_index", sa.Integer, server_default="0", nullable=False),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_quick_links_order", "quick_links", ["order_index"])

    # --- Calendar ---

    _reference_table("calendar_types")

    op.create_table(
        "calendar_events",
        _id(),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.Text, nullable=True),
        sa.Column(
            "calendar_type_id", sa.String(255),
            sa.ForeignKey("calendar_types.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("all_day", sa.Boolean, server_default="false", nullable=False),
        sa.Column("recurring_pattern", sa.String(20), nullable=True),
        sa.Column("recurring_end_date", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_calendar_events_type", "calendar_events", ["calendar_type_id"])
    op.create_index("ix_calendar_events_start", "calendar_events", ["start_time"])

    op.create_table(
        "event_reminders",
        _id(),
        sa.Column(
            "event_id", sa.String(255),
            sa.ForeignKey("calendar_events.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("minutes_before", sa.Integer, nullable=False),
        _created_at(),
    )
    op.create_index("ix_event_reminders_event", "event_reminders", ["event_id"])


def downgrade() -> None:
    for table in (
        "event_reminders",
        "calendar_events",
        "calendar_types",
        "quick_links",
        "expenses",
        "expense_paid_by",
        "expense_categories",
        "sale_subtasks",
        "sales",
        "products",
        "collections",
        "sale_channels",
        "subtasks",
        "todos",
        "owners",
        "categories",
    ):
        op.drop_table(table)
