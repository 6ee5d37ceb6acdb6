"""Todo, subtask and todo lookup models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dashsync.database import Base
from dashsync.models.base import (
    CreatedAtMixin,
    ReferenceModel,
    StringPrimaryKeyMixin,
    TimestampMixin,
)


class Category(ReferenceModel):
    __tablename__ = "categories"


class Owner(ReferenceModel):
    __tablename__ = "owners"


class Todo(StringPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "todos"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    # Category and owner are stored by value, not by foreign key.
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    owner: Mapped[str] = mapped_column(String(255), nullable=False)
    priority: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    subtasks: Mapped[list["Subtask"]] = relationship(
        back_populates="todo", cascade="all, delete-orphan", passive_deletes=True
    )


class Subtask(StringPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "subtasks"

    todo_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("todos.id", ondelete="CASCADE"), nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )

    # Relationships
    todo: Mapped["Todo"] = relationship(back_populates="subtasks")

    __table_args__ = (
        Index("ix_subtasks_todo", "todo_id"),
    )
