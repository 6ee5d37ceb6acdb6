"""Expense and expense tag models."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dashsync.database import Base
from dashsync.models.base import ReferenceModel, StringPrimaryKeyMixin, TimestampMixin


class ExpenseCategory(ReferenceModel):
    __tablename__ = "expense_categories"


class ExpensePaidBy(ReferenceModel):
    __tablename__ = "expense_paid_by"


class Expense(StringPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "expenses"

    # Tag values are stored by value, like todo categories.
    paid_by: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    vendor: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    cost_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
