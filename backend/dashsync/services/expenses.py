"""Expenses domain: expenses plus category and paid-by tags."""

from datetime import datetime
from typing import Any

from dashsync.models.expense import Expense, ExpenseCategory, ExpensePaidBy
from dashsync.schemas.expense import ExpenseItem, ExpenseSnapshot
from dashsync.services.domain import CollectionSpec, DomainAdapter, Stage, as_utc, reference_row


def expense_row(item: ExpenseItem, now: datetime) -> dict[str, Any]:
    return {
        "id": item.id,
        "paid_by": item.paid_by,
        "name": item.name,
        "vendor": item.vendor,
        "cost_cents": item.cost_cents,
        "date": as_utc(item.date),
        "category": item.category,
        "created_at": as_utc(item.created_at) or now,
        "updated_at": as_utc(item.updated_at) or now,
    }


class ExpensesAdapter(DomainAdapter):
    name = "expenses"
    response_key = "expenses"
    snapshot_model = ExpenseSnapshot
    fallback_file = "expenses.json"
    collections = (
        CollectionSpec(
            "categories", ExpenseCategory.__table__, Stage.REFERENCE, reference_row,
            order_by=(("created_at", False),),
        ),
        CollectionSpec(
            "paid_by_options", ExpensePaidBy.__table__, Stage.REFERENCE, reference_row,
            order_by=(("created_at", False),),
        ),
        CollectionSpec(
            "expenses", Expense.__table__, Stage.PRIMARY, expense_row,
            order_by=(("created_at", True),),
        ),
    )
