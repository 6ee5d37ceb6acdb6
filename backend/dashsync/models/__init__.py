"""All dashboard database models.

Import all models here so Alembic and SQLAlchemy can discover them.
"""

from dashsync.database import Base  # noqa: F401

# Todos
from dashsync.models.todo import Category, Owner, Subtask, Todo  # noqa: F401

# Sales
from dashsync.models.sales import (  # noqa: F401
    Collection,
    Product,
    Sale,
    SaleChannel,
    SaleSubtask,
)

# Expenses
from dashsync.models.expense import Expense, ExpenseCategory, ExpensePaidBy  # noqa: F401

# Quick links
from dashsync.models.quick_link import QuickLink  # noqa: F401

# Calendar
from dashsync.models.calendar import CalendarEvent, CalendarType, EventReminder  # noqa: F401
