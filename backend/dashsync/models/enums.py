"""Enum types shared by models and wire schemas."""

import enum


# --- Todo Enums ---

class TodoPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TodoStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DEAD = "dead"


# --- Sales Enums ---

class SaleStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FULFILLED = "fulfilled"
    DEAD = "dead"


class DeliveryMethod(str, enum.Enum):
    SHIPPING = "shipping"
    LOCAL = "local"


# --- Calendar Enums ---

class RecurringPattern(str, enum.Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
