"""Wire schemas for the todos domain."""

from datetime import datetime

from pydantic import Field

from dashsync.models.enums import TodoPriority, TodoStatus
from dashsync.schemas import ChildItem, ReferenceOption, WireModel


class TodoItem(WireModel):
    id: str = Field(min_length=1, max_length=255)
    title: str
    category: str
    owner: str
    priority: TodoPriority
    status: TodoStatus
    due_date: datetime | None = None
    completed: bool = False
    notes: str | None = None
    subtasks: list[ChildItem] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TodoSnapshot(WireModel):
    todos: list[TodoItem] | None = None
    categories: list[ReferenceOption] | None = None
    owners: list[ReferenceOption] | None = None
