"""Todos domain: todos with subtasks, plus category and owner options."""

from datetime import datetime
from typing import Any

from dashsync.models.todo import Category, Owner, Subtask, Todo
from dashsync.schemas.todo import TodoItem, TodoSnapshot
from dashsync.services.domain import (
    ChildSpec,
    CollectionSpec,
    DomainAdapter,
    Stage,
    as_utc,
    checklist_row,
    reference_row,
)


def todo_row(item: TodoItem, now: datetime) -> dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "category": item.category,
        "owner": item.owner,
        "priority": item.priority.value,
        "status": item.status.value,
        "due_date": as_utc(item.due_date),
        "completed": item.completed,
        "notes": item.notes,
        "created_at": as_utc(item.created_at) or now,
        "updated_at": as_utc(item.updated_at) or now,
    }


class TodosAdapter(DomainAdapter):
    name = "todos"
    response_key = "todos"
    snapshot_model = TodoSnapshot
    fallback_file = "todos.json"
    collections = (
        CollectionSpec(
            "categories", Category.__table__, Stage.REFERENCE, reference_row,
            order_by=(("created_at", False),),
        ),
        CollectionSpec(
            "owners", Owner.__table__, Stage.REFERENCE, reference_row,
            order_by=(("created_at", False),),
        ),
        CollectionSpec(
            "todos", Todo.__table__, Stage.PRIMARY, todo_row,
            children=(ChildSpec("subtasks", Subtask.__table__, "todo_id", checklist_row("todo_id")),),
            order_by=(("created_at", True),),
        ),
    )
