"""Shared schema utilities."""

from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for the dashboard's JSON shapes.

    Fields are snake_case in Python and camelCase on the wire; either
    spelling is accepted on input.
    """

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class ReferenceOption(WireModel):
    """A named, coloured lookup option (category, owner, calendar type, ...)."""

    id: str = Field(min_length=1, max_length=255)
    name: str
    color: str = Field(max_length=7)
    created_at: datetime | None = None


class ChildItem(WireModel):
    """A checklist entry nested under a todo or a sale."""

    id: str = Field(min_length=1, max_length=255)
    text: str
    completed: bool = False


class ErrorResponse(BaseModel):
    error: str
    blocked: bool | None = None
    details: list[dict] | None = None
