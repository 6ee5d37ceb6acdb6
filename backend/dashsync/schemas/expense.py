"""Wire schemas for the expenses domain."""

from datetime import datetime

from pydantic import Field, field_validator

from dashsync.schemas import ReferenceOption, WireModel


class ExpenseItem(WireModel):
    id: str = Field(min_length=1, max_length=255)
    paid_by: str
    name: str
    vendor: str = ""
    cost_cents: int = 0
    date: datetime | None = None
    category: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("vendor", mode="before")
    @classmethod
    def missing_vendor_is_blank(cls, v):
        return "" if v is None else v

    @field_validator("cost_cents", mode="before")
    @classmethod
    def missing_cost_is_zero(cls, v):
        return 0 if v is None else v


class ExpenseSnapshot(WireModel):
    expenses: list[ExpenseItem] | None = None
    categories: list[ReferenceOption] | None = None
    paid_by_options: list[ReferenceOption] | None = None
