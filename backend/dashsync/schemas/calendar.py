"""Wire schemas for the calendar domain.

Reminders travel as a flat top-level list that points at events through
``eventId``.
"""

from datetime import datetime

from pydantic import Field, model_validator

from dashsync.models.enums import RecurringPattern
from dashsync.schemas import ReferenceOption, WireModel


class CalendarEventItem(WireModel):
    id: str = Field(min_length=1, max_length=255)
    title: str
    description: str | None = None
    location: str | None = None
    calendar_type_id: str | None = None
    start_time: datetime
    end_time: datetime
    all_day: bool = False
    recurring_pattern: RecurringPattern | None = None
    recurring_end_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ReminderItem(WireModel):
    id: str = Field(min_length=1, max_length=255)
    event_id: str = Field(min_length=1, max_length=255)
    minutes_before: int = Field(ge=0)
    created_at: datetime | None = None


class CalendarSnapshot(WireModel):
    events: list[CalendarEventItem] | None = None
    calendar_types: list[ReferenceOption] | None = None
    reminders: list[ReminderItem] | None = None

    @model_validator(mode="after")
    def reminders_point_at_events(self):
        if not self.reminders:
            return self
        event_ids = {event.id for event in self.events or []}
        dangling = sorted({r.event_id for r in self.reminders if r.event_id not in event_ids})
        if dangling:
            raise ValueError(f"reminders reference unknown events: {', '.join(dangling)}")
        return self
