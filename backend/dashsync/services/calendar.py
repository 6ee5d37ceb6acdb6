"""Calendar domain: events, calendar types and event reminders.

Reminders are a flat list on the wire. They are nested under their events
on the way in, so they are reconciled per event like subtasks, and
flattened again on the way out.
"""

from collections import defaultdict
from datetime import datetime
from typing import Any

from dashsync.models.calendar import CalendarEvent, CalendarType, EventReminder
from dashsync.schemas.calendar import CalendarEventItem, CalendarSnapshot, ReminderItem
from dashsync.services.domain import (
    ChildSpec,
    CollectionSpec,
    DomainAdapter,
    Snapshot,
    Stage,
    as_utc,
    reference_row,
)


def event_row(item: CalendarEventItem, now: datetime) -> dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "location": item.location,
        "calendar_type_id": item.calendar_type_id or None,
        "start_time": as_utc(item.start_time),
        "end_time": as_utc(item.end_time),
        "all_day": item.all_day,
        "recurring_pattern": item.recurring_pattern.value if item.recurring_pattern else None,
        "recurring_end_date": as_utc(item.recurring_end_date),
        "created_at": as_utc(item.created_at) or now,
        "updated_at": as_utc(item.updated_at) or now,
    }


def reminder_row(item: ReminderItem, event_id: str, now: datetime) -> dict[str, Any]:
    return {
        "id": item.id,
        "event_id": event_id,
        "minutes_before": item.minutes_before,
        "created_at": as_utc(item.created_at) or now,
    }


class CalendarAdapter(DomainAdapter):
    name = "calendar"
    response_key = "calendar"
    snapshot_model = CalendarSnapshot
    fallback_file = "calendar.json"
    collections = (
        CollectionSpec(
            "calendar_types", CalendarType.__table__, Stage.REFERENCE, reference_row,
            order_by=(("created_at", False),),
        ),
        CollectionSpec(
            "events", CalendarEvent.__table__, Stage.PRIMARY, event_row,
            children=(ChildSpec("reminders", EventReminder.__table__, "event_id", reminder_row),),
            order_by=(("start_time", False),),
        ),
    )

    def to_snapshot(self, payload: CalendarSnapshot) -> Snapshot:
        by_event: dict[str, list[ReminderItem]] = defaultdict(list)
        for reminder in payload.reminders or []:
            by_event[reminder.event_id].append(reminder)
        return self.build_snapshot(payload, lambda child, event: by_event.get(event.id, []))

    def to_wire(
        self,
        rows: dict[str, list[dict[str, Any]]],
        children: dict[str, dict[str, list[dict[str, Any]]]],
    ) -> dict[str, Any]:
        reminders = children.get("reminders", {})
        events = rows.get("events", [])
        return self.dump({
            "events": events,
            "calendar_types": rows.get("calendar_types", []),
            "reminders": [r for event in events for r in reminders.get(event["id"], [])],
        })
