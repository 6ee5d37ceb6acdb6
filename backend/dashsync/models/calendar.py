"""Calendar event, calendar type and reminder models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dashsync.database import Base
from dashsync.models.base import (
    CreatedAtMixin,
    ReferenceModel,
    StringPrimaryKeyMixin,
    TimestampMixin,
)


class CalendarType(ReferenceModel):
    __tablename__ = "calendar_types"


class CalendarEvent(StringPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "calendar_events"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    calendar_type_id: Mapped[str | None] = mapped_column(
        String(255), ForeignKey("calendar_types.id", ondelete="SET NULL"), nullable=True
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    all_day: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    recurring_pattern: Mapped[str | None] = mapped_column(String(20), nullable=True)
    recurring_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    reminders: Mapped[list["EventReminder"]] = relationship(
        back_populates="event", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index("ix_calendar_events_type", "calendar_type_id"),
        Index("ix_calendar_events_start", "start_time"),
    )


class EventReminder(StringPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "event_reminders"

    event_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("calendar_events.id", ondelete="CASCADE"), nullable=False
    )
    minutes_before: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    event: Mapped["CalendarEvent"] = relationship(back_populates="reminders")

    __table_args__ = (
        Index("ix_event_reminders_event", "event_id"),
    )
