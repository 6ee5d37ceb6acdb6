"""Column mixins shared by every dashboard table.

Keys are client-generated strings (UUIDs in practice), so tables never
rely on a server-side default for their primary key.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from dashsync.database import Base


class StringPrimaryKeyMixin:
    """Adds a client-supplied string primary key."""

    id: Mapped[str] = mapped_column(String(255), primary_key=True)


class CreatedAtMixin:
    """Adds created_at."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class TimestampMixin(CreatedAtMixin):
    """Adds created_at and updated_at columns."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class ReferenceModel(StringPrimaryKeyMixin, CreatedAtMixin, Base):
    """Lookup table row: a named, coloured option (category, owner, ...)."""

    __abstract__ = True

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)
