"""
NoteDeck Backend — Note SQLAlchemy Model
=========================================

What:  ORM mapping of the `notes` table in the hosted database.
Who:   Used by NoteService for insert, select-all and delete-by-id.

Columns:
    - id: UUID primary key, assigned at insert; the only key used for deletion
    - title: Required, non-empty (enforced by the service, not the column)
    - description: Free text, may be empty
    - created_at: Stamped by the caller at creation time (UTC)

Notes are immutable: there is no update path, only create and delete.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from notedeck.database import Base


class Note(Base):
    __tablename__ = "notes"

    # Generic Uuid maps to native UUID on PostgreSQL and CHAR(32) elsewhere
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, created_at='{self.created_at}')>"
