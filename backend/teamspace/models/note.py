"""
Teamspace Backend — Note SQLAlchemy Model
===========================================

What:  ORM model representing the `notes` table (the SPA calls these "Pages").
Who:   Used by NoteService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - noter_id: owning user; ON DELETE CASCADE so a deleted account takes its notes
    - title: defaults to 'Untitled' both in Python and in the column default
    - termination_marked: soft-delete flag; marked notes disappear from listings
      but can still be fetched by id until they are hard-deleted

    Index on (noter_id, created_at DESC):
        Serves the only listing pattern: "my notes, newest first"
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from teamspace.database import Base
from teamspace.models.user import utcnow

DEFAULT_NOTE_TITLE = "Untitled"


class Note(Base):
    """
    A text document owned by exactly one user.

    Query Patterns:
        - List my notes: WHERE noter_id = :uid AND termination_marked = false
          ORDER BY created_at DESC LIMIT :limit OFFSET :offset
        - Get single note: WHERE note_id = :id (ownership checked in the service)
    """

    __tablename__ = "notes"

    note_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    noter_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=DEFAULT_NOTE_TITLE,
        server_default=text(f"'{DEFAULT_NOTE_TITLE}'"),
    )

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    termination_marked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    __table_args__ = (
        Index("idx_notes_noter_created_at", noter_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Note(note_id={self.note_id}, noter_id={self.noter_id}, title='{self.title}')>"
