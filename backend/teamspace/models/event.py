"""
Teamspace Backend — Event SQLAlchemy Model
============================================

What:  ORM model for the `events` table (team calendar items).
Who:   Used by EventService.

Table Design Rationale:
    - team_id: every event is scoped to one team (CASCADE with the team)
    - created_by: CASCADE, a deleted user's events go with them
    - assigned_to_user_id: optional assignee; SET NULL if that user is deleted
    - Index on (team_id, start_time): the calendar lists a team's events by start time
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from teamspace.database import Base
from teamspace.models.user import utcnow


class Event(Base):
    """A calendar entry belonging to a team."""

    __tablename__ = "events"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    team_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("teams.team_id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    assigned_to_user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    created_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_events_team_start", team_id, start_time),
    )

    def __repr__(self) -> str:
        return f"<Event(event_id={self.event_id}, team_id={self.team_id}, title='{self.title}')>"
