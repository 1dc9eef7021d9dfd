"""
Teamspace Backend — Team and TeamMember SQLAlchemy Models
===========================================================

What:  ORM models for the `teams` and `team_members` tables.
Who:   Used by TeamService (roster, bootstrap), EventService (team scoping)
       and MessagingService (default team conversation).

Table Design Rationale:
    - teams.created_by: SET NULL on delete so a team outlives its creator
    - team_members (team_id, user_id) UNIQUE: a user appears once per team;
      this is also the backstop for concurrent bootstrap inserts
    - team_members.role: 'member' | 'admin'
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from teamspace.database import Base
from teamspace.models.user import utcnow


class Team(Base):
    """A roster of users sharing events and a default conversation."""

    __tablename__ = "teams"

    team_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Team(team_id={self.team_id}, name='{self.name}')>"


class TeamMember(Base):
    """Membership of one user in one team, with a team-level role."""

    __tablename__ = "team_members"

    team_member_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    team_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("teams.team_id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="member",
        server_default=text("'member'"),
    )

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_members_team_user"),
        CheckConstraint("role IN ('member', 'admin')", name="ck_team_members_role"),
    )

    def __repr__(self) -> str:
        return (
            f"<TeamMember(team_id={self.team_id}, user_id={self.user_id}, "
            f"role='{self.role}')>"
        )
