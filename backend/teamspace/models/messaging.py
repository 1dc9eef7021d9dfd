"""
Teamspace Backend — Messaging SQLAlchemy Models
=================================================

What:  ORM models for `conversations`, `conversation_members` and `messages`.
Who:   Used by MessagingService.

Read state:
    Each membership row carries `last_read_at`. A message is unread for a
    member when it was created after that timestamp, or when the member has
    never read the conversation (NULL). Marking read just stamps the current
    time on the membership row.

Indexes:
    - messages (conversation_id, created_at): latest-message and unread-count
      queries both filter by conversation and compare/aggregate created_at
    - conversation_members (user_id): "conversations I belong to"
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from teamspace.database import Base
from teamspace.models.user import utcnow


class Conversation(Base):
    """A messaging thread, direct or group."""

    __tablename__ = "conversations"

    conversation_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    team_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("teams.team_id", ondelete="SET NULL"),
        nullable=True,
    )

    # NULL name: the title is derived from participant names
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    is_direct: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Conversation(conversation_id={self.conversation_id}, name={self.name!r})>"


class ConversationMember(Base):
    """A participant in a conversation and their read position."""

    __tablename__ = "conversation_members"

    conversation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("conversations.conversation_id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )

    last_read_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_conversation_members_user", user_id),
    )

    def __repr__(self) -> str:
        return (
            f"<ConversationMember(conversation_id={self.conversation_id}, "
            f"user_id={self.user_id}, last_read_at={self.last_read_at})>"
        )


class Message(Base):
    """A text message posted to a conversation."""

    __tablename__ = "messages"

    message_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    conversation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("conversations.conversation_id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_messages_conversation_created", conversation_id, created_at),
    )

    def __repr__(self) -> str:
        return (
            f"<Message(message_id={self.message_id}, "
            f"conversation_id={self.conversation_id}, sender_id={self.sender_id})>"
        )
