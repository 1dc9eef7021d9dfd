"""
Teamspace Backend — Messaging Service (Conversations, Messages, Read State)
=============================================================================

What:  Conversation summaries for the inbox, message listing/sending, read
       tracking, and the default team conversation.
Who:   Called by /api/messaging routes.

Summary computation (`get_summaries_for_user`), four queries regardless of
how many conversations the caller has:

    ┌────────────────────┐   ┌──────────────┐   ┌──────────────┐   ┌──────────────┐
    │ my conversations   │──▶│ participants │──▶│ latest msg   │──▶│ unread count │
    │ newest first       │   │ (batched)    │   │ per conv     │   │ per conv     │
    └────────────────────┘   └──────────────┘   └──────────────┘   └──────────────┘

    - No conversations → [] and no further queries
    - Latest message: MAX(created_at) per conversation joined back to
      messages; equal timestamps resolve to the higher message_id
    - Unread: created_at > my last_read_at, or everything when I never read
    - Output keeps the order of the first query

Title resolution (`resolve_conversation_title`):
    explicit name → other participants' names → all participants' names →
    "Direct Message"
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.exceptions import PermissionDeniedError, ValidationError
from teamspace.models.messaging import Conversation, ConversationMember, Message
from teamspace.models.user import User, utcnow
from teamspace.schemas.messaging import (
    ConversationSummary,
    LastMessage,
    MessageResponse,
    MessageSender,
    Participant,
)
from teamspace.services.team_service import team_service

logger = logging.getLogger(__name__)

DEFAULT_CONVERSATION_NAME = "General"
DIRECT_MESSAGE_TITLE = "Direct Message"
WELCOME_MESSAGE = "Welcome to the team chat! Feel free to start the conversation."
TEAMMATE_GREETING = "Hi {name}! Looking forward to collaborating with you."


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive values; rows flushed in this session are aware."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _display_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()


def resolve_conversation_title(
    name: Optional[str],
    participants: Iterable[Participant],
    user_id: int,
) -> str:
    """Pure function; see module docstring for the fallback chain."""
    if name:
        return name

    participants = list(participants)
    others = [
        _display_name(p.first_name, p.last_name)
        for p in participants
        if p.user_id != user_id
    ]
    others = [n for n in others if n]
    if others:
        return ", ".join(others)

    everyone = [_display_name(p.first_name, p.last_name) for p in participants]
    everyone = [n for n in everyone if n]
    if everyone:
        return ", ".join(everyone)

    return DIRECT_MESSAGE_TITLE


class MessagingService:

    # ── Membership ────────────────────────────────────────────────────────

    async def is_member(self, db: AsyncSession, conversation_id: int, user_id: int) -> bool:
        result = await db.execute(
            select(ConversationMember.user_id).where(
                ConversationMember.conversation_id == conversation_id,
                ConversationMember.user_id == user_id,
            )
        )
        return result.first() is not None

    async def require_member(self, db: AsyncSession, conversation_id: int, user_id: int) -> None:
        """
        Raises:
            PermissionDeniedError: caller is not in the conversation (→ 403).
                A conversation that does not exist has no members, so it
                reports the same way.
        """
        if not await self.is_member(db, conversation_id, user_id):
            raise PermissionDeniedError(message="Access denied")

    async def add_member(self, db: AsyncSession, conversation_id: int, user_id: int) -> None:
        """No-op when the user is already a member."""
        if await self.is_member(db, conversation_id, user_id):
            return
        db.add(ConversationMember(conversation_id=conversation_id, user_id=user_id))
        await db.flush()

    # ── Bootstrap ─────────────────────────────────────────────────────────

    async def ensure_default_conversation(
        self,
        db: AsyncSession,
        team_id: int,
        user_id: int,
    ) -> int:
        """
        Returns the caller's first conversation, creating a "General" team
        conversation with a welcome message (and a teammate's greeting when the
        team has more than one member) if the caller has none.
        """
        result = await db.execute(
            select(ConversationMember.conversation_id)
            .join(Conversation, Conversation.conversation_id == ConversationMember.conversation_id)
            .where(ConversationMember.user_id == user_id)
            .order_by(Conversation.created_at.asc(), Conversation.conversation_id.asc())
            .limit(1)
        )
        existing = result.scalar_one_or_none()
        if existing is not None:
            return existing

        conversation = Conversation(team_id=team_id, name=DEFAULT_CONVERSATION_NAME, is_direct=False)
        db.add(conversation)
        await db.flush()

        members = await team_service.get_members(db, team_id)
        member_ids = [m.user_id for m in members] or [user_id]
        if user_id not in member_ids:
            member_ids.append(user_id)
        for member_id in member_ids:
            await self.add_member(db, conversation.conversation_id, member_id)

        await self.create_message(db, conversation.conversation_id, user_id, WELCOME_MESSAGE)

        if len(members) > 1:
            teammate = next((m for m in members if m.user_id != user_id), None)
            me = next((m for m in members if m.user_id == user_id), None)
            if teammate is not None:
                greeting = TEAMMATE_GREETING.format(name=(me.first_name if me else None) or "there")
                await self.create_message(db, conversation.conversation_id, teammate.user_id, greeting)

        logger.info(
            "Created default conversation %s for user %s in team %s",
            conversation.conversation_id, user_id, team_id,
        )
        return conversation.conversation_id

    # ── Summaries ─────────────────────────────────────────────────────────

    async def get_summaries_for_user(
        self,
        db: AsyncSession,
        user_id: int,
    ) -> List[ConversationSummary]:
        result = await db.execute(
            select(Conversation)
            .join(
                ConversationMember,
                and_(
                    ConversationMember.conversation_id == Conversation.conversation_id,
                    ConversationMember.user_id == user_id,
                ),
            )
            .order_by(Conversation.created_at.desc(), Conversation.conversation_id.desc())
        )
        conversations = list(result.scalars().all())
        if not conversations:
            return []

        ids = [c.conversation_id for c in conversations]
        participants = await self._participants_by_conversation(db, ids)
        latest = await self._latest_message_by_conversation(db, ids)
        unread = await self._unread_counts(db, ids, user_id)

        return [
            ConversationSummary(
                conversation_id=c.conversation_id,
                title=resolve_conversation_title(
                    c.name, participants.get(c.conversation_id, []), user_id
                ),
                is_direct=c.is_direct,
                created_at=c.created_at,
                unread_count=unread.get(c.conversation_id, 0),
                last_message=latest.get(c.conversation_id),
                participants=participants.get(c.conversation_id, []),
            )
            for c in conversations
        ]

    async def _participants_by_conversation(
        self, db: AsyncSession, ids: List[int]
    ) -> Dict[int, List[Participant]]:
        result = await db.execute(
            select(ConversationMember.conversation_id, User)
            .join(User, User.user_id == ConversationMember.user_id)
            .where(ConversationMember.conversation_id.in_(ids))
            .order_by(
                ConversationMember.conversation_id,
                ConversationMember.joined_at.asc(),
                ConversationMember.user_id.asc(),
            )
        )
        grouped: Dict[int, List[Participant]] = defaultdict(list)
        for conversation_id, user in result.all():
            grouped[conversation_id].append(
                Participant(
                    user_id=user.user_id,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    email=user.email,
                    pfp_url=user.pfp_url,
                    job_title=user.job_title,
                )
            )
        return grouped

    async def _latest_message_by_conversation(
        self, db: AsyncSession, ids: List[int]
    ) -> Dict[int, LastMessage]:
        newest = (
            select(
                Message.conversation_id.label("conversation_id"),
                func.max(Message.created_at).label("max_created_at"),
            )
            .where(Message.conversation_id.in_(ids))
            .group_by(Message.conversation_id)
            .subquery()
        )
        result = await db.execute(
            select(Message, User)
            .join(
                newest,
                and_(
                    newest.c.conversation_id == Message.conversation_id,
                    newest.c.max_created_at == Message.created_at,
                ),
            )
            .join(User, User.user_id == Message.sender_id)
            # Ascending so that on a timestamp tie the higher id is written last
            .order_by(Message.message_id.asc())
        )
        latest: Dict[int, LastMessage] = {}
        for message, sender in result.all():
            latest[message.conversation_id] = LastMessage(
                message_id=message.message_id,
                content=message.content,
                created_at=message.created_at,
                sender=MessageSender(
                    user_id=sender.user_id,
                    first_name=sender.first_name,
                    last_name=sender.last_name,
                    email=sender.email,
                    pfp_url=sender.pfp_url,
                ),
            )
        return latest

    async def _unread_counts(
        self, db: AsyncSession, ids: List[int], user_id: int
    ) -> Dict[int, int]:
        result = await db.execute(
            select(Message.conversation_id, func.count(Message.message_id))
            .join(
                ConversationMember,
                and_(
                    ConversationMember.conversation_id == Message.conversation_id,
                    ConversationMember.user_id == user_id,
                ),
            )
            .where(
                Message.conversation_id.in_(ids),
                or_(
                    ConversationMember.last_read_at.is_(None),
                    Message.created_at > ConversationMember.last_read_at,
                ),
            )
            .group_by(Message.conversation_id)
        )
        return {conversation_id: count for conversation_id, count in result.all()}

    # ── Messages ──────────────────────────────────────────────────────────

    async def create_message(
        self,
        db: AsyncSession,
        conversation_id: int,
        sender_id: int,
        content: str,
    ) -> Message:
        message = Message(conversation_id=conversation_id, sender_id=sender_id, content=content)
        db.add(message)
        await db.flush()
        return message

    async def list_messages(
        self,
        db: AsyncSession,
        conversation_id: int,
        user_id: int,
    ) -> List[MessageResponse]:
        """
        Oldest first, with sender names. `is_read` is relative to the caller's
        read position before this call.
        """
        await self.require_member(db, conversation_id, user_id)

        read_result = await db.execute(
            select(ConversationMember.last_read_at).where(
                ConversationMember.conversation_id == conversation_id,
                ConversationMember.user_id == user_id,
            )
        )
        last_read_at = read_result.scalar_one_or_none()

        result = await db.execute(
            select(Message, User)
            .outerjoin(User, User.user_id == Message.sender_id)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.message_id.asc())
        )
        return [
            MessageResponse(
                message_id=message.message_id,
                conversation_id=message.conversation_id,
                sender_id=message.sender_id,
                content=message.content,
                created_at=message.created_at,
                first_name=sender.first_name if sender else None,
                last_name=sender.last_name if sender else None,
                email=sender.email if sender else None,
                pfp_url=sender.pfp_url if sender else None,
                is_read=(
                    last_read_at is not None
                    and _as_utc(message.created_at) <= _as_utc(last_read_at)
                ),
            )
            for message, sender in result.all()
        ]

    async def send_message(
        self,
        db: AsyncSession,
        conversation_id: int,
        user_id: int,
        content: Optional[str],
    ) -> List[MessageResponse]:
        """
        Posts trimmed content and returns the updated message list.

        Raises:
            ValidationError: content missing or blank (→ 400)
            PermissionDeniedError: caller not a member (→ 403)
        """
        text = (content or "").strip()
        if not text:
            raise ValidationError(message="Message content is required", field="content")

        await self.require_member(db, conversation_id, user_id)

        message = await self.create_message(db, conversation_id, user_id, text)
        logger.info(
            "Message %s sent to conversation %s by user %s",
            message.message_id, conversation_id, user_id,
        )
        return await self.list_messages(db, conversation_id, user_id)

    async def mark_read(self, db: AsyncSession, conversation_id: int, user_id: int) -> None:
        """Idempotent: stamps the current UTC time on the caller's membership row."""
        await db.execute(
            update(ConversationMember)
            .where(
                ConversationMember.conversation_id == conversation_id,
                ConversationMember.user_id == user_id,
            )
            .values(last_read_at=utcnow())
        )


# ── Singleton Instance ────────────────────────────────────────────────────
messaging_service = MessagingService()
