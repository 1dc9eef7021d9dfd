"""
Teamspace Backend — Note Service (Business Logic)
===================================================

What:  Create, list, search, read, edit, soft-delete and hard-delete notes.
Why:   Encapsulates ownership rules and pagination, independent of HTTP concerns.
Who:   Called by /api/notes route handlers.

Access rules:
    - Read one note: owner or admin
    - Edit: owner only
    - Soft and hard delete: owner only; a missing note and a foreign note look the same
      ("Note not found or access denied") so ids cannot be probed

Listing (GET /api/notes/my-notes):
    WHERE noter_id = :uid AND termination_marked = false
    ORDER BY created_at DESC, note_id DESC
    LIMIT :limit OFFSET (:page - 1) * :limit

    hasMore is `len(page) == limit`: it can report true when the last page
    happens to be exactly full, which the SPA tolerates (one extra empty fetch).

Design Decision:
    NoteService is stateless; it receives the db session for each call, so one
    singleton instance serves every request.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    TeamspaceError,
    ValidationError,
)
from teamspace.models.note import DEFAULT_NOTE_TITLE, Note
from teamspace.models.user import User, utcnow
from teamspace.schemas.note import (
    CreateNoteRequest,
    NoteListResponse,
    NoteResponse,
    Pagination,
    UpdateNoteRequest,
)

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20
SEARCH_LIMIT = 50


def _to_response(note: Note, author: Optional[User]) -> NoteResponse:
    return NoteResponse(
        note_id=note.note_id,
        noter_id=note.noter_id,
        title=note.title,
        content=note.content,
        created_at=note.created_at,
        updated_at=note.updated_at,
        termination_marked=note.termination_marked,
        first_name=author.first_name if author else None,
        last_name=author.last_name if author else None,
        email=author.email if author else None,
    )


def _normalize_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        return DEFAULT_NOTE_TITLE
    return title


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        Our own exceptions propagate unchanged. Anything SQLAlchemy raises is
        logged with its traceback and wrapped in DatabaseError so the client
        only ever sees a generic message.
    """

    async def _fetch_with_author(
        self, db: AsyncSession, note_id: int
    ) -> Optional[Tuple[Note, User]]:
        result = await db.execute(
            select(Note, User)
            .join(User, User.user_id == Note.noter_id)
            .where(Note.note_id == note_id)
        )
        row = result.first()
        return (row[0], row[1]) if row else None

    async def create_note(
        self,
        db: AsyncSession,
        user_id: int,
        payload: CreateNoteRequest,
    ) -> NoteResponse:
        """
        Raises:
            ValidationError: content missing or empty (→ 400)
        """
        if not payload.content:
            raise ValidationError(message="Note content is required", field="content")

        try:
            note = Note(
                noter_id=user_id,
                title=_normalize_title(payload.title),
                content=payload.content,
            )
            db.add(note)
            await db.flush()
            author = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Failed to create note for user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"user_id": user_id},
            )

        logger.info("Note %s created by user %s", note.note_id, user_id)
        return _to_response(note, author)

    async def list_my_notes(
        self,
        db: AsyncSession,
        user_id: int,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> NoteListResponse:
        """
        One page of the caller's live notes, newest first.

        `limit` is clamped to 100; `page` is 1-based.
        """
        page = max(page, 1)
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        offset = (page - 1) * limit

        try:
            result = await db.execute(
                select(Note, User)
                .join(User, User.user_id == Note.noter_id)
                .where(Note.noter_id == user_id, Note.termination_marked.is_(False))
                .order_by(Note.created_at.desc(), Note.note_id.desc())
                .limit(limit)
                .offset(offset)
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        notes = [_to_response(note, author) for note, author in rows]
        return NoteListResponse(
            notes=notes,
            pagination=Pagination(page=page, limit=limit, hasMore=len(notes) == limit),
        )

    async def search_notes(
        self,
        db: AsyncSession,
        user_id: int,
        query: str,
        limit: int = SEARCH_LIMIT,
    ) -> List[NoteResponse]:
        """Case-insensitive substring match on title or content, caller's live notes only."""
        result = await db.execute(
            select(Note, User)
            .join(User, User.user_id == Note.noter_id)
            .where(
                Note.noter_id == user_id,
                Note.termination_marked.is_(False),
                or_(
                    Note.title.icontains(query, autoescape=True),
                    Note.content.icontains(query, autoescape=True),
                ),
            )
            .order_by(Note.created_at.desc(), Note.note_id.desc())
            .limit(min(limit, MAX_PAGE_SIZE))
        )
        return [_to_response(note, author) for note, author in result.all()]

    async def get_note(
        self,
        db: AsyncSession,
        note_id: int,
        user_id: int,
        is_admin: bool = False,
    ) -> NoteResponse:
        """
        Raises:
            NotFoundError: no such note (→ 404)
            PermissionDeniedError: not the owner and not an admin (→ 403)
        """
        try:
            found = await self._fetch_with_author(db, note_id)
            if found is None:
                raise NotFoundError(resource="note", message="Note not found")

            note, author = found
            if note.noter_id != user_id and not is_admin:
                raise PermissionDeniedError(message="Access denied")

            return _to_response(note, author)

        except TeamspaceError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id},
            )

    async def _get_owned_note(self, db: AsyncSession, note_id: int, user_id: int) -> Tuple[Note, User]:
        found = await self._fetch_with_author(db, note_id)
        if found is None:
            raise NotFoundError(resource="note", message="Note not found")
        if found[0].noter_id != user_id:
            raise PermissionDeniedError(message="Access denied")
        return found

    async def update_note(
        self,
        db: AsyncSession,
        note_id: int,
        user_id: int,
        payload: UpdateNoteRequest,
    ) -> NoteResponse:
        """
        Raises:
            ValidationError: neither title nor content supplied (→ 400)
            NotFoundError / PermissionDeniedError: as for get_note, owner only
        """
        if not payload.title and not payload.content:
            raise ValidationError(message="Title or content is required")

        note, author = await self._get_owned_note(db, note_id, user_id)

        if payload.title is not None:
            note.title = _normalize_title(payload.title)
        if payload.content is not None:
            note.content = payload.content
        note.updated_at = utcnow()
        await db.flush()

        logger.info("Note %s updated by user %s", note_id, user_id)
        return _to_response(note, author)

    async def mark_for_termination(self, db: AsyncSession, note_id: int, user_id: int) -> None:
        """
        Soft delete: hides the note from listings and search.

        Raises:
            NotFoundError: nothing matched (missing or not the caller's) (→ 404)
        """
        result = await db.execute(
            update(Note)
            .where(Note.note_id == note_id, Note.noter_id == user_id)
            .values(termination_marked=True, updated_at=utcnow())
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="note", message="Note not found or access denied")
        logger.info("Note %s marked for termination by user %s", note_id, user_id)

    async def delete_note(self, db: AsyncSession, note_id: int, user_id: int) -> None:
        """
        Permanent delete, scoped to the owner in the statement itself.

        Raises:
            NotFoundError: nothing matched (missing or not the caller's) (→ 404)
        """
        result = await db.execute(
            delete(Note).where(Note.note_id == note_id, Note.noter_id == user_id)
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="note", message="Note not found or access denied")
        logger.info("Note %s deleted by user %s", note_id, user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
