"""
Teamspace Backend — Notes Route Handlers
==========================================

What:  /api/notes: create, list (paged and searchable), read, edit,
       soft-delete and delete notes.
How:   Extracts path/query/body data, delegates to NoteService, returns JSON.
Who:   The SPA's Pages screen.

Route order matters: `/my-notes` is declared before `/{note_id}` so it is not
parsed as an id.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamspace.config import settings
from teamspace.database import get_db_session
from teamspace.dependencies import CurrentUser, get_current_user
from teamspace.exceptions import NotFoundError, ValidationError
from teamspace.schemas.common import ErrorResponse, MessageResponse
from teamspace.schemas.note import (
    CreateNoteRequest,
    NoteListResponse,
    NoteMutationResponse,
    NoteSearchResponse,
    Pagination,
    SingleNoteResponse,
    UpdateNoteRequest,
)
from teamspace.services import mock_data
from teamspace.services.note_service import MAX_PAGE_SIZE, SEARCH_LIMIT, note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["Notes"])

NoteId = Annotated[int, Path(gt=0, description="Note identifier")]


@router.post(
    "",
    response_model=NoteMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Content missing", "model": ErrorResponse}},
    summary="Create a note",
)
async def create_note(
    payload: CreateNoteRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteMutationResponse:
    if settings.database_disabled:
        if not payload.content:
            raise ValidationError(message="Note content is required", field="content")
        return NoteMutationResponse(
            message="Note created successfully (mock)",
            note=mock_data.create_dummy_note(current_user.user_id, payload.title, payload.content),
        )

    note = await note_service.create_note(db, current_user.user_id, payload)
    return NoteMutationResponse(message="Note created successfully", note=note)


@router.get(
    "",
    response_model=NoteSearchResponse,
    summary="List or search the caller's notes",
)
async def list_notes(
    q: Optional[str] = Query(default=None, description="Substring to match in title or content"),
    limit: int = Query(default=SEARCH_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteSearchResponse:
    query = (q or "").strip()

    if settings.database_disabled:
        notes = (
            mock_data.search_dummy_notes(current_user.user_id, query)
            if query
            else mock_data.get_dummy_notes(current_user.user_id, limit, 0)
        )
        return NoteSearchResponse(notes=notes)

    if query:
        notes = await note_service.search_notes(db, current_user.user_id, query, limit)
    else:
        notes = (await note_service.list_my_notes(db, current_user.user_id, 1, limit)).notes
    return NoteSearchResponse(notes=notes)


@router.get(
    "/my-notes",
    response_model=NoteListResponse,
    summary="Page through the caller's notes, newest first",
)
async def my_notes(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, description="Clamped to 100"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteListResponse:
    if settings.database_disabled:
        limit = min(limit, MAX_PAGE_SIZE)
        return NoteListResponse(
            notes=mock_data.get_dummy_notes(current_user.user_id, limit, (page - 1) * limit),
            pagination=Pagination(page=page, limit=limit, hasMore=False),
        )

    return await note_service.list_my_notes(db, current_user.user_id, page, limit)


@router.get(
    "/{note_id}",
    response_model=SingleNoteResponse,
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Get a single note",
)
async def get_note(
    note_id: NoteId,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SingleNoteResponse:
    if settings.database_disabled:
        note = mock_data.get_dummy_note(current_user.user_id, note_id)
        if note is None:
            raise NotFoundError(resource="note", message="Note not found")
        return SingleNoteResponse(note=note)

    note = await note_service.get_note(
        db, note_id, current_user.user_id, is_admin=current_user.is_admin
    )
    return SingleNoteResponse(note=note)


@router.put(
    "/{note_id}",
    response_model=NoteMutationResponse,
    responses={
        400: {"description": "Nothing to update", "model": ErrorResponse},
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Edit a note's title and/or content",
)
async def update_note(
    payload: UpdateNoteRequest,
    note_id: NoteId,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteMutationResponse:
    if settings.database_disabled:
        if not payload.title and not payload.content:
            raise ValidationError(message="Title or content is required")
        existing = mock_data.get_dummy_note(current_user.user_id, note_id)
        if existing is None:
            raise NotFoundError(resource="note", message="Note not found")
        return NoteMutationResponse(
            message="Note updated successfully (mock)",
            note=mock_data.update_dummy_note(existing, payload.title, payload.content),
        )

    note = await note_service.update_note(db, note_id, current_user.user_id, payload)
    return NoteMutationResponse(message="Note updated successfully", note=note)


@router.post(
    "/{note_id}/terminate",
    response_model=MessageResponse,
    summary="Soft-delete a note (hidden from listings)",
)
async def terminate_note(
    note_id: NoteId,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    if settings.database_disabled:
        if mock_data.get_dummy_note(current_user.user_id, note_id) is None:
            raise NotFoundError(resource="note", message="Note not found or access denied")
        return MessageResponse(message="Note marked for termination (mock)")

    await note_service.mark_for_termination(db, note_id, current_user.user_id)
    return MessageResponse(message="Note marked for termination")


@router.delete(
    "/{note_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Missing or not owned", "model": ErrorResponse}},
    summary="Permanently delete a note",
)
async def delete_note(
    note_id: NoteId,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    if settings.database_disabled:
        if mock_data.get_dummy_note(current_user.user_id, note_id) is None:
            raise NotFoundError(resource="note", message="Note not found or access denied")
        return MessageResponse(message="Note deleted (mock)")

    await note_service.delete_note(db, note_id, current_user.user_id)
    return MessageResponse(message="Note deleted permanently")
