"""
Teamspace Backend — Note Request/Response Schemas
===================================================

What:  Pydantic models defining the /api/notes contract.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate OpenAPI documentation.

Design Decision:
    Schemas are separate from SQLAlchemy models because a note response also
    carries the author's name (joined from users), which the table does not hold.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  Full representation of a note plus its author's name.
    Who:   Returned by every /api/notes endpoint that yields notes.
    """
    note_id: int = Field(description="Note identifier")
    noter_id: int = Field(description="Owning user's id")
    title: str = Field(description="Note title ('Untitled' when none was given)")
    content: str = Field(description="Note body")
    created_at: datetime = Field(description="When the note was created")
    updated_at: datetime = Field(description="When the note was last modified")
    termination_marked: bool = Field(default=False, description="Soft-deleted flag")
    first_name: Optional[str] = Field(default=None, description="Author first name")
    last_name: Optional[str] = Field(default=None, description="Author last name")
    email: Optional[str] = Field(default=None, description="Author email")

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    """
    Offset pagination state for /api/notes/my-notes.

    hasMore is camelCase because that is the key the SPA reads.
    """
    page: int
    limit: int
    hasMore: bool


class NoteListResponse(BaseModel):
    notes: List[NoteResponse]
    pagination: Pagination


class NoteSearchResponse(BaseModel):
    notes: List[NoteResponse]


class SingleNoteResponse(BaseModel):
    note: NoteResponse


class NoteMutationResponse(BaseModel):
    """Returned by create and update."""
    message: str
    note: NoteResponse


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateNoteRequest(BaseModel):
    title: Optional[str] = Field(default=None, description="Defaults to 'Untitled'")
    content: Optional[str] = Field(default=None, description="Required")


class UpdateNoteRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
