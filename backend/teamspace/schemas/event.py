"""
Teamspace Backend — Calendar Event Schemas
============================================

What:  Request/response models for /api/events.

start_time/end_time arrive as strings and are parsed by EventService so that
an unparsable value yields the same 400 message as a missing one.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class EventResponse(BaseModel):
    event_id: int
    team_id: int
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    assigned_to_user_id: Optional[int] = None
    created_by: int
    created_at: datetime
    assigned_first_name: Optional[str] = None
    assigned_last_name: Optional[str] = None


class EventListResponse(BaseModel):
    events: List[EventResponse]


class EventCreatedResponse(BaseModel):
    message: str
    events: List[EventResponse]


class CreateEventRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    assigned_to_user_id: Optional[int] = None
