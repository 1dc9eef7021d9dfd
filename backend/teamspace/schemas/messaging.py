"""
Teamspace Backend — Messaging Schemas
=======================================

What:  Conversation summaries and message payloads for /api/messaging.

ConversationSummary shape:
    {
        "conversation_id": 12,
        "title": "General",
        "is_direct": false,
        "created_at": "...",
        "unread_count": 3,
        "last_message": {"message_id": 40, "content": "...", "created_at": "...",
                         "sender": {"user_id": 7, "first_name": "...", ...}},
        "participants": [{"user_id": 7, "first_name": "...", ...}, ...]
    }
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class Participant(BaseModel):
    user_id: int
    first_name: str
    last_name: str
    email: str
    pfp_url: Optional[str] = None
    job_title: Optional[str] = None


class MessageSender(BaseModel):
    user_id: int
    first_name: str
    last_name: str
    email: str
    pfp_url: Optional[str] = None


class LastMessage(BaseModel):
    message_id: int
    content: str
    created_at: datetime
    sender: MessageSender


class ConversationSummary(BaseModel):
    conversation_id: int
    title: str
    is_direct: bool
    created_at: datetime
    unread_count: int
    last_message: Optional[LastMessage] = None
    participants: List[Participant]


class ConversationListResponse(BaseModel):
    conversations: List[ConversationSummary]


class MessageResponse(BaseModel):
    """A message joined with its sender's name."""
    message_id: int
    conversation_id: int
    sender_id: int
    content: str
    created_at: datetime
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    pfp_url: Optional[str] = None
    is_read: Optional[bool] = None


class MessageListResponse(BaseModel):
    messages: List[MessageResponse]


class MessageSentResponse(BaseModel):
    message: str
    messages: List[MessageResponse]


class SendMessageRequest(BaseModel):
    content: Optional[str] = None
