"""
Teamspace Backend — Chat Document Schemas
===========================================

What:  Pydantic mirrors of the MongoDB `$jsonSchema` validators for the
       `Chats` and `messages` collections (see teamspace.mongo).
Why:   Rejecting a bad document before it reaches the server gives a 400 with
       a readable message instead of a WriteError from the validator.

Member tuple layout: [user name, unique user id, role on the server]
"""

from datetime import datetime, timezone
from typing import List, Literal, Tuple

from pydantic import BaseModel, Field

ChatType = Literal["dm", "group chat"]
ChatRole = Literal["user", "admin"]
MemberTuple = Tuple[str, str, ChatRole]


class ChatDocument(BaseModel):
    title: str
    members: List[MemberTuple] = Field(min_length=2)
    chat_type: ChatType


class ChatMessageDocument(BaseModel):
    sender_id: int
    # ObjectId of the chat receiving the message, as a hex string
    receiver_id: str = Field(pattern=r"^[0-9a-fA-F]{24}$")
    contents: str
    sent_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
