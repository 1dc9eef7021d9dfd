"""
Teamspace Backend — Chat Service (Document Store)
===================================================

What:  CRUD over the MongoDB `Chats` and `messages` collections.
Why:   An alternate chat model kept alongside the relational messaging: chats
       embed their member list, messages point at their chat by ObjectId.
How:   Thin Motor wrapper. Inputs are checked with ChatDocument /
       ChatMessageDocument before they reach the server-side validators.
Who:   Constructed with an AsyncIOMotorDatabase (see teamspace.mongo.get_mongo_db).

Document shapes:
    Chats:    {_id, title, members: [[name, user_id, role], ...], chat_type}
    messages: {_id, sender_id: int, receiver_id: ObjectId(chat), contents, sent_at}

Returned documents have `_id` (and `receiver_id`) converted to hex strings.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamspace.exceptions import ValidationError
from teamspace.mongo import CHATS_COLLECTION, MESSAGES_COLLECTION
from teamspace.schemas.chat import ChatDocument, ChatMessageDocument

logger = logging.getLogger(__name__)

MAX_CHAT_PAGE = 100
MAX_MESSAGE_PAGE = 200


def to_object_id(value: str, field: str = "id") -> ObjectId:
    # ObjectId(None) would mint a new id instead of failing
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationError(message=f"Invalid {field}", field=field)
    return ObjectId(value)


def _serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    doc["_id"] = str(doc.get("_id"))
    if isinstance(doc.get("receiver_id"), ObjectId):
        doc["receiver_id"] = str(doc["receiver_id"])
    return doc


class ChatService:

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def chats(self):
        return self._db[CHATS_COLLECTION]

    @property
    def messages(self):
        return self._db[MESSAGES_COLLECTION]

    # ── Chats ─────────────────────────────────────────────────────────────

    async def create_chat(self, chat: ChatDocument) -> str:
        doc = {
            "title": chat.title,
            "members": [list(member) for member in chat.members],
            "chat_type": chat.chat_type,
        }
        result = await self.chats.insert_one(doc)
        logger.info("Created %s chat %s", chat.chat_type, result.inserted_id)
        return str(result.inserted_id)

    async def find_chat(self, chat_id: str) -> Optional[Dict[str, Any]]:
        doc = await self.chats.find_one({"_id": to_object_id(chat_id, "chat_id")})
        return _serialize(doc) if doc else None

    async def list_chats_for_member(
        self,
        user_id: str,
        limit: int = 50,
        skip: int = 0,
    ) -> List[Dict[str, Any]]:
        """Chats whose member tuples carry `user_id` in position 1, newest first."""
        limit = min(limit, MAX_CHAT_PAGE)
        cursor = (
            self.chats.find({"members.1": user_id})
            .sort("_id", -1)
            .skip(max(skip, 0))
            .limit(limit)
        )
        items = await cursor.to_list(length=limit)
        return [_serialize(item) for item in items]

    async def rename_chat(self, chat_id: str, title: str) -> bool:
        result = await self.chats.update_one(
            {"_id": to_object_id(chat_id, "chat_id")},
            {"$set": {"title": title}},
        )
        return bool(result.matched_count)

    async def delete_chat(self, chat_id: str) -> bool:
        """Removes the chat and every message addressed to it."""
        oid = to_object_id(chat_id, "chat_id")
        result = await self.chats.delete_one({"_id": oid})
        if result.deleted_count:
            await self.messages.delete_many({"receiver_id": oid})
            logger.info("Deleted chat %s", chat_id)
        return bool(result.deleted_count)

    # ── Messages ──────────────────────────────────────────────────────────

    async def create_message(self, message: ChatMessageDocument) -> str:
        doc = {
            "sender_id": message.sender_id,
            "receiver_id": to_object_id(message.receiver_id, "receiver_id"),
            "contents": message.contents,
            "sent_at": message.sent_at,
        }
        result = await self.messages.insert_one(doc)
        return str(result.inserted_id)

    async def _list_messages(
        self,
        query: Dict[str, Any],
        limit: int,
        before: Optional[datetime],
    ) -> List[Dict[str, Any]]:
        if before is not None:
            query["sent_at"] = {"$lt": before}
        limit = min(limit, MAX_MESSAGE_PAGE)
        cursor = self.messages.find(query).sort([("sent_at", -1), ("_id", -1)]).limit(limit)
        items = await cursor.to_list(length=limit)
        return [_serialize(item) for item in items]

    async def list_messages_for_chat(
        self,
        chat_id: str,
        limit: int = 50,
        before: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Newest first; pass the oldest `sent_at` seen as `before` for the next page."""
        return await self._list_messages(
            {"receiver_id": to_object_id(chat_id, "chat_id")}, limit, before
        )

    async def list_messages_by_sender(
        self,
        sender_id: int,
        limit: int = 50,
        before: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        return await self._list_messages({"sender_id": sender_id}, limit, before)

    async def delete_message_for_sender(self, message_id: str, sender_id: int) -> bool:
        """Only the sender can delete; False when nothing matched."""
        result = await self.messages.delete_one(
            {"_id": to_object_id(message_id, "message_id"), "sender_id": sender_id}
        )
        return bool(result.deleted_count)
