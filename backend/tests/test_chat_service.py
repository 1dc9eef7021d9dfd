"""
Teamspace Backend — Chat Document Store Tests
===============================================

What:  ChatService CRUD and init_document_store against mocked Motor objects.
How:   Collections are MagicMocks whose awaited methods are AsyncMocks;
       cursors return themselves from sort/skip/limit like Motor's.

What we test:
    ✅ Bad ObjectIds → ValidationError, never a bson exception
    ✅ Member lookup uses position 1 of the member tuple, newest first
    ✅ _id / receiver_id come back as strings
    ✅ Deleting a chat also deletes its messages
    ✅ Message paging with `before`
    ✅ Bootstrap creates only missing collections, then validators and indexes
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pydantic import ValidationError as SchemaValidationError

from teamspace.exceptions import ValidationError
from teamspace.mongo import CHATS_COLLECTION, MESSAGES_COLLECTION, init_document_store
from teamspace.schemas.chat import ChatDocument, ChatMessageDocument
from teamspace.services.chat_service import ChatService, to_object_id


def _cursor(items):
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=items)
    return cursor


def _mongo_db():
    collections = {CHATS_COLLECTION: MagicMock(), MESSAGES_COLLECTION: MagicMock()}
    db = MagicMock()
    db.__getitem__.side_effect = lambda name: collections[name]
    return db, collections[CHATS_COLLECTION], collections[MESSAGES_COLLECTION]


class TestObjectIds:

    def test_valid_hex(self):
        oid = ObjectId()
        assert to_object_id(str(oid)) == oid

    def test_invalid_hex(self):
        with pytest.raises(ValidationError) as exc_info:
            to_object_id("nope", "chat_id")
        assert exc_info.value.message == "Invalid chat_id"

    def test_none(self):
        with pytest.raises(ValidationError):
            to_object_id(None)


class TestChatDocuments:

    def test_chat_needs_two_members(self):
        with pytest.raises(SchemaValidationError):
            ChatDocument(title="Solo", members=[("Ada", "1", "user")], chat_type="dm")

    def test_chat_type_is_restricted(self):
        with pytest.raises(SchemaValidationError):
            ChatDocument(
                title="x",
                members=[("Ada", "1", "user"), ("Grace", "2", "admin")],
                chat_type="channel",
            )

    def test_message_receiver_must_be_object_id(self):
        with pytest.raises(SchemaValidationError):
            ChatMessageDocument(sender_id=1, receiver_id="not-an-id", contents="hi")


class TestChatService:

    def setup_method(self):
        self.db, self.chats, self.messages = _mongo_db()
        self.service = ChatService(self.db)

    @pytest.mark.asyncio
    async def test_create_chat(self):
        inserted = ObjectId()
        self.chats.insert_one = AsyncMock(return_value=MagicMock(inserted_id=inserted))

        chat_id = await self.service.create_chat(
            ChatDocument(
                title="Design",
                members=[("Ada", "1", "admin"), ("Grace", "2", "user")],
                chat_type="group chat",
            )
        )

        assert chat_id == str(inserted)
        doc = self.chats.insert_one.await_args.args[0]
        assert doc["members"] == [["Ada", "1", "admin"], ["Grace", "2", "user"]]
        assert doc["chat_type"] == "group chat"

    @pytest.mark.asyncio
    async def test_list_chats_for_member(self):
        oid = ObjectId()
        cursor = _cursor([{"_id": oid, "title": "Design", "members": [], "chat_type": "dm"}])
        self.chats.find.return_value = cursor

        chats = await self.service.list_chats_for_member("2", limit=500, skip=-3)

        self.chats.find.assert_called_once_with({"members.1": "2"})
        cursor.sort.assert_called_once_with("_id", -1)
        cursor.skip.assert_called_once_with(0)
        cursor.limit.assert_called_once_with(100)
        assert chats[0]["_id"] == str(oid)

    @pytest.mark.asyncio
    async def test_find_chat_missing(self):
        self.chats.find_one = AsyncMock(return_value=None)

        assert await self.service.find_chat(str(ObjectId())) is None

    @pytest.mark.asyncio
    async def test_rename_chat(self):
        self.chats.update_one = AsyncMock(return_value=MagicMock(matched_count=1))

        assert await self.service.rename_chat(str(ObjectId()), "Renamed") is True
        assert self.chats.update_one.await_args.args[1] == {"$set": {"title": "Renamed"}}

    @pytest.mark.asyncio
    async def test_delete_chat_removes_messages(self):
        oid = ObjectId()
        self.chats.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
        self.messages.delete_many = AsyncMock()

        assert await self.service.delete_chat(str(oid)) is True
        self.messages.delete_many.assert_awaited_once_with({"receiver_id": oid})

    @pytest.mark.asyncio
    async def test_delete_missing_chat_leaves_messages(self):
        self.chats.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))
        self.messages.delete_many = AsyncMock()

        assert await self.service.delete_chat(str(ObjectId())) is False
        self.messages.delete_many.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_message_stores_object_id(self):
        chat_id = ObjectId()
        self.messages.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))

        await self.service.create_message(
            ChatMessageDocument(sender_id=7, receiver_id=str(chat_id), contents="hi")
        )

        doc = self.messages.insert_one.await_args.args[0]
        assert doc["receiver_id"] == chat_id
        assert doc["sender_id"] == 7

    @pytest.mark.asyncio
    async def test_list_messages_before(self):
        chat_id = ObjectId()
        before = datetime(2026, 1, 1, tzinfo=timezone.utc)
        cursor = _cursor([{"_id": ObjectId(), "receiver_id": chat_id, "contents": "hi"}])
        self.messages.find.return_value = cursor

        items = await self.service.list_messages_for_chat(str(chat_id), limit=10, before=before)

        self.messages.find.assert_called_once_with(
            {"receiver_id": chat_id, "sent_at": {"$lt": before}}
        )
        cursor.sort.assert_called_once_with([("sent_at", -1), ("_id", -1)])
        assert items[0]["receiver_id"] == str(chat_id)

    @pytest.mark.asyncio
    async def test_delete_message_scoped_to_sender(self):
        message_id = ObjectId()
        self.messages.delete_one = AsyncMock(return_value=MagicMock(deleted_count=0))

        assert await self.service.delete_message_for_sender(str(message_id), 7) is False
        self.messages.delete_one.assert_awaited_once_with({"_id": message_id, "sender_id": 7})


class TestDocumentStoreBootstrap:

    @pytest.mark.asyncio
    async def test_creates_missing_collections_then_validators_and_indexes(self):
        db, chats, messages = _mongo_db()
        db.list_collection_names = AsyncMock(return_value=[CHATS_COLLECTION])
        db.create_collection = AsyncMock()
        db.command = AsyncMock()
        chats.create_indexes = AsyncMock()
        messages.create_indexes = AsyncMock()

        await init_document_store(db)

        db.create_collection.assert_awaited_once_with(MESSAGES_COLLECTION)
        coll_mods = [call.args[0] for call in db.command.await_args_list]
        assert [c["collMod"] for c in coll_mods] == [CHATS_COLLECTION, MESSAGES_COLLECTION]
        assert all(c["validationLevel"] == "strict" for c in coll_mods)
        chats.create_indexes.assert_awaited_once()
        messages.create_indexes.assert_awaited_once()
