"""
Teamspace Backend — Document Store Connection and Bootstrap
=============================================================

What:  Lazily created Motor client, collection validators and index setup for
       the chat document store.
Why:   The `Chats` / `messages` collections back the alternate chat feature;
       their shape is enforced server-side with `$jsonSchema` validators.
When:  `init_document_store()` runs at startup (idempotent: collMod and
       createIndexes can be re-applied on every boot);
       `close_document_store()` runs at shutdown.
"""

import logging
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel

from teamspace.config import settings

logger = logging.getLogger(__name__)

CHATS_COLLECTION = "Chats"
MESSAGES_COLLECTION = "messages"

CHATS_VALIDATOR: Dict[str, Any] = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["title", "members", "chat_type"],
        "properties": {
            "title": {"bsonType": "string", "description": "The title must be a string"},
            "members": {
                "bsonType": "array",
                "minItems": 2,
                "description": (
                    "At least two member credentials, each an array of "
                    "[user name, unique user id, role on the server]"
                ),
                "items": {
                    "bsonType": "array",
                    "minItems": 3,
                    "maxItems": 3,
                    "items": [
                        {"bsonType": "string"},
                        {"bsonType": "string"},
                        {"bsonType": "string", "enum": ["user", "admin"]},
                    ],
                },
            },
            "chat_type": {
                "bsonType": "string",
                "enum": ["dm", "group chat"],
                "description": "Must be either personal chat (dm) or a group chat",
            },
        },
    }
}

MESSAGES_VALIDATOR: Dict[str, Any] = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["sender_id", "receiver_id", "contents", "sent_at"],
        "properties": {
            "sender_id": {
                "bsonType": "int",
                "description": "sender_id must be the integer id of the sender",
            },
            "receiver_id": {
                "bsonType": "objectId",
                "description": "receiver_id must be the ObjectId of the receiving chat",
            },
            "contents": {"bsonType": "string", "description": "contents must be a string"},
            "sent_at": {"bsonType": "date", "description": "sent_at must be a date"},
        },
    }
}

CHATS_INDEXES = [
    IndexModel([("title", ASCENDING)], name="title_asc"),
    # Second element of each member tuple is the user id
    IndexModel([("members.1", ASCENDING)], name="memberUserId"),
]

MESSAGES_INDEXES = [
    IndexModel([("receiver_id", ASCENDING), ("sent_at", DESCENDING)], name="by_chat_time"),
    IndexModel([("sender_id", ASCENDING), ("sent_at", DESCENDING)], name="by_sender_time"),
]

_client: Optional[AsyncIOMotorClient] = None


def get_mongo_client() -> AsyncIOMotorClient:
    """Creates the pooled client on first use; Motor connects lazily."""
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(
            settings.mongo_uri,
            maxPoolSize=settings.mongo_max_pool_size,
            serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
        )
    return _client


def get_mongo_db() -> AsyncIOMotorDatabase:
    return get_mongo_client()[settings.mongo_db]


async def ping_document_store() -> bool:
    """Lightweight reachability check used by /health."""
    try:
        await get_mongo_db().command({"ping": 1})
        return True
    except Exception as e:
        logger.warning("Document store ping failed: %s", str(e))
        return False


async def init_document_store(db: Optional[AsyncIOMotorDatabase] = None) -> None:
    """
    Ensures collections, validators and indexes exist.

    Steps:
        1. Create `Chats` / `messages` if missing
        2. Apply `$jsonSchema` validators with collMod (strict / error)
        3. Create indexes (no-op when they already exist with the same keys and options)
    """
    db = db if db is not None else get_mongo_db()

    existing = set(await db.list_collection_names())
    for name in (CHATS_COLLECTION, MESSAGES_COLLECTION):
        if name not in existing:
            await db.create_collection(name)
            logger.info("Created collection %s", name)

    for name, validator in (
        (CHATS_COLLECTION, CHATS_VALIDATOR),
        (MESSAGES_COLLECTION, MESSAGES_VALIDATOR),
    ):
        await db.command(
            {
                "collMod": name,
                "validator": validator,
                "validationLevel": "strict",
                "validationAction": "error",
            }
        )

    await db[CHATS_COLLECTION].create_indexes(CHATS_INDEXES)
    await db[MESSAGES_COLLECTION].create_indexes(MESSAGES_INDEXES)

    logger.info("Document store initialized (%s)", settings.mongo_db)


def close_document_store() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
