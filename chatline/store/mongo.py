"""MongoDB-backed chat store.

Collections:
- users     (``_id``, ``username``; owned by the identity service)
- chats
- messages

Ids are exposed as hex strings. Strings that are not valid ObjectIds are used
verbatim so that lookups with malformed ids simply find nothing.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Sequence

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from ..models import Chat, Message, UserDisplay
from .base import ChatStore, StoreError, total_pages, validate_page

logger = logging.getLogger(__name__)

_CHAT_METADATA_FIELDS = (
    "count_messages",
    "last_message",
    "last_message_id",
    "last_message_by",
    "last_message_at",
)


def _coerce_id(value: str) -> ObjectId | str:
    return ObjectId(value) if ObjectId.is_valid(value) else value


def _from_doc(doc: dict[str, Any]) -> dict[str, Any]:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return data


@contextmanager
def _guard(action: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        logger.warning("Mongo %s failed: %s", action, exc)
        raise StoreError(f"failed to {action}") from exc


class MongoChatStore(ChatStore):
    def __init__(
        self,
        uri: str,
        db_name: str,
        *,
        username: str | None = None,
        password: str | None = None,
        client: MongoClient | None = None,
    ) -> None:
        if client is None:
            kwargs: dict[str, Any] = {"tz_aware": True, "serverSelectionTimeoutMS": 10_000}
            if username and password:
                kwargs.update(username=username, password=password)
            client = MongoClient(uri, **kwargs)
        self._client = client
        database = client[db_name]
        self._users = database["users"]
        self._chats = database["chats"]
        self._messages = database["messages"]

    def ensure_indexes(self) -> None:
        with _guard("create indexes"):
            self._chats.create_index([("users", ASCENDING)])
            self._messages.create_index([("chat_id", ASCENDING), ("sent_at", DESCENDING)])

    def ping(self) -> bool:
        with _guard("ping"):
            self._client.admin.command("ping")
        return True

    def close(self) -> None:
        self._client.close()
        logger.info("MongoDB connection closed")

    # ------------- chats -------------
    def find_chat(self, chat_id: str) -> Chat | None:
        with _guard("find chat"):
            doc = self._chats.find_one({"_id": _coerce_id(chat_id)})
        return Chat.model_validate(_from_doc(doc)) if doc else None

    def find_chat_by_participants(self, user_ids: Sequence[str]) -> Chat | None:
        with _guard("find chat by participants"):
            doc = self._chats.find_one({"users": {"$all": list(user_ids)}})
        return Chat.model_validate(_from_doc(doc)) if doc else None

    def create_chat(self, chat: Chat) -> Chat:
        doc = chat.model_dump(exclude={"id", "user_data"})
        with _guard("create chat"):
            result = self._chats.insert_one(doc)
        return chat.model_copy(update={"id": str(result.inserted_id)})

    def list_chats_for_user(self, user_id: str) -> list[Chat]:
        with _guard("list chats"):
            cursor = self._chats.find({"users": user_id}).sort(
                [("last_message_at", DESCENDING), ("created_at", DESCENDING)]
            )
            return [Chat.model_validate(_from_doc(doc)) for doc in cursor]

    def update_chat(self, chat: Chat) -> None:
        fields = chat.model_dump(include=set(_CHAT_METADATA_FIELDS))
        with _guard("update chat"):
            result = self._chats.update_one({"_id": _coerce_id(chat.id or "")}, {"$set": fields})
        if result.matched_count == 0:
            raise StoreError(f"chat {chat.id} does not exist")

    def record_message(self, chat_id: str, message: Message) -> Chat:
        key = _coerce_id(chat_id)
        with _guard("record message"):
            doc = self._chats.find_one_and_update(
                {"_id": key},
                {
                    "$inc": {"count_messages": 1},
                    "$set": {
                        "last_message": message.content,
                        "last_message_id": message.id,
                        "last_message_by": message.sender,
                        "last_message_at": message.sent_at,
                    },
                },
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise StoreError(f"chat {chat_id} does not exist")
        return Chat.model_validate(_from_doc(doc))

    # ------------- messages -------------
    def save_message(self, message: Message) -> Message:
        doc = message.model_dump(exclude={"id"})
        with _guard("save message"):
            result = self._messages.insert_one(doc)
        return message.model_copy(update={"id": str(result.inserted_id)})

    def list_messages(self, chat_id: str, limit: int, page: int) -> tuple[list[Message], int]:
        skip = validate_page(limit, page)
        query = {"chat_id": chat_id}
        with _guard("list messages"):
            total = self._messages.count_documents(query)
            cursor = self._messages.find(query).sort("sent_at", DESCENDING).skip(skip).limit(limit)
            messages = [Message.model_validate(_from_doc(doc)) for doc in cursor]
        return messages, total_pages(total, limit)

    # ------------- users -------------
    def resolve_users(self, user_ids: Iterable[str]) -> list[UserDisplay]:
        keys = [_coerce_id(uid) for uid in user_ids]
        if not keys:
            return []
        with _guard("resolve users"):
            cursor = self._users.find({"_id": {"$in": keys}}, {"username": 1})
            return [UserDisplay.model_validate(_from_doc(doc)) for doc in cursor]

    def find_user(self, user_id: str) -> UserDisplay | None:
        with _guard("find user"):
            doc = self._users.find_one({"_id": _coerce_id(user_id)}, {"username": 1})
        return UserDisplay.model_validate(_from_doc(doc)) if doc else None

    def save_user(self, user: UserDisplay) -> UserDisplay:
        with _guard("save user"):
            self._users.update_one(
                {"_id": _coerce_id(user.id)},
                {"$set": {"username": user.username}},
                upsert=True,
            )
        return user


__all__ = ["MongoChatStore"]
