"""In-process document store for local runs and tests."""
from __future__ import annotations

import threading
from typing import Any, Iterable, Sequence

from bson import ObjectId

from ..models import Chat, Message, UserDisplay
from .base import ChatStore, StoreError, total_pages, validate_page


def _new_id() -> str:
    return str(ObjectId())


class MemoryChatStore(ChatStore):
    """Keeps documents as plain dicts behind a single lock.

    Reads hand back fresh model instances so callers never mutate stored state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, dict[str, Any]] = {}
        self._chats: dict[str, dict[str, Any]] = {}
        self._messages: list[dict[str, Any]] = []

    # ------------- chats -------------
    def find_chat(self, chat_id: str) -> Chat | None:
        with self._lock:
            doc = self._chats.get(chat_id)
            return Chat.model_validate(doc) if doc is not None else None

    def find_chat_by_participants(self, user_ids: Sequence[str]) -> Chat | None:
        wanted = set(user_ids)
        with self._lock:
            for doc in self._chats.values():
                if wanted.issubset(doc["users"]):
                    return Chat.model_validate(doc)
        return None

    def create_chat(self, chat: Chat) -> Chat:
        doc = chat.model_dump(exclude={"user_data"})
        doc["id"] = _new_id()
        with self._lock:
            self._chats[doc["id"]] = doc
        return Chat.model_validate(doc)

    def list_chats_for_user(self, user_id: str) -> list[Chat]:
        with self._lock:
            docs = [dict(doc) for doc in self._chats.values() if user_id in doc["users"]]
        docs.sort(key=lambda doc: doc["last_message_at"] or doc["created_at"], reverse=True)
        return [Chat.model_validate(doc) for doc in docs]

    def update_chat(self, chat: Chat) -> None:
        with self._lock:
            doc = self._chats.get(chat.id or "")
            if doc is None:
                raise StoreError(f"chat {chat.id} does not exist")
            doc.update(
                count_messages=chat.count_messages,
                last_message=chat.last_message,
                last_message_id=chat.last_message_id,
                last_message_by=chat.last_message_by,
                last_message_at=chat.last_message_at,
            )

    def record_message(self, chat_id: str, message: Message) -> Chat:
        with self._lock:
            doc = self._chats.get(chat_id)
            if doc is None:
                raise StoreError(f"chat {chat_id} does not exist")
            chat = Chat.model_validate(doc)
            chat.apply_message(message)
            self._chats[chat_id] = chat.model_dump(exclude={"user_data"})
            return chat

    # ------------- messages -------------
    def save_message(self, message: Message) -> Message:
        stored = message.model_copy(update={"id": _new_id()})
        with self._lock:
            self._messages.append(stored.model_dump())
        return stored

    def list_messages(self, chat_id: str, limit: int, page: int) -> tuple[list[Message], int]:
        skip = validate_page(limit, page)
        with self._lock:
            matching = [doc for doc in self._messages if doc["chat_id"] == chat_id]
        # Newest first; insertion order breaks ties between identical timestamps.
        ordered = sorted(enumerate(matching), key=lambda item: (item[1]["sent_at"], item[0]), reverse=True)
        window = ordered[skip : skip + limit]
        return [Message.model_validate(doc) for _, doc in window], total_pages(len(matching), limit)

    # ------------- users -------------
    def resolve_users(self, user_ids: Iterable[str]) -> list[UserDisplay]:
        with self._lock:
            return [UserDisplay.model_validate(self._users[uid]) for uid in user_ids if uid in self._users]

    def find_user(self, user_id: str) -> UserDisplay | None:
        with self._lock:
            doc = self._users.get(user_id)
        return UserDisplay.model_validate(doc) if doc is not None else None

    def save_user(self, user: UserDisplay) -> UserDisplay:
        with self._lock:
            self._users[user.id] = user.model_dump()
        return user


__all__ = ["MemoryChatStore"]
