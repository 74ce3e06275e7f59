"""Persistence contract for chats, messages and user display records."""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from ..models import Chat, Message, UserDisplay


class StoreError(RuntimeError):
    """Raised when the backing store cannot complete an operation."""


def total_pages(total: int, limit: int) -> int:
    return int(math.ceil(total / float(limit))) if total else 0


def validate_page(limit: int, page: int) -> int:
    """Return the number of documents to skip for ``page`` of size ``limit``."""

    if limit <= 0:
        raise ValueError("limit must be positive")
    if page <= 0:
        raise ValueError("page must be positive")
    return (page - 1) * limit


class ChatStore(ABC):
    """Synchronous document store used by the chat core.

    Implementations are responsible for their own concurrent-write safety.
    Every backend failure is reported as :class:`StoreError`.
    """

    @abstractmethod
    def find_chat(self, chat_id: str) -> Chat | None:
        ...

    @abstractmethod
    def find_chat_by_participants(self, user_ids: Sequence[str]) -> Chat | None:
        ...

    @abstractmethod
    def create_chat(self, chat: Chat) -> Chat:
        ...

    @abstractmethod
    def list_chats_for_user(self, user_id: str) -> list[Chat]:
        ...

    @abstractmethod
    def save_message(self, message: Message) -> Message:
        ...

    @abstractmethod
    def update_chat(self, chat: Chat) -> None:
        ...

    @abstractmethod
    def record_message(self, chat_id: str, message: Message) -> Chat:
        """Atomically bump the chat counter and point its last-message fields at ``message``."""

    @abstractmethod
    def list_messages(self, chat_id: str, limit: int, page: int) -> tuple[list[Message], int]:
        """Return one page of messages, newest first, and the total page count."""

    @abstractmethod
    def resolve_users(self, user_ids: Iterable[str]) -> list[UserDisplay]:
        ...

    @abstractmethod
    def find_user(self, user_id: str) -> UserDisplay | None:
        ...

    @abstractmethod
    def save_user(self, user: UserDisplay) -> UserDisplay:
        ...

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        return None


__all__ = ["ChatStore", "StoreError", "total_pages", "validate_page"]
