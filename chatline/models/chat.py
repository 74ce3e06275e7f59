"""Persistent two-party chat document."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .message import Message, utcnow
from .user import UserDisplay


class Chat(BaseModel):
    id: str | None = None
    users: list[str] = Field(default_factory=list)
    created_by: str
    created_at: datetime = Field(default_factory=utcnow)
    count_messages: int = 0
    last_message: str | None = None
    last_message_id: str | None = None
    last_message_by: str | None = None
    last_message_at: datetime | None = None
    # Filled in for API responses only, never persisted.
    user_data: UserDisplay | None = None

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.users

    def other_participants(self, user_id: str) -> list[str]:
        return [member for member in self.users if member != user_id]

    def apply_message(self, message: Message) -> None:
        """Count ``message`` and point the last-message fields at it."""

        self.count_messages += 1
        self.last_message = message.content
        self.last_message_id = message.id
        self.last_message_by = message.sender
        self.last_message_at = message.sent_at


__all__ = ["Chat"]
