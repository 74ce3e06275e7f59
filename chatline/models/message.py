"""Persistent chat message document."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MESSAGE_KIND = "message"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """A single chat message; immutable once the store has assigned an id."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    chat_id: str
    sender: str
    content: str
    sent_at: datetime = Field(default_factory=utcnow)
    type: Literal["message"] = MESSAGE_KIND


__all__ = ["MESSAGE_KIND", "Message", "utcnow"]
