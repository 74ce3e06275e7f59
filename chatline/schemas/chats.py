"""Schemas used by chat endpoints."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from ..models import Message, UserDisplay


class ChatCreateRequest(BaseModel):
    user_id: str = Field(..., description="Participant to open a two-party chat with")


class MessageHistoryResponse(BaseModel):
    messages: List[Message]
    total_pages: int


class OnlineUsersResponse(BaseModel):
    online_users: List[UserDisplay]


__all__ = ["ChatCreateRequest", "MessageHistoryResponse", "OnlineUsersResponse"]
