"""Frames exchanged over the realtime socket."""
from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field

from ..models import Message, UserDisplay


class ConnectionStatus(str, Enum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"


class ConnectionStatusMessage(BaseModel):
    """Online-users snapshot pushed to every socket on presence changes."""

    type: Literal["connect", "disconnect"]
    online_users: List[UserDisplay] = Field(default_factory=list)


# Outbound frames are discriminated by ``type``.
BroadcastPayload = Annotated[Union[ConnectionStatusMessage, Message], Field(discriminator="type")]


class InboundMessage(BaseModel):
    """Client-submitted chat frame; server-owned fields are ignored."""

    chat_id: str = Field(..., min_length=1)
    content: str


__all__ = [
    "BroadcastPayload",
    "ConnectionStatus",
    "ConnectionStatusMessage",
    "InboundMessage",
]
