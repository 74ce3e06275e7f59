"""Pydantic schemas for HTTP and socket payloads."""
from .chats import ChatCreateRequest, MessageHistoryResponse, OnlineUsersResponse
from .events import BroadcastPayload, ConnectionStatus, ConnectionStatusMessage, InboundMessage

__all__ = [
    "BroadcastPayload",
    "ChatCreateRequest",
    "ConnectionStatus",
    "ConnectionStatusMessage",
    "InboundMessage",
    "MessageHistoryResponse",
    "OnlineUsersResponse",
]
