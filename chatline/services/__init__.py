"""Convenience exports for service layer."""
from .announcer import PresenceAnnouncer
from .auth_service import (
    authenticate,
    create_access_token,
    decode_access_token,
    get_current_user_id,
    resolve_bearer_token,
)
from .chat_service import (
    attach_user_data,
    get_chat_history,
    get_user_chat,
    list_online_users,
    list_user_chats,
    open_chat,
)
from .connection import Connection, new_connection_id
from .delivery import ChatDeliveryPipeline
from .dispatcher import BroadcastDispatcher, BroadcastJob
from .errors import (
    ChatlineError,
    ChatNotFound,
    DeliveryError,
    MalformedPayload,
    NotParticipant,
    PersistenceError,
    QueueFull,
    Unauthenticated,
    UpgradeFailed,
)
from .gateway import SessionGateway, SessionState, decode_inbound
from .presence import PresenceRegistry

__all__ = [
    "authenticate",
    "create_access_token",
    "decode_access_token",
    "get_current_user_id",
    "resolve_bearer_token",
    "attach_user_data",
    "get_chat_history",
    "get_user_chat",
    "list_online_users",
    "list_user_chats",
    "open_chat",
    "BroadcastDispatcher",
    "BroadcastJob",
    "ChatDeliveryPipeline",
    "Connection",
    "new_connection_id",
    "PresenceAnnouncer",
    "PresenceRegistry",
    "SessionGateway",
    "SessionState",
    "decode_inbound",
    "ChatlineError",
    "ChatNotFound",
    "DeliveryError",
    "MalformedPayload",
    "NotParticipant",
    "PersistenceError",
    "QueueFull",
    "Unauthenticated",
    "UpgradeFailed",
]
