"""Convenience exports for document models."""
from .chat import Chat
from .message import MESSAGE_KIND, Message, utcnow
from .user import UserDisplay

__all__ = [
    "Chat",
    "MESSAGE_KIND",
    "Message",
    "UserDisplay",
    "utcnow",
]
