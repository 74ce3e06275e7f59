"""Aggregate router exports."""
from .chats import router as chats_router
from .presence import router as presence_router
from .realtime import router as realtime_router
from .system import router as system_router

__all__ = [
    "chats_router",
    "presence_router",
    "realtime_router",
    "system_router",
]
