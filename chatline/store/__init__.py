"""Chat store backends and the settings-driven factory."""
from __future__ import annotations

from ..config import Settings
from .base import ChatStore, StoreError
from .memory import MemoryChatStore


def build_store(settings: Settings) -> ChatStore:
    """Instantiate the backend named by ``STORE_BACKEND``."""

    backend = settings.store_backend.strip().lower()
    if backend == "memory":
        return MemoryChatStore()
    if backend == "mongo":
        if not settings.mongo_uri:
            raise RuntimeError("MONGO_URI is required when STORE_BACKEND=mongo")
        from .mongo import MongoChatStore

        return MongoChatStore(
            settings.mongo_uri,
            settings.db_name,
            username=settings.mongo_user,
            password=settings.mongo_password,
        )
    raise RuntimeError(f"Unknown STORE_BACKEND {settings.store_backend!r}")


__all__ = ["ChatStore", "MemoryChatStore", "StoreError", "build_store"]
