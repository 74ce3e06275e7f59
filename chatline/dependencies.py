"""Process-scoped chat components and their FastAPI accessors.

Everything lives on one :class:`ChatRuntime` attached to ``app.state`` so
tests can build a fresh set per application.
"""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from .config import Settings
from .services import (
    BroadcastDispatcher,
    ChatDeliveryPipeline,
    PresenceAnnouncer,
    PresenceRegistry,
    SessionGateway,
)
from .store import ChatStore


@dataclass
class ChatRuntime:
    store: ChatStore
    registry: PresenceRegistry
    dispatcher: BroadcastDispatcher
    pipeline: ChatDeliveryPipeline
    announcer: PresenceAnnouncer
    gateway: SessionGateway


def build_runtime(settings: Settings, store: ChatStore) -> ChatRuntime:
    """Wire the components; must run inside the serving event loop."""

    registry = PresenceRegistry()
    dispatcher = BroadcastDispatcher(capacity=settings.broadcast_queue_size, workers=settings.worker_count)
    pipeline = ChatDeliveryPipeline(store, registry, dispatcher)
    announcer = PresenceAnnouncer(store, registry, dispatcher)
    gateway = SessionGateway(registry, pipeline, announcer)
    return ChatRuntime(
        store=store,
        registry=registry,
        dispatcher=dispatcher,
        pipeline=pipeline,
        announcer=announcer,
        gateway=gateway,
    )


def get_runtime(request: Request) -> ChatRuntime:
    return request.app.state.runtime


def get_store(request: Request) -> ChatStore:
    return get_runtime(request).store


def get_registry(request: Request) -> PresenceRegistry:
    return get_runtime(request).registry


__all__ = ["ChatRuntime", "build_runtime", "get_registry", "get_runtime", "get_store"]
