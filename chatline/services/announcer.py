"""Broadcast the online-users list whenever someone connects or leaves."""
from __future__ import annotations

import asyncio
import logging

from ..schemas import ConnectionStatus, ConnectionStatusMessage
from ..store import ChatStore, StoreError
from .dispatcher import BroadcastDispatcher
from .presence import PresenceRegistry

logger = logging.getLogger(__name__)


class PresenceAnnouncer:
    def __init__(self, store: ChatStore, registry: PresenceRegistry, dispatcher: BroadcastDispatcher) -> None:
        self._store = store
        self._registry = registry
        self._dispatcher = dispatcher

    async def announce(self, status: ConnectionStatus) -> int:
        """Queue the snapshot for every registered socket; return how many were queued."""

        user_ids = self._registry.all_users()
        try:
            online_users = await asyncio.to_thread(self._store.resolve_users, user_ids) if user_ids else []
        except StoreError:
            logger.warning("Skipping %s announcement: online users could not be resolved", status.value)
            return 0

        payload = ConnectionStatusMessage(type=status.value, online_users=online_users)
        enqueued = 0
        for user_id in user_ids:
            for connection in self._registry.connections_for(user_id):
                if self._dispatcher.enqueue(payload, connection):
                    enqueued += 1
        logger.debug("Announced %s to %d sockets (%d users online)", status.value, enqueued, len(online_users))
        return enqueued


__all__ = ["PresenceAnnouncer"]
