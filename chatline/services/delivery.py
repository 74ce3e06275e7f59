"""Persist a stamped chat message and fan it out to the other participants."""
from __future__ import annotations

import asyncio
import logging

from ..models import Message
from ..store import ChatStore, StoreError
from .dispatcher import BroadcastDispatcher
from .errors import ChatNotFound, NotParticipant, PersistenceError
from .presence import PresenceRegistry

logger = logging.getLogger(__name__)


class ChatDeliveryPipeline:
    """Verify → save → update chat metadata → enqueue one job per recipient socket.

    Saving the message and updating the chat are two separate writes; a crash
    between them leaves the chat metadata behind the stored messages.
    """

    def __init__(self, store: ChatStore, registry: PresenceRegistry, dispatcher: BroadcastDispatcher) -> None:
        self._store = store
        self._registry = registry
        self._dispatcher = dispatcher

    async def deliver(self, message: Message) -> Message:
        try:
            chat = await asyncio.to_thread(self._store.find_chat, message.chat_id)
        except StoreError as exc:
            raise PersistenceError(f"could not load chat {message.chat_id}") from exc
        if chat is None:
            raise ChatNotFound(f"chat {message.chat_id} not found")
        if not chat.has_participant(message.sender):
            raise NotParticipant(f"user {message.sender} is not in chat {message.chat_id}")

        try:
            saved = await asyncio.to_thread(self._store.save_message, message)
        except StoreError as exc:
            raise PersistenceError(f"could not save message from {message.sender}") from exc

        try:
            await asyncio.to_thread(self._store.record_message, message.chat_id, saved)
        except StoreError as exc:
            raise PersistenceError(f"could not update chat {message.chat_id}") from exc

        enqueued = 0
        for recipient in chat.other_participants(message.sender):
            for connection in self._registry.connections_for(recipient):
                if self._dispatcher.enqueue(saved, connection):
                    enqueued += 1
        logger.debug("Message %s in chat %s queued for %d sockets", saved.id, saved.chat_id, enqueued)
        return saved


__all__ = ["ChatDeliveryPipeline"]
