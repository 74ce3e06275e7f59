"""A single client socket, owned by its read loop."""
from __future__ import annotations

import asyncio
import logging
import secrets

from fastapi import WebSocket, WebSocketDisconnect, status
from starlette.websockets import WebSocketState

from ..schemas import BroadcastPayload

logger = logging.getLogger(__name__)


def new_connection_id() -> str:
    """Return a 128-bit random, URL-safe connection identifier."""

    return secrets.token_urlsafe(16)


class Connection:
    """Framed send/receive over one WebSocket.

    Sends are serialized per socket because the underlying transport does not
    allow concurrent writers; this gives no ordering guarantee between callers.
    """

    def __init__(self, websocket: WebSocket, user_id: str, connection_id: str | None = None) -> None:
        self.id = connection_id or new_connection_id()
        self.user_id = user_id
        self._websocket = websocket
        self._send_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"Connection(user={self.user_id!r}, id={self.id!r})"

    @property
    def is_open(self) -> bool:
        return (
            self._websocket.application_state == WebSocketState.CONNECTED
            and self._websocket.client_state == WebSocketState.CONNECTED
        )

    async def accept(self) -> None:
        await self._websocket.accept()

    async def receive(self) -> str | bytes:
        """Wait for the next data frame; raises ``WebSocketDisconnect`` on close."""

        message = await self._websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(code=message.get("code", status.WS_1000_NORMAL_CLOSURE))
        text = message.get("text")
        if text is not None:
            return text
        return message.get("bytes") or b""

    async def send_payload(self, payload: BroadcastPayload) -> None:
        data = payload.model_dump_json()
        async with self._send_lock:
            await self._websocket.send_text(data)

    async def close(self, code: int = status.WS_1000_NORMAL_CLOSURE) -> None:
        """Send a close frame unless either side already closed; failures are logged only.

        Before ``accept`` this rejects the handshake instead.
        """

        if self._websocket.application_state == WebSocketState.DISCONNECTED:
            return
        if self._websocket.client_state == WebSocketState.DISCONNECTED:
            return
        try:
            async with self._send_lock:
                await self._websocket.close(code=code)
        except Exception as exc:
            logger.debug("Close frame for %r failed: %s", self, exc)


__all__ = ["Connection", "new_connection_id"]
