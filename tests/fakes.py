"""In-memory stand-ins for sockets used by the async unit tests."""
from __future__ import annotations

import asyncio

from fastapi import WebSocketDisconnect

from chatline.services import new_connection_id

_HANG_UP = object()


class FakeConnection:
    """Records sent payloads and replays scripted inbound frames."""

    def __init__(self, user_id: str, *, fail_sends: bool = False) -> None:
        self.id = new_connection_id()
        self.user_id = user_id
        self.fail_sends = fail_sends
        self.sent: list = []
        self.closed = False
        self._inbound: asyncio.Queue = asyncio.Queue()

    def __repr__(self) -> str:
        return f"FakeConnection({self.user_id!r})"

    def feed(self, frame: str | bytes) -> None:
        self._inbound.put_nowait(frame)

    def hang_up(self) -> None:
        self._inbound.put_nowait(_HANG_UP)

    async def receive(self) -> str | bytes:
        frame = await self._inbound.get()
        if frame is _HANG_UP:
            raise WebSocketDisconnect(code=1000)
        return frame

    async def send_payload(self, payload) -> None:
        if self.fail_sends:
            raise RuntimeError("socket is gone")
        self.sent.append(payload)

    async def close(self, code: int = 1000) -> None:
        self.closed = True

    def sent_of_type(self, kind: str) -> list:
        return [payload for payload in self.sent if getattr(payload, "type", None) == kind]
