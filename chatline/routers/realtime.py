"""WebSocket endpoint for live chat delivery and presence updates."""
from __future__ import annotations

from fastapi import APIRouter, WebSocket

router = APIRouter()


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket) -> None:
    """Authenticate, then stream chat messages both ways until the socket closes.

    The bearer token may come from the ``Authorization`` header, the ``token``
    query parameter or the ``auth_token`` cookie, in that order.
    """

    await websocket.app.state.runtime.gateway.handle(websocket)


__all__ = ["router"]
