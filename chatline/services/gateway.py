"""Per-socket lifecycle: authenticate, upgrade, register, read, clean up."""
from __future__ import annotations

import logging
from enum import Enum

from fastapi import WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from ..models import MESSAGE_KIND, Message, utcnow
from ..schemas import ConnectionStatus, InboundMessage
from .announcer import PresenceAnnouncer
from .auth_service import authenticate
from .connection import Connection
from .delivery import ChatDeliveryPipeline
from .errors import DeliveryError, MalformedPayload, Unauthenticated, UpgradeFailed
from .presence import PresenceRegistry

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    UPGRADED = "upgraded"
    READING = "reading"
    CLOSED = "closed"


class _Session:
    """Tracks where one socket is in its lifecycle."""

    __slots__ = ("user_id", "state")

    def __init__(self, user_id: str | None = None, state: SessionState = SessionState.CONNECTING) -> None:
        self.user_id = user_id
        self.state = state

    def advance(self, target: SessionState) -> None:
        logger.debug("Session for %s: %s -> %s", self.user_id, self.state.value, target.value)
        self.state = target


def decode_inbound(raw: str | bytes, sender: str) -> Message:
    """Decode a client frame and apply the server-owned fields."""

    try:
        inbound = InboundMessage.model_validate_json(raw)
    except ValidationError as exc:
        raise MalformedPayload(f"invalid chat frame: {exc.error_count()} error(s)") from exc
    return Message(
        chat_id=inbound.chat_id,
        sender=sender,
        content=inbound.content,
        sent_at=utcnow(),
        type=MESSAGE_KIND,
    )


class SessionGateway:
    def __init__(
        self,
        registry: PresenceRegistry,
        pipeline: ChatDeliveryPipeline,
        announcer: PresenceAnnouncer,
    ) -> None:
        self._registry = registry
        self._pipeline = pipeline
        self._announcer = announcer

    async def handle(self, websocket: WebSocket) -> None:
        """Run one socket from handshake to close."""

        session = _Session()
        try:
            user_id = authenticate(websocket.headers, websocket.query_params, websocket.cookies)
        except Unauthenticated as exc:
            logger.info("Refusing socket from %s: %s", websocket.client, exc)
            # Closing before accept rejects the handshake; no channel is opened.
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(exc))
            session.advance(SessionState.CLOSED)
            return
        session.user_id = user_id
        session.advance(SessionState.AUTHENTICATED)

        connection = Connection(websocket, user_id)
        try:
            await self._upgrade(connection)
        except UpgradeFailed:
            logger.exception("WebSocket upgrade failed for user %s", user_id)
            await connection.close(code=status.WS_1011_INTERNAL_ERROR)
            session.advance(SessionState.CLOSED)
            return
        session.advance(SessionState.UPGRADED)

        await self.serve(connection, session)

    async def serve(self, connection: Connection, session: _Session | None = None) -> None:
        """Register an accepted connection and run its read loop until it ends."""

        user_id = connection.user_id
        if session is None:
            session = _Session(user_id, SessionState.UPGRADED)
        self._registry.register(user_id, connection.id, connection)
        logger.info("User %s connected (connection %s)", user_id, connection.id)
        try:
            await self._announcer.announce(ConnectionStatus.CONNECT)
            session.advance(SessionState.READING)
            await self._read_loop(connection)
        finally:
            await self._cleanup(connection, session)

    async def _upgrade(self, connection: Connection) -> None:
        try:
            await connection.accept()
        except Exception as exc:
            raise UpgradeFailed(str(exc)) from exc

    async def _read_loop(self, connection: Connection) -> None:
        user_id = connection.user_id
        while True:
            try:
                raw = await connection.receive()
            except WebSocketDisconnect as exc:
                logger.info("Connection %s closed by user %s (code %s)", connection.id, user_id, exc.code)
                return
            except Exception:
                logger.exception("Error reading from user %s", user_id)
                return

            logger.debug("Frame from user %s: %r", user_id, raw)
            try:
                message = decode_inbound(raw, user_id)
            except MalformedPayload as exc:
                logger.warning("Closing connection %s of user %s: %s", connection.id, user_id, exc)
                return

            try:
                await self._pipeline.deliver(message)
            except DeliveryError as exc:
                logger.warning("Dropped message from user %s in chat %s: %s", user_id, message.chat_id, exc)

    async def _cleanup(self, connection: Connection, session: _Session) -> None:
        user_id = connection.user_id
        went_offline = self._registry.unregister(user_id, connection.id)
        try:
            if went_offline:
                logger.info("User %s is offline", user_id)
                await self._announcer.announce(ConnectionStatus.DISCONNECT)
        finally:
            await connection.close()
            session.advance(SessionState.CLOSED)


__all__ = ["SessionGateway", "SessionState", "decode_inbound"]
