"""End-to-end socket flows through the FastAPI application."""
from __future__ import annotations

import os
from typing import Iterator

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from chatline.main import create_app  # noqa: E402
from chatline.models import Chat, UserDisplay  # noqa: E402
from chatline.services import create_access_token  # noqa: E402
from chatline.store import MemoryChatStore  # noqa: E402

U1 = "65a1f0c2e4b0a1b2c3d4e5f1"
U2 = "65a1f0c2e4b0a1b2c3d4e5f2"


@pytest.fixture
def store() -> MemoryChatStore:
    store = MemoryChatStore()
    store.save_user(UserDisplay(id=U1, username="orbit"))
    store.save_user(UserDisplay(id=U2, username="lumen"))
    return store


@pytest.fixture
def chat(store: MemoryChatStore) -> Chat:
    return store.create_chat(Chat(users=[U1, U2], created_by=U1))


@pytest.fixture
def client(store: MemoryChatStore) -> Iterator[TestClient]:
    with TestClient(create_app(store=store)) as test_client:
        yield test_client


def _bearer(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def test_chat_message_reaches_peer_without_echo(client, chat):
    with client.websocket_connect("/ws", headers=_bearer(U1)) as first:
        hello = first.receive_json()
        assert hello == {"type": "connect", "online_users": [{"id": U1, "username": "orbit"}]}

        with client.websocket_connect(f"/ws?token={create_access_token(U2)}") as second:
            assert second.receive_json()["type"] == "connect"
            joined = first.receive_json()
            assert sorted(user["id"] for user in joined["online_users"]) == [U1, U2]

            first.send_json({"chat_id": chat.id, "content": "hi"})
            frame = second.receive_json()
            assert frame["type"] == "message"
            assert frame["sender"] == U1
            assert frame["content"] == "hi"
            assert frame["chat_id"] == chat.id
            assert frame["id"]

        # The next frame U1 sees is U2 leaving, not its own message.
        left = first.receive_json()
        assert left == {"type": "disconnect", "online_users": [{"id": U1, "username": "orbit"}]}

    stored = client.app.state.runtime.store.find_chat(chat.id)
    assert stored.count_messages == 1
    assert stored.last_message == "hi"


def test_cookie_token_is_accepted(client):
    token = create_access_token(U2)
    with client.websocket_connect("/ws", headers={"cookie": f"auth_token={token}"}) as socket:
        frame = socket.receive_json()
        assert frame["online_users"] == [{"id": U2, "username": "lumen"}]
        assert client.app.state.runtime.registry.all_users() == [U2]


@pytest.mark.parametrize("path", ["/ws", "/ws?token=not-a-jwt", "/ws?token="])
def test_unauthenticated_upgrade_is_refused(client, path):
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect(path):
            pass

    assert excinfo.value.code == 1008
    assert client.app.state.runtime.registry.all_users() == []


def test_expired_token_is_refused(client):
    token = create_access_token(U1, expires_minutes=-5)
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws", headers={"Authorization": f"Bearer {token}"}):
            pass
    assert client.app.state.runtime.registry.all_users() == []


def test_malformed_frame_ends_the_session(client):
    with client.websocket_connect("/ws", headers=_bearer(U1)) as socket:
        socket.receive_json()
        socket.send_text("definitely not json")
        with pytest.raises(WebSocketDisconnect):
            socket.receive_json()

    assert client.app.state.runtime.registry.all_users() == []
