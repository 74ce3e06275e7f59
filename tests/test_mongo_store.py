from __future__ import annotations

import os
from datetime import timedelta

import pytest
from bson import ObjectId
from pymongo import MongoClient

from chatline.models import Chat, Message, UserDisplay, utcnow
from chatline.store.mongo import MongoChatStore


def _connect_client() -> MongoClient | None:
    uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    try:
        client = MongoClient(uri, tz_aware=True, serverSelectionTimeoutMS=500)
        # simple ping; skip test if not reachable
        client.admin.command("ping")
        return client
    except Exception:
        return None


@pytest.mark.integration
def test_chat_lifecycle_against_mongo():
    client = _connect_client()
    if client is None:
        pytest.skip("MongoDB not available for integration test")

    dbname = "chatline_test_store"
    try:
        store = MongoChatStore("unused", dbname, client=client)
        store.ensure_indexes()
        alice, bob = str(ObjectId()), str(ObjectId())
        store.save_user(UserDisplay(id=alice, username="alice"))
        store.save_user(UserDisplay(id=bob, username="bob"))

        chat = store.create_chat(Chat(users=[alice, bob], created_by=alice))
        assert ObjectId.is_valid(chat.id)
        assert store.find_chat_by_participants([bob, alice]).id == chat.id
        assert store.find_chat("not-an-object-id") is None

        start = utcnow()
        saved = []
        for index in range(5):
            message = Message(chat_id=chat.id, sender=alice, content=f"m{index}", sent_at=start + timedelta(seconds=index))
            saved.append(store.save_message(message))
        for message in reversed(saved):
            store.record_message(chat.id, message)

        stored = store.find_chat(chat.id)
        assert stored.count_messages == 5
        assert stored.last_message_id == saved[0].id

        page, pages = store.list_messages(chat.id, 2, 1)
        assert pages == 3
        assert [item.content for item in page] == ["m4", "m3"]
        assert sorted(user.username for user in store.resolve_users([alice, bob, "junk"])) == ["alice", "bob"]
        assert [item.id for item in store.list_chats_for_user(bob)] == [chat.id]
    finally:
        client.drop_database(dbname)
        client.close()
