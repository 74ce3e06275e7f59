"""Presence registry bookkeeping under sequential and threaded churn."""
from __future__ import annotations

import random
import threading

import pytest

from chatline.services import PresenceRegistry


def _assert_no_empty_entries(registry: PresenceRegistry) -> None:
    for user_id, entry in registry._entries.items():
        assert entry.connections, f"empty entry left behind for {user_id}"


def test_register_creates_entry_and_snapshots_connections():
    registry = PresenceRegistry()
    registry.register("u1", "c1", object())
    registry.register("u1", "c2", object())
    registry.register("u2", "c3", object())

    assert sorted(registry.all_users()) == ["u1", "u2"]
    assert len(registry.connections_for("u1")) == 2
    assert registry.connections_for("ghost") == []
    assert registry.connection_count() == 3


def test_unregister_reports_offline_only_for_last_connection():
    registry = PresenceRegistry()
    registry.register("u1", "c1", object())
    registry.register("u1", "c2", object())

    assert registry.unregister("u1", "c1") is False
    assert registry.is_online("u1")
    assert registry.unregister("u1", "c2") is True
    assert registry.all_users() == []
    assert "u1" not in registry._entries


def test_unregister_unknown_connection_is_noop():
    registry = PresenceRegistry()
    registry.register("u1", "c1", object())

    assert registry.unregister("u1", "nope") is False
    assert registry.unregister("ghost", "c1") is False
    assert registry.all_users() == ["u1"]


def test_snapshot_is_independent_of_later_mutation():
    registry = PresenceRegistry()
    registry.register("u1", "c1", "first")
    snapshot = registry.connections_for("u1")
    registry.register("u1", "c2", "second")
    registry.unregister("u1", "c1")

    assert snapshot == ["first"]


@pytest.mark.parametrize("seed", [1, 7, 42, 1234])
def test_random_sequences_never_leave_empty_entries(seed):
    rng = random.Random(seed)
    registry = PresenceRegistry()
    live: dict[str, set[str]] = {}

    for step in range(500):
        user = f"u{rng.randint(0, 5)}"
        if rng.random() < 0.55 or not live.get(user):
            conn_id = f"c{step}"
            registry.register(user, conn_id, object())
            live.setdefault(user, set()).add(conn_id)
        else:
            conn_id = rng.choice(sorted(live[user]))
            live[user].discard(conn_id)
            offline = registry.unregister(user, conn_id)
            assert offline is (not live[user])
        _assert_no_empty_entries(registry)

    expected = sorted(user for user, conns in live.items() if conns)
    assert sorted(registry.all_users()) == expected


def test_concurrent_connect_disconnect_keeps_structure_consistent():
    registry = PresenceRegistry()
    users = [f"user-{index}" for index in range(4)]

    def churn(worker: int) -> None:
        for round_ in range(300):
            user = users[(worker + round_) % len(users)]
            conn_id = f"{worker}-{round_}"
            registry.register(user, conn_id, object())
            registry.unregister(user, conn_id)

    threads = [threading.Thread(target=churn, args=(worker,)) for worker in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert registry.all_users() == []
    assert registry._entries == {}
