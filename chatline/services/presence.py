"""In-memory registry of live connections per user."""
from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .connection import Connection


class _PresenceEntry:
    __slots__ = ("lock", "connections", "retired")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.connections: dict[str, Connection] = {}
        self.retired = False


class PresenceRegistry:
    """Maps user ids to their open connections.

    The registry lock only guards which entries exist; each entry has its own
    lock for its connection map, so unrelated users never contend. An entry
    is retired under its own lock when its last connection leaves and is
    dropped from the map before that lock is released. Locks are never held
    across an ``await``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _PresenceEntry] = {}

    def register(self, user_id: str, connection_id: str, connection: Connection) -> None:
        while True:
            with self._lock:
                entry = self._entries.get(user_id)
                if entry is None:
                    entry = self._entries[user_id] = _PresenceEntry()
            with entry.lock:
                if entry.retired:
                    # Lost a race with the last unregister; pick up the fresh entry.
                    continue
                entry.connections[connection_id] = connection
                return

    def unregister(self, user_id: str, connection_id: str) -> bool:
        """Remove one connection; return ``True`` when the user is now offline."""

        with self._lock:
            entry = self._entries.get(user_id)
        if entry is None:
            return False
        with entry.lock:
            if entry.retired:
                return False
            if entry.connections.pop(connection_id, None) is None:
                return False
            if entry.connections:
                return False
            entry.retired = True
            with self._lock:
                if self._entries.get(user_id) is entry:
                    del self._entries[user_id]
            return True

    def connections_for(self, user_id: str) -> list[Connection]:
        with self._lock:
            entry = self._entries.get(user_id)
        if entry is None:
            return []
        with entry.lock:
            return list(entry.connections.values())

    def all_users(self) -> list[str]:
        with self._lock:
            entries = list(self._entries.items())
        online: list[str] = []
        for user_id, entry in entries:
            with entry.lock:
                if entry.connections and not entry.retired:
                    online.append(user_id)
        return online

    def is_online(self, user_id: str) -> bool:
        return bool(self.connections_for(user_id))

    def connection_count(self) -> int:
        return sum(len(self.connections_for(user_id)) for user_id in self.all_users())

    def __len__(self) -> int:
        return len(self.all_users())


__all__ = ["PresenceRegistry"]
