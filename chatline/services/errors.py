"""Error taxonomy for the realtime chat core."""
from __future__ import annotations


class ChatlineError(Exception):
    """Base class for chat core failures."""


class Unauthenticated(ChatlineError):
    """Missing, expired, malformed or mis-signed credential."""


class UpgradeFailed(ChatlineError):
    """The WebSocket handshake could not be completed."""


class MalformedPayload(ChatlineError):
    """An inbound frame could not be decoded into a chat message."""


class DeliveryError(ChatlineError):
    """A message was dropped by the delivery pipeline."""


class ChatNotFound(DeliveryError):
    pass


class NotParticipant(DeliveryError):
    pass


class PersistenceError(DeliveryError):
    """The store rejected a write; nothing was broadcast."""


class QueueFull(ChatlineError):
    """The broadcast queue is saturated; the job was dropped."""


__all__ = [
    "ChatNotFound",
    "ChatlineError",
    "DeliveryError",
    "MalformedPayload",
    "NotParticipant",
    "PersistenceError",
    "QueueFull",
    "Unauthenticated",
    "UpgradeFailed",
]
