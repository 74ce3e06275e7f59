"""Chat lookups and creation for the HTTP API."""
from __future__ import annotations

import logging
from typing import Sequence

from fastapi import HTTPException, status

from ..models import Chat, Message, UserDisplay
from ..store import ChatStore, StoreError
from .presence import PresenceRegistry

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _unavailable(exc: StoreError) -> HTTPException:
    logger.warning("Store unavailable: %s", exc)
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Chat store unavailable")


def attach_user_data(store: ChatStore, user_id: str, chats: Sequence[Chat]) -> None:
    """Set ``user_data`` on each chat to the participant who is not ``user_id``."""

    others = {uid for chat in chats for uid in chat.other_participants(user_id)}
    if not others:
        return
    try:
        lookup = {user.id: user for user in store.resolve_users(sorted(others))}
    except StoreError as exc:
        raise _unavailable(exc) from exc
    for chat in chats:
        for uid in chat.other_participants(user_id):
            if uid in lookup:
                chat.user_data = lookup[uid]
                break


def list_user_chats(store: ChatStore, user_id: str) -> list[Chat]:
    try:
        chats = store.list_chats_for_user(user_id)
    except StoreError as exc:
        raise _unavailable(exc) from exc
    attach_user_data(store, user_id, chats)
    return chats


def get_user_chat(store: ChatStore, user_id: str, chat_id: str) -> Chat:
    try:
        chat = store.find_chat(chat_id)
    except StoreError as exc:
        raise _unavailable(exc) from exc
    if chat is None or not chat.has_participant(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="There is no chat with this ID")
    return chat


def open_chat(store: ChatStore, user_id: str, other_id: str) -> tuple[Chat, bool]:
    """Return the two-party chat between the users, creating it when missing.

    The boolean is ``True`` when a new chat was created.
    """

    other_id = other_id.strip()
    if not other_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="user_id cannot be empty")
    if other_id == user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot create a chat with yourself")

    try:
        if store.find_user(other_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cannot find user to create chat with")
        chat = store.find_chat_by_participants([user_id, other_id])
        created = chat is None
        if chat is None:
            chat = store.create_chat(Chat(users=[user_id, other_id], created_by=user_id))
            logger.info("User %s opened chat %s with %s", user_id, chat.id, other_id)
    except StoreError as exc:
        raise _unavailable(exc) from exc

    attach_user_data(store, user_id, [chat])
    return chat, created


def get_chat_history(store: ChatStore, user_id: str, chat_id: str, *, limit: int, page: int) -> tuple[list[Message], int]:
    if limit <= 0 or limit >= MAX_PAGE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid limit value. Limit should be > 0 and < {MAX_PAGE_SIZE}.",
        )
    if page <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid page value. Page should be > 0.")

    get_user_chat(store, user_id, chat_id)
    try:
        return store.list_messages(chat_id, limit, page)
    except StoreError as exc:
        raise _unavailable(exc) from exc


def list_online_users(store: ChatStore, registry: PresenceRegistry, user_id: str) -> list[UserDisplay]:
    """Resolve everyone currently connected except ``user_id``."""

    others = [uid for uid in registry.all_users() if uid != user_id]
    if not others:
        return []
    try:
        return store.resolve_users(others)
    except StoreError as exc:
        raise _unavailable(exc) from exc


__all__ = [
    "MAX_PAGE_SIZE",
    "attach_user_data",
    "get_chat_history",
    "get_user_chat",
    "list_online_users",
    "list_user_chats",
    "open_chat",
]
