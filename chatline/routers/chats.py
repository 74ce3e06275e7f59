"""Chat listing, creation and history routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_store
from ..models import Chat
from ..schemas import ChatCreateRequest, MessageHistoryResponse
from ..services import (
    attach_user_data,
    get_chat_history,
    get_current_user_id,
    get_user_chat,
    list_user_chats,
    open_chat,
)
from ..store import ChatStore

router = APIRouter(prefix="/chats", tags=["chats"])


@router.get("", response_model=list[Chat])
def list_chats_endpoint(
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_store),
) -> list[Chat]:
    return list_user_chats(store, user_id)


@router.post("", response_model=Chat, status_code=status.HTTP_201_CREATED)
def create_chat_endpoint(
    payload: ChatCreateRequest,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_store),
) -> Chat:
    chat, created = open_chat(store, user_id, payload.user_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return chat


@router.get("/{chat_id}", response_model=Chat)
def chat_detail_endpoint(
    chat_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_store),
) -> Chat:
    chat = get_user_chat(store, user_id, chat_id)
    attach_user_data(store, user_id, [chat])
    return chat


@router.get("/{chat_id}/messages", response_model=MessageHistoryResponse)
def chat_history_endpoint(
    chat_id: str,
    limit: int = Query(20, description="Page size, between 1 and 99"),
    page: int = Query(1, description="1-based page number"),
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_store),
) -> MessageHistoryResponse:
    messages, total_pages = get_chat_history(store, user_id, chat_id, limit=limit, page=page)
    return MessageHistoryResponse(messages=messages, total_pages=total_pages)


__all__ = ["router"]
