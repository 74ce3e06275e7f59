"""Who is online right now."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..dependencies import get_registry, get_store
from ..schemas import OnlineUsersResponse
from ..services import PresenceRegistry, get_current_user_id, list_online_users
from ..store import ChatStore

router = APIRouter(tags=["presence"])


@router.get("/online-users", response_model=OnlineUsersResponse)
def online_users_endpoint(
    user_id: str = Depends(get_current_user_id),
    store: ChatStore = Depends(get_store),
    registry: PresenceRegistry = Depends(get_registry),
) -> OnlineUsersResponse:
    return OnlineUsersResponse(online_users=list_online_users(store, registry, user_id))


__all__ = ["router"]
