"""Service metadata and health reporting."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..config import get_settings
from ..dependencies import ChatRuntime, get_runtime
from ..store import StoreError

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    store: bool
    online_users: int
    connections: int
    dispatcher: dict[str, int]


@router.get("/api")
def api_info() -> dict[str, str]:
    settings = get_settings()
    return {"service": settings.app_name, "version": settings.api_version}


@router.get("/health", response_model=HealthResponse)
def healthcheck(runtime: ChatRuntime = Depends(get_runtime)) -> HealthResponse:
    try:
        store_ok = runtime.store.ping()
    except StoreError:
        logger.warning("Health check could not reach the chat store")
        store_ok = False
    return HealthResponse(
        status="ok" if store_ok else "degraded",
        store=store_ok,
        online_users=len(runtime.registry),
        connections=runtime.registry.connection_count(),
        dispatcher=runtime.dispatcher.stats(),
    )


__all__ = ["router"]
