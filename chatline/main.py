"""Application entry point for the realtime chat backend."""
from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .dependencies import build_runtime
from .routers import chats_router, presence_router, realtime_router, system_router
from .services.auth_service import require_signing_key
from .store import ChatStore, build_store

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, store: ChatStore | None = None) -> FastAPI:
    """Build the FastAPI application.

    When ``store`` is given the caller owns it and it is not closed on shutdown.
    """

    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, version=settings.api_version)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(system_router)
    app.include_router(chats_router)
    app.include_router(presence_router)
    app.include_router(realtime_router)

    owns_store = store is None

    @app.on_event("startup")
    async def _startup() -> None:
        """Fail fast on missing secrets or an unreachable store, then start the workers."""

        require_signing_key()
        chat_store = store if store is not None else build_store(settings)
        try:
            await asyncio.to_thread(chat_store.ping)
            ensure_indexes = getattr(chat_store, "ensure_indexes", None)
            if ensure_indexes is not None:
                await asyncio.to_thread(ensure_indexes)
        except Exception:
            logger.exception("Chat store initialisation failed")
            raise

        runtime = build_runtime(settings, chat_store)
        runtime.dispatcher.start()
        app.state.runtime = runtime
        logger.info("%s %s ready (store=%s)", settings.app_name, settings.api_version, type(chat_store).__name__)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        """Drain the broadcast queue and release the store."""

        runtime = getattr(app.state, "runtime", None)
        if runtime is None:
            return
        await runtime.dispatcher.close()
        if owns_store:
            await asyncio.to_thread(runtime.store.close)

    return app


app = create_app()
