"""
Runtime configuration helpers for the chat service.

Loads the ``.env`` file matching ``APP_ENV`` (``.env.local`` by default) from
the project root, then resolves typed settings from the environment.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

_ENV_FILES = {
    "prod": ".env.prod",
    "dev": ".env.dev",
    "local": ".env.local",
}

APP_ENV = os.getenv("APP_ENV", "local").strip().lower() or "local"
ENV_PATH = BASE_DIR / _ENV_FILES.get(APP_ENV, ".env.local")

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)
load_dotenv(dotenv_path=BASE_DIR / ".env", override=False)


class Settings(BaseSettings):
    app_name: str = Field(default="Chatline", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")

    # Persistence
    store_backend: str = Field(default="memory", alias="STORE_BACKEND")
    mongo_uri: str | None = Field(default=None, alias="MONGO_URI")
    mongo_user: str | None = Field(default=None, alias="MONGO_USER")
    mongo_password: str | None = Field(default=None, alias="MONGO_PASSWORD")
    db_name: str = Field(default="chatline", alias="DB_NAME")

    # Fan-out
    broadcast_queue_size: int = Field(default=1000, ge=1, alias="BROADCAST_QUEUE_SIZE")
    broadcast_workers: int | None = Field(default=None, ge=1, alias="BROADCAST_WORKERS")

    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def worker_count(self) -> int:
        return self.broadcast_workers or os.cpu_count() or 1

    @property
    def allowed_origins(self) -> list[str]:
        if not self.cors_origins:
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["APP_ENV", "Settings", "get_settings"]
