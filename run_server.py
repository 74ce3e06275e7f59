"""Entry point for running the chat service with Uvicorn."""
from __future__ import annotations

import os

import uvicorn


def main() -> None:
  port = int(os.getenv("SERVER_PORT", os.getenv("PORT", "8000")))
  reload = os.getenv("UVICORN_RELOAD", "false").lower() == "true"
  log_level = os.getenv("LOG_LEVEL", "info").lower()
  uvicorn.run("chatline.main:app", host="0.0.0.0", port=port, reload=reload, log_level=log_level)


if __name__ == "__main__":
  main()
