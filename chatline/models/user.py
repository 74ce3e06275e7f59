"""Public user record shared with clients."""
from __future__ import annotations

from pydantic import BaseModel


class UserDisplay(BaseModel):
    id: str
    username: str


__all__ = ["UserDisplay"]
