"""Bearer-token handling for HTTP and socket clients.

Tokens are issued by the identity service; this module only verifies them and
extracts the subject user id.
"""
from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Mapping, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ..security.secrets import MissingSecretError, require_secret
from .errors import Unauthenticated

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)

ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
DEFAULT_TOKEN_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))

TOKEN_QUERY_PARAM = "token"
TOKEN_COOKIE = "auth_token"


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    try:
        return require_secret("JWT_SECRET_KEY")
    except MissingSecretError as exc:
        raise RuntimeError(str(exc)) from exc


def require_signing_key() -> None:
    """Raise ``RuntimeError`` at startup when ``JWT_SECRET_KEY`` is unusable."""

    _get_jwt_secret()


def create_access_token(subject: str, *, expires_minutes: Optional[int] = None) -> str:
    """Create a signed JWT holding the provided ``subject``."""

    expire_delta = timedelta(minutes=expires_minutes or DEFAULT_TOKEN_MINUTES)
    now = datetime.now(timezone.utc)
    payload = {"sub": str(subject), "exp": now + expire_delta, "iat": now}
    return jwt.encode(payload, _get_jwt_secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    """Validate ``token`` and return its subject user id."""

    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError as exc:
        raise Unauthenticated("Invalid token") from exc

    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        raise Unauthenticated("Invalid token payload")
    return subject


def _strip_bearer(value: str | None) -> str | None:
    if not value:
        return None
    scheme, _, credentials = value.strip().partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


def resolve_bearer_token(
    headers: Mapping[str, str],
    query_params: Mapping[str, str],
    cookies: Mapping[str, str],
) -> str | None:
    """Pick the credential from the auth header, then ``?token=``, then the cookie."""

    token = _strip_bearer(headers.get("authorization"))
    if token:
        return token
    token = (query_params.get(TOKEN_QUERY_PARAM) or "").strip()
    if token:
        return token
    token = (cookies.get(TOKEN_COOKIE) or "").strip()
    return token or None


def authenticate(
    headers: Mapping[str, str],
    query_params: Mapping[str, str],
    cookies: Mapping[str, str],
) -> str:
    """Resolve and verify a credential, returning the user id."""

    token = resolve_bearer_token(headers, query_params, cookies)
    if token is None:
        raise Unauthenticated("Authorization token is required")
    return decode_access_token(token)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
) -> str:
    """Resolve the authenticated user id from the provided bearer token."""

    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    try:
        return decode_access_token(credentials.credentials)
    except Unauthenticated as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


__all__ = [
    "ALGORITHM",
    "TOKEN_COOKIE",
    "TOKEN_QUERY_PARAM",
    "authenticate",
    "create_access_token",
    "decode_access_token",
    "get_current_user_id",
    "require_signing_key",
    "resolve_bearer_token",
]
