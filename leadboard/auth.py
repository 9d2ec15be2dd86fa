from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Cookie, Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select

from .config import Settings
from .crypto import sha256_hex
from .db import APIKey, Database, User
from .errors import AuthError
from .guard import Principal

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"
AUTH_COOKIE = "Authorization"

bearer = HTTPBearer(auto_error=False)


def create_access_token(settings: Settings, user_id: int) -> str:
    expires = datetime.now(timezone.utc) + timedelta(seconds=settings.jwt_ttl_seconds)
    claims = {"sub": str(user_id), "exp": int(expires.timestamp())}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str) -> int:
    """Return the user id carried by a valid token; expiry is checked by jose."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError) as exc:
        raise AuthError("invalid token") from exc


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_current_principal(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    cookie_token: Optional[str] = Cookie(default=None, alias=AUTH_COOKIE),
    settings: Settings = Depends(get_settings),
    database: Database = Depends(get_database),
) -> Principal:
    token = creds.credentials if creds and creds.credentials else cookie_token
    if not token:
        raise AuthError("authorization header required")
    if token.startswith("Bearer "):
        token = token[len("Bearer ") :].strip()
    user_id = decode_access_token(settings, token)
    with database.transaction("load user") as session:
        user = session.scalars(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        ).first()
        if user is None:
            logger.warning("token for unknown user %s", user_id)
            raise AuthError("unauthorized")
        return Principal(user_id=user.id)


def get_api_key_principal(
    api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
    database: Database = Depends(get_database),
) -> Principal:
    if not api_key:
        raise AuthError(f"API key required in '{API_KEY_HEADER}' header")
    with database.transaction("load api key") as session:
        key = session.scalars(
            select(APIKey).where(APIKey.hash == sha256_hex(api_key), APIKey.deleted_at.is_(None))
        ).first()
        if key is None:
            raise AuthError("invalid API key")
        return Principal(user_id=key.user_id, api_key_id=key.id)


def create_state_token(settings: Settings, ttl_seconds: int = 600) -> str:
    """Signed, short-lived OAuth ``state`` so the callback can verify it statelessly."""
    expires = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
    return jwt.encode(
        {"purpose": "oauth_state", "exp": int(expires.timestamp())},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def verify_state_token(settings: Settings, state: str) -> None:
    try:
        payload = jwt.decode(state, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise AuthError("invalid oauth state") from exc
    if payload.get("purpose") != "oauth_state":
        raise AuthError("invalid oauth state")
