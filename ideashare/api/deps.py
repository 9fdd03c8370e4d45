"""
ideashare.api.deps — FastAPI dependency injection
===================================================

Tokens are issued by the external auth provider; this service only
verifies them.  ``sub`` carries the acting profile id and ``is_admin``
gates the outbox endpoints.
"""

from __future__ import annotations

import os
import uuid
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from ideashare.config import IdeaShareConfig, load_config
from ideashare.database.engine import create_db_engine

_WEAK_SECRETS = frozenset({
    "ideashare-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Use the signing secret of your auth provider."
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> IdeaShareConfig:
    return load_config()


def _decode_bearer(authorization: str | None) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")


def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
) -> uuid.UUID:
    """Validate the bearer JWT and return the acting profile id."""
    payload = _decode_bearer(authorization)
    try:
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid subject")


def get_optional_user(
    authorization: Annotated[str | None, Header()] = None,
) -> uuid.UUID | None:
    """Like :func:`get_current_user` but anonymous callers get ``None``."""
    if authorization is None:
        return None
    return get_current_user(authorization)


def get_current_admin(
    authorization: Annotated[str | None, Header()] = None,
) -> dict:
    """Validate JWT and return admin user payload. Raises 401 if invalid."""
    payload = _decode_bearer(authorization)
    if not payload.get("is_admin"):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not admin")
    return payload


EngineDep = Annotated[Engine, Depends(get_engine)]
ConfigDep = Annotated[IdeaShareConfig, Depends(get_config)]
UserDep = Annotated[uuid.UUID, Depends(get_current_user)]
OptionalUserDep = Annotated[uuid.UUID | None, Depends(get_optional_user)]
