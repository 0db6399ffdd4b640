"""Identity for the record store: signed JWTs carrying a per-user namespace.

Supports:
- Anonymous identity issuance (a fresh user id per new client)
- Token decoding with key rotation
- FastAPI dependency for extracting the current identity
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError

from src.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Bearer token scheme (auto_error=False so we can give clear messages)
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The caller's record namespace."""

    user_id: str
    anonymous: bool = True


# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------


def create_access_token(
    data: dict[str, Any],
    settings: Settings | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token.

    Args:
        data: Claims to include in the token (must include "sub").
        settings: Application settings. Defaults to get_settings().
        expires_delta: Custom expiry. Defaults to config value.

    Returns:
        Encoded JWT string.
    """
    if settings is None:
        settings = get_settings()

    to_encode = data.copy()
    expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings | None = None) -> dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        HTTPException: If the token is invalid or expired.
    """
    if settings is None:
        settings = get_settings()

    last_exc: PyJWTError | None = None
    for key in settings.jwt_verification_keys:
        try:
            return jwt.decode(token, key, algorithms=[settings.jwt_algorithm])
        except PyJWTError as exc:
            last_exc = exc
            continue

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    ) from last_exc


def identity_from_token(token: str, settings: Settings | None = None) -> Identity:
    """Resolve the identity carried by an access token.

    Raises:
        HTTPException 401: If the token is invalid, not an access token,
            or has no subject.
    """
    payload = decode_token(token, settings)

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not an access token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing subject claim",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Identity(user_id=str(user_id), anonymous=bool(payload.get("anonymous", False)))


def issue_anonymous_identity(settings: Settings | None = None) -> tuple[Identity, str]:
    """Create a new anonymous namespace and a token for it.

    Used when a client has no prior credential.
    """
    identity = Identity(user_id=str(uuid.uuid4()), anonymous=True)
    token = create_access_token({"sub": identity.user_id, "anonymous": True}, settings)
    logger.info("Issued anonymous identity %s", identity.user_id)
    return identity, token


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Identity:
    """FastAPI dependency that extracts and validates the caller's identity.

    Raises:
        HTTPException 401: If the token is missing or invalid.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return identity_from_token(credentials.credentials, settings)
