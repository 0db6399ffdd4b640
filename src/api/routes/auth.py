"""Identity API routes.

Provides:
- POST /api/v1/auth/anonymous  (issue a token for a fresh anonymous namespace)
- GET  /api/v1/auth/me         (current identity)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.core.auth import Identity, get_current_identity, issue_anonymous_identity
from src.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
limiter = Limiter(key_func=get_remote_address, default_limits=["100/minute"])


class AnonymousTokenResponse(BaseModel):
    """Token for a newly created anonymous identity."""

    access_token: str
    token_type: str = "bearer"
    user_id: str


class IdentityResponse(BaseModel):
    model_config = {"from_attributes": True}

    user_id: str
    anonymous: bool


@router.post("/anonymous", response_model=AnonymousTokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def sign_in_anonymously(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Create an anonymous identity for a client with no prior credential.

    The returned token scopes every record operation to the new user id.
    """
    if not settings.anonymous_auth_enabled:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Anonymous sign-in is disabled",
        )

    identity, token = issue_anonymous_identity(settings)
    return {"access_token": token, "token_type": "bearer", "user_id": identity.user_id}


@router.get("/me", response_model=IdentityResponse)
async def get_me(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Return the identity behind the current token."""
    return identity
