"""Caller identity for the write endpoints (companies, jobs, ignored jobs).

``get_current_profile`` is a FastAPI dependency that:
1. Extracts the ``Authorization: Bearer <token>`` header.
2. Downloads / caches the JSON Web Key Set of the identity provider.
3. Verifies signature, expiration, audience and issuer.
4. Fetches or creates the matching ``models.Profile`` row by e-mail.

Configured through settings (``AUTH_ENABLED``, ``AUTH_JWKS_URL``,
``AUTH_ISSUER``, ``AUTH_AUDIENCE``). With auth disabled a local development
profile is used instead, so the API is usable without an identity provider.
Search endpoints never depend on this module.
"""
from __future__ import annotations

import uuid
from functools import lru_cache
from typing import Annotated, Optional

import httpx
import structlog
from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session

import crud
import models
import schemas
from database import get_db
from settings import get_settings

logger = structlog.get_logger(__name__)

LOCAL_DEV_EMAIL = "local@example.com"


class TokenPayload(BaseModel):
    sub: str
    email: Optional[str] = None
    exp: int


@lru_cache
def _get_jwks() -> dict:
    jwks_url = get_settings().auth_jwks_url
    if not jwks_url:
        raise RuntimeError("AUTH_JWKS_URL must be set when auth is enabled")
    logger.info("Fetching JWKS", jwks_url=jwks_url)
    resp = httpx.get(jwks_url, timeout=10)
    resp.raise_for_status()
    return resp.json()


def verify_token(token: str) -> TokenPayload:
    """Verify a bearer JWT and return its payload.

    Raises HTTPException(401) on failure.
    """
    settings = get_settings()
    jwks = _get_jwks()

    try:
        payload = jwt.decode(
            token,
            jwks,
            algorithms=["RS256"],
            audience=settings.auth_audience,
            issuer=settings.auth_issuer,
            options={"verify_aud": settings.auth_audience is not None},
        )
        return TokenPayload.model_validate(payload)
    except JWTError as exc:
        logger.warning("JWT verification failed", exc=str(exc))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def _get_authorization_header(request: Request) -> Optional[str]:
    return request.headers.get("Authorization")


def _profile_for(db: Session, email: str, external_id: Optional[uuid.UUID] = None) -> models.Profile:
    profile = crud.get_profile_by_email(db, email)
    if not profile:
        profile = crud.create_profile(db, schemas.ProfileCreate(email=email, id=external_id))
        db.commit()
        logger.info("Created profile", profile_id=str(profile.id))
    return profile


def _external_id(sub: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(sub)
    except ValueError:
        return None


# --- FastAPI dependency ---
async def get_current_profile(
    authorization: Annotated[Optional[str], Depends(_get_authorization_header)],
    db: Session = Depends(get_db),
) -> models.Profile:
    if not get_settings().auth_enabled:
        return _profile_for(db, LOCAL_DEV_EMAIL)

    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    token = authorization.split(" ", 1)[1]
    payload = verify_token(token)
    if not payload.email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has no email claim")

    return _profile_for(db, payload.email, _external_id(payload.sub))
