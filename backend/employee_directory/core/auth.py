"""Session token handling: reads identity claims from the bearer token."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from employee_directory.core.config import Settings
from employee_directory.models.auth import Identity

logger = logging.getLogger(__name__)


def read_session_claims(token: str, settings: Settings) -> dict[str, Any]:
    """Claims carried by the session token.

    With ``SESSION_TOKEN_SECRET`` configured the signature is verified and a bad
    token is a 401. Without it the claims are read as-is and opaque tokens yield
    no claims; the employee service remains the authority on the token.
    """
    if not token:
        return {}

    if settings.SESSION_TOKEN_SECRET:
        try:
            return jwt.decode(
                token,
                settings.SESSION_TOKEN_SECRET,
                algorithms=settings.SESSION_TOKEN_ALGORITHMS,
                options={"verify_aud": False},
            )
        except ExpiredSignatureError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token is expired",
            ) from e
        except JWTError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
            ) from e

    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        logger.debug("Session token is not a JWT — no identity claims")
        return {}


def identity_from_token(token: str, settings: Settings) -> Identity:
    claims = read_session_claims(token, settings)
    return Identity(
        token=token,
        employee_tag=_claim_str(claims, settings.SESSION_TAG_CLAIM),
        name=_claim_str(claims, settings.SESSION_NAME_CLAIM),
        role=_claim_str(claims, settings.SESSION_ROLE_CLAIM),
    )


def _claim_str(claims: dict[str, Any], name: str) -> str | None:
    value = claims.get(name)
    if isinstance(value, str | int):
        return str(value)
    return None
