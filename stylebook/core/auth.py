"""
Auth utilities for the Stylebook API.

Validates Clerk JWTs and resolves the caller's Person record.
Falls back to the X-User-Id header outside production (tests, local dev).
"""
from fastapi import Depends, Header, HTTPException, Request
from typing import Optional
from stylebook.core import clerk_auth
from stylebook.core.config import settings
from stylebook.models.person import Person
import httpx
import jwt
import logging

logger = logging.getLogger(__name__)


def verify_clerk_jwt(token: str) -> Optional[str]:
    """
    Verify Clerk JWT and extract user_id.

    Args:
        token: JWT from Authorization header (Bearer {token})

    Returns:
        user_id: Extracted from JWT's 'sub' claim, or None if Clerk is not configured

    Raises:
        HTTPException 401: Invalid or expired token, or the JWKS could not be fetched
    """
    if not clerk_auth.is_configured():
        logger.debug("Clerk not configured, skipping JWT validation")
        return None

    try:
        payload = clerk_auth.verify_jwt_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.PyJWTError as e:
        logger.debug(f"Invalid token: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch Clerk JWKS: {e}")
        raise HTTPException(status_code=401, detail="Token verification failed")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


async def get_current_user_id(
    request: Request,
    x_user_id: Optional[str] = Header(None, description="Dev/test user ID"),
) -> str:
    """
    Extract current Clerk user ID from request context.

    Priority:
    1. Clerk JWT from Authorization header
    2. X-User-Id header (not in production)
    3. Raise 401 Unauthorized
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        user_id = verify_clerk_jwt(auth_header[7:])
        if user_id:
            return user_id

    if x_user_id and settings.ENVIRONMENT != "prod":
        return x_user_id

    raise HTTPException(
        status_code=401,
        detail="Missing Authorization (Bearer JWT) or X-User-Id header",
    )


def get_current_person(user_id: str = Depends(get_current_user_id)) -> Person:
    """Resolve the caller's Person; 404 (person_not_found) when it does not exist yet."""
    from stylebook.features.people.service import require_person
    return require_person(user_id)


def get_or_create_current_person(user_id: str = Depends(get_current_user_id)) -> Person:
    from stylebook.features.people.service import get_or_create_person
    return get_or_create_person(user_id)
