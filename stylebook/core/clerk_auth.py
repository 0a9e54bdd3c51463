"""
Clerk JWT verification.

Handles:
- RS256 session tokens verified against Clerk's JWKS (fetched with httpx, cached)
- HS256 tokens signed with CLERK_SECRET_KEY (local dev, tests)
- Issuer/audience validation

Testing:
- set_jwks_provider_for_tests() swaps the JWKS fetch for a callable (no network)
"""
import json
import time
from typing import Any, Callable, Dict, Optional

import httpx
import jwt
from jwt.algorithms import RSAAlgorithm

from stylebook.core.config import settings


JWKS_TTL_SECONDS = 86400

# JWKS override (tests) and cache keyed by issuer/jwks_url
_jwks_provider_override: Optional[Callable[[str, str], Dict[str, Any]]] = None
_jwks_cache: Dict[str, tuple] = {}


def set_jwks_provider_for_tests(provider: Optional[Callable[[str, str], Dict[str, Any]]]) -> None:
    """Set or clear the JWKS provider override and drop cached key sets."""
    global _jwks_provider_override
    _jwks_provider_override = provider
    _jwks_cache.clear()


def is_configured() -> bool:
    return bool(settings.CLERK_SECRET_KEY or settings.CLERK_ISSUER or settings.CLERK_JWKS_URL)


def resolve_jwks_url() -> Optional[str]:
    if settings.CLERK_JWKS_URL:
        return settings.CLERK_JWKS_URL
    if settings.CLERK_ISSUER:
        return f"{settings.CLERK_ISSUER.rstrip('/')}/.well-known/jwks.json"
    return None


def _default_fetch_jwks(issuer: str, jwks_url: str) -> Dict[str, Any]:
    response = httpx.get(jwks_url, timeout=5.0)
    response.raise_for_status()
    return response.json()


def get_jwks(issuer: str, jwks_url: str) -> Dict[str, Any]:
    """Fetch JWKS using the override (tests) or httpx. Cached per issuer/url for a day."""
    cache_key = f"{issuer}|{jwks_url}"
    cached = _jwks_cache.get(cache_key)
    if cached and (time.time() - cached[1]) < JWKS_TTL_SECONDS:
        return cached[0]

    if _jwks_provider_override:
        jwks = _jwks_provider_override(issuer, jwks_url)
    else:
        jwks = _default_fetch_jwks(issuer, jwks_url)

    _jwks_cache[cache_key] = (jwks, time.time())
    return jwks


def _signing_key(token: str):
    header = jwt.get_unverified_header(token)
    alg = header.get("alg")

    if alg == "HS256":
        if not settings.CLERK_SECRET_KEY:
            raise jwt.InvalidAlgorithmError("HS256 tokens require CLERK_SECRET_KEY")
        return settings.CLERK_SECRET_KEY, "HS256"

    if alg != "RS256":
        raise jwt.InvalidAlgorithmError(f"Unsupported algorithm: {alg}")

    jwks_url = resolve_jwks_url()
    if not jwks_url:
        raise jwt.InvalidKeyError("CLERK_ISSUER or CLERK_JWKS_URL must be configured for RS256 verification")

    kid = header.get("kid")
    if not kid:
        raise jwt.InvalidTokenError("Token missing 'kid' in header")

    jwks = get_jwks(settings.CLERK_ISSUER or "", jwks_url)
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return RSAAlgorithm.from_jwk(json.dumps(key)), "RS256"
    raise jwt.InvalidKeyError(f"Key ID '{kid}' not found in JWKS")


def verify_jwt_token(token: str) -> Dict[str, Any]:
    """
    Verify a Clerk JWT and return its claims.

    Raises:
        jwt.PyJWTError: Invalid signature, claims or key
        httpx.HTTPError: JWKS could not be fetched
    """
    key, algorithm = _signing_key(token)
    return jwt.decode(
        token,
        key,
        algorithms=[algorithm],
        issuer=settings.CLERK_ISSUER,
        audience=settings.CLERK_AUDIENCE,
        options={
            "verify_signature": True,
            "verify_exp": True,
            "verify_aud": bool(settings.CLERK_AUDIENCE),
        },
    )
