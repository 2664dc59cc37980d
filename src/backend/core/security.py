"""Security utilities for authentication.

Sessions live with the hosted auth service. The API never sees passwords:
it only verifies the signed access tokens the auth service hands to clients.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from core.config import settings


def create_access_token(
    user_id: str,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """
    Mint an access token shaped like the ones the auth service issues.

    Used by local tooling and tests; production tokens come from the
    auth service itself.
    """
    now = datetime.now(timezone.utc)
    to_encode: dict[str, Any] = {
        "sub": user_id,
        "aud": settings.AUTH_JWT_AUDIENCE,
        "role": "authenticated",
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=1)),
    }
    if settings.AUTH_JWT_ISSUER:
        to_encode["iss"] = settings.AUTH_JWT_ISSUER
    if extra_claims:
        to_encode.update(extra_claims)
    return jwt.encode(to_encode, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate an access token.

    Checks signature, expiry, audience and (when configured) issuer.

    Returns:
        The decoded payload or None if invalid
    """
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            issuer=settings.AUTH_JWT_ISSUER,
        )
    except JWTError:
        return None
