"""
Shared dependencies for API endpoints.

Includes:
- Verification of access tokens issued by the hosted auth provider
- Blocked-account enforcement
- Rate limiting (per-user, falling back to client IP)
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.security import decode_token
from db.session import get_db
from models.user import User
from schemas.converters import user_model_to_schema
from schemas.user import UserInDB
from services.rate_limit_service import RateLimitService, get_rate_limit_service

logger = structlog.get_logger(__name__)

# Security schemes
security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)


# =============================================================================
# Helper Functions
# =============================================================================


async def _load_user(db: AsyncSession, token: str) -> User | None:
    payload = decode_token(token)
    if payload is None or not payload.get("sub"):
        return None

    result = await db.execute(select(User).where(User.id == payload["sub"]))
    return result.scalar_one_or_none()


# =============================================================================
# User Authentication (JWT-based)
# =============================================================================


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: AsyncSession = Depends(get_db),
) -> UserInDB:
    """
    Extract and validate the current user from the JWT token.

    Raises:
        HTTPException: 401 if the token is invalid or has no profile,
            403 if the account is blocked.
    """
    user = await _load_user(db, credentials.credentials)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.is_currently_blocked:
        logger.warning("blocked_user_access_attempt", user_id=str(user.id))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": "Your account has been blocked",
                "reason": user.block_reason,
                "blocked_until": user.blocked_until.isoformat() if user.blocked_until else None,
            },
        )

    return user_model_to_schema(user)


async def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_optional)],
    db: AsyncSession = Depends(get_db),
) -> UserInDB | None:
    """
    Optionally extract the current user from the JWT token.

    Returns None if no token is provided or it is invalid. Used by public
    endpoints whose content depends on who is looking.
    """
    if credentials is None:
        return None

    user = await _load_user(db, credentials.credentials)
    if not user:
        return None

    return user_model_to_schema(user)


async def get_current_admin_user(
    current_user: Annotated[UserInDB, Depends(get_current_user)],
) -> UserInDB:
    """
    Ensure the current user is an admin.

    Raises:
        HTTPException: If user is not an admin.
    """
    if not current_user.is_admin:
        logger.warning(
            "non_admin_access_attempt",
            user_id=current_user.id,
            email=current_user.email,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


# =============================================================================
# Rate Limiting
# =============================================================================


class RateLimiter:
    """
    Rate limiter dependency for API endpoints.

    Moving window per user, or per client IP for anonymous requests.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        key_prefix: str = "api",
    ):
        self.requests_per_minute = requests_per_minute
        self.key_prefix = key_prefix

    async def __call__(
        self,
        request: Request,
        limiter: RateLimitService = Depends(get_rate_limit_service),
    ) -> None:
        """
        Check rate limit for the current request.

        Raises HTTPException 429 if rate limit exceeded.
        """
        identifier = self._get_identifier(request)
        key = f"{self.key_prefix}:{identifier}"

        result = await limiter.check_rate_limit(
            identifier=key,
            limit=self.requests_per_minute,
            window_seconds=60,
        )

        if not result.allowed:
            logger.warning(
                "rate_limit_exceeded",
                identifier=identifier[:20],
                limit=self.requests_per_minute,
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded. Please try again later.",
                headers={
                    "Retry-After": str(result.retry_after),
                    "X-RateLimit-Limit": str(self.requests_per_minute),
                    "X-RateLimit-Remaining": "0",
                },
            )

        request.state.rate_limit_remaining = result.remaining
        request.state.rate_limit_limit = self.requests_per_minute

    def _get_identifier(self, request: Request) -> str:
        """Get unique identifier for rate limiting."""
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            payload = decode_token(auth_header[7:])
            if payload and payload.get("sub"):
                return f"user:{payload['sub']}"

        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            # First IP in chain is the client
            ip = forwarded.split(",")[0].strip()
        else:
            ip = request.client.host if request.client else "unknown"

        return f"ip:{ip}"


# Pre-configured rate limiters
rate_limit_default = RateLimiter(requests_per_minute=settings.RATE_LIMIT_PER_MINUTE)
rate_limit_ratings = RateLimiter(requests_per_minute=settings.RATE_LIMIT_RATINGS_PER_MINUTE, key_prefix="rating")
rate_limit_tickets = RateLimiter(requests_per_minute=settings.RATE_LIMIT_TICKETS_PER_MINUTE, key_prefix="ticket")
