"""
Rate limiting service.

Moving-window request counting backed by the ``limits`` library. The
storage comes from ``RATE_LIMIT_STORAGE_URI``: the default in-memory store
keeps one window per API worker, while a shared backend such as
``async+redis://`` applies limits across workers.
"""

import math
import time
from typing import NamedTuple, Optional

import structlog
from limits import RateLimitItemPerSecond
from limits.aio.storage import Storage
from limits.aio.strategies import MovingWindowRateLimiter
from limits.storage import storage_from_string

from core.config import settings

logger = structlog.get_logger(__name__)


class RateLimitResult(NamedTuple):
    allowed: bool
    remaining: int
    retry_after: int


class RateLimitService:
    """
    Moving window rate limiter.

    Features:
    - Per-identifier request windows
    - Remaining-request and retry-after reporting for response headers
    - Pluggable storage backend
    """

    _instance: Optional["RateLimitService"] = None

    # Key prefix for namespacing
    PREFIX_RATE_LIMIT = "rate"

    def __new__(cls) -> "RateLimitService":
        """Singleton pattern for service."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._connect(settings.RATE_LIMIT_STORAGE_URI)
        return cls._instance

    def _connect(self, storage_uri: str) -> None:
        self.storage_uri = storage_uri
        self._storage: Storage = storage_from_string(storage_uri)
        self._limiter = MovingWindowRateLimiter(self._storage)

    async def check_rate_limit(
        self,
        identifier: str,
        limit: int,
        window_seconds: int = 60,
    ) -> RateLimitResult:
        """
        Record a request and report whether it is within the limit.

        Args:
            identifier: User ID, IP address, or other identifier
            limit: Maximum requests allowed in window
            window_seconds: Time window in seconds

        Returns:
            RateLimitResult with the allowed flag, remaining requests and
            seconds until the oldest request leaves the window
        """
        item = RateLimitItemPerSecond(limit, window_seconds)

        allowed = await self._limiter.hit(item, self.PREFIX_RATE_LIMIT, identifier)
        stats = await self._limiter.get_window_stats(item, self.PREFIX_RATE_LIMIT, identifier)

        retry_after = max(1, math.ceil(stats.reset_time - time.time()))
        return RateLimitResult(allowed=allowed, remaining=stats.remaining, retry_after=retry_after)

    def reset(self) -> None:
        """Reconnect to the storage backend; clears everything held in memory."""
        self._connect(self.storage_uri)
        logger.debug("rate_limit_storage_reset", storage=self.storage_uri.split("://")[0])


def get_rate_limit_service() -> RateLimitService:
    """Get rate limit service singleton."""
    return RateLimitService()
