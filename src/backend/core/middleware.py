"""
HTTP middleware for the PolitiRate API.

Responses are personalised (targeted polls and notifications depend on the
caller's profile), so every response is marked uncacheable. Each request
also gets an id that is echoed back and attached to log lines.
"""

from typing import Callable
from uuid import uuid4

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Hardening headers for a JSON-only API.

    Nothing served here is meant to be framed, sniffed or rendered as a
    page, and responses differ per viewer so shared caches must skip them.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        response.headers.setdefault("Cache-Control", "no-store, private")

        return response


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id and report rate limit usage.

    The id comes from the caller's X-Request-ID header when present. It is
    bound into structlog's context so every log line for the request
    carries it. Rate limit numbers recorded by the RateLimiter dependency
    are copied onto the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        limit = getattr(request.state, "rate_limit_limit", None)
        if limit is not None:
            response.headers["X-RateLimit-Limit"] = str(limit)
            response.headers["X-RateLimit-Remaining"] = str(request.state.rate_limit_remaining)

        return response
