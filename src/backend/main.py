"""
PolitiRate Backend Application

A civic platform for rating political leaders and answering targeted polls.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from api.v1 import router as api_v1_router
from core.config import settings
from core.events import create_start_app_handler, create_stop_app_handler
from core.middleware import REQUEST_ID_HEADER, RequestContextMiddleware, SecurityHeadersMiddleware

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database and schedule expiry jobs for the life of the process."""
    await create_start_app_handler(app)()
    yield
    await create_stop_app_handler(app)()


async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected failure and answer with an opaque 500."""
    logger.exception(
        "unhandled_exception",
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Something went wrong on our side. Please try again later.",
            "error_type": type(exc).__name__ if settings.DEBUG else "InternalServerError",
        },
    )


def create_application() -> FastAPI:
    """Assemble the PolitiRate API with its middleware and v1 routers."""
    application = FastAPI(
        title=settings.APP_NAME,
        description="Rate political leaders and answer polls targeted to your constituency",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Last added runs first: CORS wraps everything, request ids wrap the headers
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(RequestContextMiddleware)
    application.add_middleware(GZipMiddleware, minimum_size=1000)

    # The web client needs to read rate limit headers to disable rating and
    # contact forms before the API starts answering 429
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", REQUEST_ID_HEADER],
    )

    application.add_exception_handler(Exception, unhandled_error)
    application.include_router(api_v1_router, prefix="/api/v1")

    return application


app = create_application()


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Liveness only; does not touch the database."""
    return {"status": "healthy", "service": "politirate-api"}


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }
