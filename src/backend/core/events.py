"""
Startup and shutdown hooks.

On startup the database must answer before the API takes traffic. The
maintenance scheduler is optional: if it fails to start, polls,
notifications and blocks still expire at read time, they just stay flagged
active in the database until an admin runs maintenance by hand.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from db.session import close_db, init_db

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Build the coroutine run when the app starts."""

    async def start_app() -> None:
        logger.info("api_starting", app=settings.APP_NAME, env=settings.APP_ENV)

        await init_db()
        logger.info("database_ready", host=settings.POSTGRES_HOST, db=settings.POSTGRES_DB)

        if not settings.ENABLE_MAINTENANCE_JOBS:
            logger.info("maintenance_jobs_disabled")
        else:
            try:
                from services.background_scheduler import start_scheduler

                await start_scheduler()
                logger.info("maintenance_jobs_scheduled", every_minutes=settings.MAINTENANCE_INTERVAL_MINUTES)
            except Exception as e:
                logger.exception("maintenance_jobs_failed_to_start", error=str(e))

        logger.info("api_started")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Build the coroutine run when the app shuts down."""

    async def stop_app() -> None:
        logger.info("api_stopping")

        try:
            from services.background_scheduler import stop_scheduler

            await stop_scheduler()
        except Exception as e:
            logger.warning("maintenance_jobs_stop_failed", error=str(e))

        await close_db()
        logger.info("api_stopped")

    return stop_app
