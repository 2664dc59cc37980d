"""
Background Scheduler Service

Manages scheduled maintenance tasks using APScheduler:
- Deactivate polls past their active_until
- Deactivate notifications past their end_time
- Lift user blocks past their blocked_until

This runs in-process with the FastAPI application.
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings
from db.session import async_session_maker
from repositories.notification_repository import NotificationRepository
from repositories.poll_repository import PollRepository
from repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

# Global scheduler instance
_scheduler: AsyncIOScheduler | None = None


async def run_maintenance_cycle(now: datetime | None = None) -> dict:
    """
    Expire stale content and lift finished blocks in one transaction.

    Returns the number of rows changed per task.
    """
    now = now or datetime.now(timezone.utc)

    async with async_session_maker() as db:
        try:
            expired_polls = await PollRepository(db).deactivate_expired(now)
            expired_notifications = await NotificationRepository(db).deactivate_ended(now)
            lifted_blocks = await UserRepository(db).lift_expired_blocks(now)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    return {
        "expired_polls": expired_polls,
        "expired_notifications": expired_notifications,
        "lifted_blocks": lifted_blocks,
    }


async def maintenance_job() -> None:
    """Scheduled wrapper around run_maintenance_cycle."""
    logger.info("Starting maintenance job...")

    try:
        result = await run_maintenance_cycle()
        logger.info(
            "Maintenance completed",
            extra=result,
        )
    except Exception as e:
        logger.error(f"Maintenance job failed: {e}", exc_info=True)


def get_scheduler() -> AsyncIOScheduler:
    """Get the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler(timezone=timezone.utc)
    return _scheduler


async def start_scheduler() -> None:
    """Start the background scheduler with all jobs."""
    scheduler = get_scheduler()

    if scheduler.running:
        logger.info("Scheduler already running")
        return

    logger.info("Configuring background scheduler...")

    scheduler.add_job(
        maintenance_job,
        trigger=IntervalTrigger(minutes=settings.MAINTENANCE_INTERVAL_MINUTES),
        id="maintenance",
        name="Maintenance",
        replace_existing=True,
        max_instances=1,
    )
    logger.info(f"Added maintenance job (every {settings.MAINTENANCE_INTERVAL_MINUTES} minutes)")

    scheduler.start()
    logger.info("Background scheduler started")

    # Catch up on anything that expired while the app was down
    await maintenance_job()


async def stop_scheduler() -> None:
    """Stop the background scheduler gracefully."""
    global _scheduler

    if _scheduler and _scheduler.running:
        logger.info("Stopping background scheduler...")
        _scheduler.shutdown(wait=True)
        logger.info("Background scheduler stopped")

    _scheduler = None
