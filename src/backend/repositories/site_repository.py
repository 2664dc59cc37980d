"""
Site settings and admin dashboard queries.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.leader import Leader, LeaderStatus, Rating
from models.message import SupportTicket
from models.notification import Notification
from models.poll import Poll
from models.site_settings import SiteSettings
from models.user import User
from schemas.support import DashboardStats, SiteSettingsUpdate


class SiteRepository:
    """Repository for the single settings row and dashboard statistics."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_settings(self) -> SiteSettings:
        """Return the settings row, creating it with defaults on first read."""
        result = await self.db.execute(select(SiteSettings).order_by(SiteSettings.updated_at.asc()).limit(1))
        site_settings = result.scalar_one_or_none()
        if site_settings is None:
            site_settings = SiteSettings()
            self.db.add(site_settings)
            await self.db.flush()
            await self.db.refresh(site_settings)
        return site_settings

    async def update_settings(self, data: SiteSettingsUpdate) -> SiteSettings:
        site_settings = await self.get_settings()
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(site_settings, field, value)
        site_settings.updated_at = datetime.now(timezone.utc)

        await self.db.flush()
        await self.db.refresh(site_settings)

        return site_settings

    async def _count(self, column, *conditions) -> int:
        query = select(func.count(column))
        if conditions:
            query = query.where(and_(*conditions))
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def get_dashboard_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        """Aggregate counts for the admin dashboard."""
        now = now or datetime.now(timezone.utc)

        return DashboardStats(
            total_users=await self._count(User.id),
            blocked_users=await self._count(User.id, User.is_blocked == True),
            pending_leaders=await self._count(Leader.id, Leader.status == LeaderStatus.PENDING.value),
            approved_leaders=await self._count(Leader.id, Leader.status == LeaderStatus.APPROVED.value),
            rejected_leaders=await self._count(Leader.id, Leader.status == LeaderStatus.REJECTED.value),
            total_ratings=await self._count(Rating.id),
            active_polls=await self._count(
                Poll.id,
                Poll.is_active == True,
                or_(Poll.active_until.is_(None), Poll.active_until > now),
            ),
            active_notifications=await self._count(
                Notification.id,
                Notification.is_active == True,
                or_(Notification.start_time.is_(None), Notification.start_time <= now),
                or_(Notification.end_time.is_(None), Notification.end_time >= now),
            ),
            unread_tickets=await self._count(SupportTicket.id, SupportTicket.is_read == False),
        )
