"""
Notification repository for database operations.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.notification import Notification
from schemas.notification import NotificationCreate, NotificationUpdate


class NotificationRepository:
    """Repository for site notification database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    async def get_by_id(self, notification_id: str) -> Optional[Notification]:
        result = await self.db.execute(select(Notification).where(Notification.id == notification_id))
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Notification]:
        """All notifications, newest first."""
        result = await self.db.execute(select(Notification).order_by(Notification.created_at.desc()))
        return list(result.scalars().all())

    async def list_active(self, now: Optional[datetime] = None) -> list[Notification]:
        """Active notifications inside their time window, newest first."""
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(
            select(Notification)
            .where(
                and_(
                    Notification.is_active == True,
                    or_(Notification.start_time.is_(None), Notification.start_time <= now),
                    or_(Notification.end_time.is_(None), Notification.end_time >= now),
                )
            )
            .order_by(Notification.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, data: NotificationCreate) -> Notification:
        notification = Notification(
            id=str(uuid4()),
            title=data.title,
            message=data.message,
            is_active=data.is_active,
            start_time=data.start_time,
            end_time=data.end_time,
            notification_type=data.notification_type.value,
            show_banner=data.show_banner,
            link=data.link,
            target_filters=data.target_filters.to_storage() if data.target_filters else None,
        )

        self.db.add(notification)
        await self.db.flush()
        await self.db.refresh(notification)

        return notification

    async def update(self, notification: Notification, data: NotificationUpdate) -> Notification:
        """Apply only the fields present in the request."""
        updates = data.model_dump(exclude_unset=True)
        # Columns that cannot be cleared
        for field in ("title", "message", "is_active", "notification_type", "show_banner"):
            if field in updates and updates[field] is None:
                del updates[field]

        if "target_filters" in updates:
            updates["target_filters"] = data.target_filters.to_storage() if data.target_filters else None
        if updates.get("notification_type") is not None:
            updates["notification_type"] = data.notification_type.value

        for field, value in updates.items():
            setattr(notification, field, value)
        notification.updated_at = datetime.now(timezone.utc)

        await self.db.flush()
        await self.db.refresh(notification)

        return notification

    async def delete(self, notification_id: str) -> bool:
        result = await self.db.execute(delete(Notification).where(Notification.id == notification_id))
        return self._get_rowcount(result) > 0

    async def deactivate(self, notification_id: str) -> bool:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id)
            .values(is_active=False, updated_at=datetime.now(timezone.utc))
        )
        return self._get_rowcount(result) > 0

    async def deactivate_ended(self, now: Optional[datetime] = None) -> int:
        """Deactivate notifications whose end_time has passed."""
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(
            update(Notification)
            .where(
                and_(
                    Notification.is_active == True,
                    Notification.end_time.is_not(None),
                    Notification.end_time < now,
                )
            )
            .values(is_active=False)
        )
        return self._get_rowcount(result)
