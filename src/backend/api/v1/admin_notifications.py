"""
Admin Notification Management Endpoints.

Site-wide banners and announcements, optionally targeted at a demographic
audience. All endpoints require admin privileges.
"""

import logging
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_admin_user
from db.session import get_db
from repositories.notification_repository import NotificationRepository
from schemas.notification import Notification, NotificationCreate, NotificationUpdate
from schemas.user import UserInDB

logger = logging.getLogger(__name__)

router = APIRouter()


def _window_is_valid(start: Optional[datetime], end: Optional[datetime]) -> bool:
    return start is None or end is None or start < end


@router.get("", response_model=list[Notification])
async def list_notifications(
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> list[Notification]:
    """List every notification, newest first."""
    repo = NotificationRepository(db)
    notifications = await repo.list_all()
    return [Notification.model_validate(n) for n in notifications]


@router.get("/active", response_model=list[Notification])
async def list_active_notifications(
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> list[Notification]:
    """List notifications currently live for at least some audience."""
    repo = NotificationRepository(db)
    notifications = await repo.list_active()
    return [Notification.model_validate(n) for n in notifications]


@router.post("", response_model=Notification, status_code=status.HTTP_201_CREATED)
async def create_notification(
    data: NotificationCreate,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> Notification:
    """Create a notification."""
    repo = NotificationRepository(db)
    notification = await repo.create(data)

    logger.info(
        f"Admin {admin.id} created notification {notification.id}",
        extra={"admin_id": admin.id, "notification_id": str(notification.id)},
    )

    return Notification.model_validate(notification)


@router.patch("/{notification_id}", response_model=Notification)
async def update_notification(
    notification_id: str,
    data: NotificationUpdate,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> Notification:
    """Update the provided fields of a notification."""
    repo = NotificationRepository(db)
    notification = await repo.get_by_id(notification_id)

    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )

    # Check the window against stored values for whichever side was not sent
    fields = data.model_fields_set
    start = data.start_time if "start_time" in fields else notification.start_time
    end = data.end_time if "end_time" in fields else notification.end_time
    if not _window_is_valid(start, end):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="End time must be after start time",
        )

    notification = await repo.update(notification, data)

    logger.info(
        f"Admin {admin.id} updated notification {notification_id}",
        extra={"admin_id": admin.id, "notification_id": notification_id},
    )

    return Notification.model_validate(notification)


@router.post("/{notification_id}/deactivate", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_notification(
    notification_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Hide a notification without deleting it."""
    repo = NotificationRepository(db)
    if not await repo.deactivate(notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Permanently delete a notification."""
    repo = NotificationRepository(db)
    if not await repo.delete(notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )

    logger.warning(
        f"Admin {admin.id} deleted notification {notification_id}",
        extra={"admin_id": admin.id, "notification_id": notification_id},
    )
