"""
Public notification endpoints.

Notifications with a target filter are only shown to viewers whose profile
matches it. Anonymous visitors see untargeted notifications only.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user_optional
from db.session import get_db
from repositories.notification_repository import NotificationRepository
from schemas.notification import ViewerNotification
from schemas.user import UserInDB
from services.audience_filter import ANONYMOUS, Viewer, filter_for_viewer

router = APIRouter()


@router.get("", response_model=list[ViewerNotification])
async def list_active_notifications(
    current_user: Annotated[Optional[UserInDB], Depends(get_current_user_optional)],
    db: AsyncSession = Depends(get_db),
) -> list[ViewerNotification]:
    """Get the active notifications visible to the caller, newest first."""
    repo = NotificationRepository(db)
    notifications = await repo.list_active()

    viewer = Viewer.from_user(current_user) if current_user else ANONYMOUS
    visible = filter_for_viewer(notifications, viewer)

    return [ViewerNotification.model_validate(n) for n in visible]
