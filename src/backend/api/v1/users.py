"""
User profile and message endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user
from db.session import get_db
from repositories.message_repository import AdminMessageRepository
from repositories.user_repository import UserRepository
from schemas.user import AdminMessage, UserInDB, UserProfile, UserProfileUpdate

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def get_current_user_profile(
    current_user: Annotated[UserInDB, Depends(get_current_user)],
) -> UserProfile:
    """
    Get the current user's profile.
    """
    return UserProfile.model_validate(current_user.model_dump())


@router.patch("/me", response_model=UserProfile)
async def update_current_user_profile(
    profile_update: UserProfileUpdate,
    current_user: Annotated[UserInDB, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> UserProfile:
    """
    Update the current user's name, location and demographics.

    Demographics decide which targeted polls and notifications are shown.
    """
    user_repo = UserRepository(db)
    user = await user_repo.get_by_id(current_user.id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    user = await user_repo.update_profile(user, profile_update)
    return UserProfile.model_validate(user)


@router.get("/me/messages", response_model=list[AdminMessage])
async def list_my_messages(
    current_user: Annotated[UserInDB, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> list[AdminMessage]:
    """Messages from admins, unread first."""
    repo = AdminMessageRepository(db)
    messages = await repo.list_for_user(current_user.id)
    return [AdminMessage.model_validate(m) for m in messages]


@router.post("/me/messages/{message_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_message_read(
    message_id: str,
    current_user: Annotated[UserInDB, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Mark one of the caller's messages as read."""
    repo = AdminMessageRepository(db)
    if not await repo.mark_read(message_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        )
