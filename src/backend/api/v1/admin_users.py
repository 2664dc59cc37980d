"""
Admin User Management Endpoints.

List and count profiles, block abusive accounts and message users.
"""

import logging
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_admin_user
from db.session import get_db
from repositories.message_repository import AdminMessageRepository
from repositories.user_repository import UserRepository
from schemas.user import (
    AdminMessage,
    AdminMessageCreate,
    AdminUserListItem,
    BlockUserRequest,
    UserCountResponse,
    UserInDB,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class AdminUserListResponse(BaseModel):
    users: list[AdminUserListItem]
    total: int
    page: int
    per_page: int
    total_pages: int


@router.get("", response_model=AdminUserListResponse)
async def list_users(
    _admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    name: Optional[str] = Query(None, description="Search by name"),
    location: Optional[str] = Query(None, description="Search location, state or constituency"),
    is_blocked: Optional[bool] = Query(None, description="Filter by block status"),
) -> AdminUserListResponse:
    """List profiles with their leader submissions and rating counts."""
    repo = UserRepository(db)
    rows, total = await repo.list_users(
        page=page,
        per_page=per_page,
        name=name,
        location=location,
        is_blocked=is_blocked,
    )

    users = []
    for user, leader_count, rating_count in rows:
        item = AdminUserListItem.model_validate(user)
        item.leader_count = leader_count
        item.rating_count = rating_count
        users.append(item)

    return AdminUserListResponse(
        users=users,
        total=total,
        page=page,
        per_page=per_page,
        total_pages=(total + per_page - 1) // per_page,
    )


@router.get("/count", response_model=UserCountResponse)
async def count_users(
    _admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
    created_from: Optional[datetime] = Query(None),
    created_to: Optional[datetime] = Query(None),
    location: Optional[str] = Query(None),
) -> UserCountResponse:
    """Count profiles, optionally by signup range and location."""
    if created_from and created_to and created_from > created_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="created_from must be before created_to",
        )

    repo = UserRepository(db)
    count = await repo.count_users(created_from=created_from, created_to=created_to, location=location)
    return UserCountResponse(count=count)


@router.post("/{user_id}/block", status_code=status.HTTP_204_NO_CONTENT)
async def block_user(
    user_id: str,
    request: BlockUserRequest,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Block a user until blocked_until, or indefinitely."""
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot block yourself",
        )

    repo = UserRepository(db)
    if not await repo.block_user(user_id, request.reason, request.blocked_until):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    logger.warning(
        f"Admin {admin.id} blocked user {user_id}",
        extra={"admin_id": admin.id, "user_id": user_id, "blocked_until": request.blocked_until},
    )


@router.post("/{user_id}/unblock", status_code=status.HTTP_204_NO_CONTENT)
async def unblock_user(
    user_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = UserRepository(db)
    if not await repo.unblock_user(user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    logger.info(f"Admin {admin.id} unblocked user {user_id}", extra={"admin_id": admin.id, "user_id": user_id})


# ============================================================================
# Messages
# ============================================================================


@router.post("/{user_id}/messages", response_model=AdminMessage, status_code=status.HTTP_201_CREATED)
async def send_message(
    user_id: str,
    data: AdminMessageCreate,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> AdminMessage:
    """Send a direct message to a user."""
    if not await UserRepository(db).get_by_id(user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    message = await AdminMessageRepository(db).create(user_id, data.message.strip())

    logger.info(
        f"Admin {admin.id} messaged user {user_id}",
        extra={"admin_id": admin.id, "user_id": user_id, "message_id": str(message.id)},
    )

    return AdminMessage.model_validate(message)


@router.get("/{user_id}/messages", response_model=list[AdminMessage])
async def list_user_messages(
    user_id: str,
    _admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> list[AdminMessage]:
    repo = AdminMessageRepository(db)
    return [AdminMessage.model_validate(m) for m in await repo.list_for_user(user_id)]


@router.delete("/{user_id}/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_message(
    user_id: str,
    message_id: str,
    _admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = AdminMessageRepository(db)
    if not await repo.delete(message_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        )
