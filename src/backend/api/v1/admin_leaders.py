"""
Admin Leader Moderation Endpoints.

Review user-submitted leaders and remove abusive ratings.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_admin_user
from db.session import get_db
from repositories.leader_repository import LeaderRepository
from schemas.converters import leader_model_to_schema
from schemas.leader import LeaderListResponse, LeaderModeration, LeaderStatusEnum, LeaderWithStats
from schemas.user import UserInDB

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=LeaderListResponse)
async def list_all_leaders(
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status_filter: Optional[LeaderStatusEnum] = Query(None, alias="status", description="Filter by status"),
    search: Optional[str] = Query(None, description="Search by name"),
) -> LeaderListResponse:
    """List leaders of any status."""
    repo = LeaderRepository(db)
    rows, total = await repo.list_leaders(
        page=page,
        per_page=per_page,
        status=status_filter.value if status_filter else None,
        search_query=search,
    )

    return LeaderListResponse(
        leaders=[leader_model_to_schema(leader, average, count) for leader, average, count in rows],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=(total + per_page - 1) // per_page,
    )


@router.post("/{leader_id}/moderate", response_model=LeaderWithStats)
async def moderate_leader(
    leader_id: str,
    decision: LeaderModeration,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> LeaderWithStats:
    """Approve or reject a leader, with an optional comment to the submitter."""
    repo = LeaderRepository(db)

    if not await repo.set_status(leader_id, decision.status.value, decision.admin_comment):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Leader not found",
        )

    logger.info(
        f"Admin {admin.id} set leader {leader_id} to {decision.status.value}",
        extra={"admin_id": admin.id, "leader_id": leader_id, "status": decision.status.value},
    )

    leader, average, count = await repo.get_with_stats(leader_id)
    return leader_model_to_schema(leader, average, count)


@router.delete("/{leader_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_leader(
    leader_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Permanently delete a leader and its ratings."""
    repo = LeaderRepository(db)
    if not await repo.delete(leader_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Leader not found",
        )

    logger.warning(
        f"Admin {admin.id} deleted leader {leader_id}",
        extra={"admin_id": admin.id, "leader_id": leader_id},
    )


@router.delete("/{leader_id}/ratings/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_rating(
    leader_id: str,
    user_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Remove a user's rating of a leader."""
    repo = LeaderRepository(db)
    if not await repo.delete_rating(user_id, leader_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Rating not found",
        )

    logger.warning(
        f"Admin {admin.id} deleted rating by {user_id} on leader {leader_id}",
        extra={"admin_id": admin.id, "leader_id": leader_id, "user_id": user_id},
    )
