"""
Leader directory and rating endpoints.

Anyone can browse approved leaders. Signed-in users can propose new
leaders (reviewed by admins) and rate approved ones.
"""

from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, rate_limit_default, rate_limit_ratings
from db.session import get_db
from models.leader import Leader as LeaderModel
from models.leader import LeaderStatus
from repositories.leader_repository import LeaderRepository
from schemas.converters import leader_model_to_schema
from schemas.leader import Leader, LeaderCreate, LeaderListResponse, LeaderUpdate, LeaderWithStats, Rating, RatingCreate
from schemas.user import UserInDB

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _get_approved_leader(repo: LeaderRepository, leader_id: str) -> LeaderModel:
    leader = await repo.get_by_id(leader_id)
    if not leader or leader.status != LeaderStatus.APPROVED.value:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Leader not found",
        )
    return leader


@router.get("", response_model=LeaderListResponse)
async def list_leaders(
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    state: Optional[str] = Query(None, description="Filter by state"),
    constituency: Optional[str] = Query(None, description="Filter by constituency"),
    party: Optional[str] = Query(None, description="Filter by party"),
    search: Optional[str] = Query(None, description="Search by name"),
) -> LeaderListResponse:
    """List approved leaders with their average rating."""
    repo = LeaderRepository(db)
    rows, total = await repo.list_leaders(
        page=page,
        per_page=per_page,
        status=LeaderStatus.APPROVED.value,
        state=state,
        constituency=constituency,
        party=party,
        search_query=search,
    )

    return LeaderListResponse(
        leaders=[leader_model_to_schema(leader, average, count) for leader, average, count in rows],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=(total + per_page - 1) // per_page,
    )


@router.get("/{leader_id}", response_model=LeaderWithStats)
async def get_leader(
    leader_id: str,
    db: AsyncSession = Depends(get_db),
) -> LeaderWithStats:
    """Get an approved leader with rating stats."""
    repo = LeaderRepository(db)
    row = await repo.get_with_stats(leader_id)

    if not row or row[0].status != LeaderStatus.APPROVED.value:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Leader not found",
        )

    leader, average, count = row
    return leader_model_to_schema(leader, average, count)


@router.get("/{leader_id}/ratings", response_model=list[Rating])
async def list_leader_ratings(
    leader_id: str,
    db: AsyncSession = Depends(get_db),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[Rating]:
    """List ratings for an approved leader, newest first."""
    repo = LeaderRepository(db)
    await _get_approved_leader(repo, leader_id)

    ratings = await repo.list_ratings(leader_id, limit=limit, offset=offset)
    return [Rating.model_validate(r) for r in ratings]


@router.post(
    "",
    response_model=Leader,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_default)],
)
async def submit_leader(
    data: LeaderCreate,
    current_user: Annotated[UserInDB, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> Leader:
    """Propose a leader. It stays pending until an admin reviews it."""
    repo = LeaderRepository(db)
    leader = await repo.create(data, added_by_user_id=current_user.id)

    logger.info("leader_submitted", leader_id=str(leader.id), user_id=current_user.id)

    return Leader.model_validate(leader)


@router.patch("/{leader_id}", response_model=Leader)
async def update_own_leader(
    leader_id: str,
    data: LeaderUpdate,
    current_user: Annotated[UserInDB, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> Leader:
    """Edit a leader you submitted while it is still pending review."""
    repo = LeaderRepository(db)
    leader = await repo.get_by_id(leader_id)

    if not leader or str(leader.added_by_user_id) != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Leader not found",
        )

    if leader.status != LeaderStatus.PENDING.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only pending submissions can be edited",
        )

    leader = await repo.update(leader, data)
    return Leader.model_validate(leader)


@router.put(
    "/{leader_id}/rating",
    response_model=Rating,
    dependencies=[Depends(rate_limit_ratings)],
)
async def rate_leader(
    leader_id: str,
    data: RatingCreate,
    current_user: Annotated[UserInDB, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> Rating:
    """Rate an approved leader, replacing any earlier rating by the caller."""
    repo = LeaderRepository(db)
    await _get_approved_leader(repo, leader_id)

    try:
        rating = await repo.upsert_rating(current_user.id, leader_id, data.rating, data.review)
    except IntegrityError:
        # Leader removed or profile missing between the check and the write
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Rating could not be saved, please try again",
        )

    logger.info("leader_rated", leader_id=leader_id, user_id=current_user.id, rating=data.rating)

    return Rating.model_validate(rating)


@router.delete("/{leader_id}/rating", status_code=status.HTTP_204_NO_CONTENT)
async def delete_own_rating(
    leader_id: str,
    current_user: Annotated[UserInDB, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Remove the caller's rating of a leader."""
    repo = LeaderRepository(db)
    if not await repo.delete_rating(current_user.id, leader_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Rating not found",
        )
