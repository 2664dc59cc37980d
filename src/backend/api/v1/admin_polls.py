"""
Admin Poll Management Endpoints.

Provides full CRUD operations for polls plus aggregated results.
These endpoints are protected and require admin privileges.

Security measures:
- All endpoints require valid JWT authentication
- User must have an admin role
- Audit logging for all destructive operations
- Input validation via Pydantic schemas
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_admin_user
from db.session import get_db
from repositories.poll_repository import PollRepository
from schemas.converters import poll_model_to_admin_schema, poll_result_to_schema
from schemas.poll import AdminPoll, BreakdownAttribute, PollCreate, PollListResponse, PollResults, PollUpdate
from schemas.user import UserInDB
from services.poll_aggregator import PollData, aggregate

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# CRUD Endpoints
# ============================================================================


@router.get("", response_model=PollListResponse)
async def list_all_polls(
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(20, ge=1, le=100, description="Items per page"),
    include_inactive: bool = Query(True, description="Include inactive polls"),
    search: Optional[str] = Query(None, description="Search in poll title"),
) -> PollListResponse:
    """List all polls, including inactive and expired ones."""
    repo = PollRepository(db)

    polls, total = await repo.get_all_polls(
        page=page,
        per_page=per_page,
        include_inactive=include_inactive,
        search_query=search,
    )

    total_pages = (total + per_page - 1) // per_page

    return PollListResponse(
        polls=[poll_model_to_admin_schema(p, await repo.count_respondents(p.id)) for p in polls],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
    )


@router.get("/{poll_id}", response_model=AdminPoll)
async def get_poll_details(
    poll_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> AdminPoll:
    """Get a poll with its targeting and respondent count."""
    repo = PollRepository(db)
    poll = await repo.get_by_id(poll_id)

    if not poll:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poll not found",
        )

    return poll_model_to_admin_schema(poll, await repo.count_respondents(poll_id))


@router.post("", response_model=AdminPoll, status_code=status.HTTP_201_CREATED)
async def create_poll(
    poll_data: PollCreate,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> AdminPoll:
    """Create a poll with its questions."""
    repo = PollRepository(db)
    poll = await repo.create(poll_data)

    logger.info(
        f"Admin {admin.id} created poll {poll.id}",
        extra={"admin_id": admin.id, "poll_id": str(poll.id), "questions": len(poll_data.questions)},
    )

    return poll_model_to_admin_schema(poll)


@router.patch("/{poll_id}", response_model=AdminPoll)
async def update_poll(
    poll_id: str,
    poll_data: PollUpdate,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> AdminPoll:
    """
    Update an existing poll.

    Questions can only be replaced while the poll has no responses.
    """
    repo = PollRepository(db)
    poll = await repo.get_by_id(poll_id)

    if not poll:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poll not found",
        )

    if not poll_data.model_fields_set:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    respondents = await repo.count_respondents(poll_id)
    if poll_data.questions is not None and respondents > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot modify questions for polls with existing responses",
        )

    poll = await repo.update(poll, poll_data)

    logger.info(
        f"Admin {admin.id} updated poll {poll_id}",
        extra={"admin_id": admin.id, "poll_id": poll_id, "fields": sorted(poll_data.model_fields_set)},
    )

    return poll_model_to_admin_schema(poll, respondents)


@router.post("/{poll_id}/deactivate", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_poll(
    poll_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Close a poll without deleting its responses."""
    repo = PollRepository(db)
    if not await repo.deactivate(poll_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poll not found",
        )

    logger.info(
        f"Admin {admin.id} deactivated poll {poll_id}",
        extra={"admin_id": admin.id, "poll_id": poll_id},
    )


@router.delete("/{poll_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_poll(
    poll_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    """Permanently delete a poll and all of its responses."""
    repo = PollRepository(db)
    if not await repo.delete_poll(poll_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poll not found",
        )

    logger.warning(
        f"Admin {admin.id} deleted poll {poll_id}",
        extra={"admin_id": admin.id, "poll_id": poll_id},
    )


# ============================================================================
# Results
# ============================================================================


@router.get("/{poll_id}/results", response_model=PollResults)
async def get_poll_results(
    poll_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
    breakdown: list[BreakdownAttribute] = Query(
        [BreakdownAttribute.GENDER],
        description="Respondent attributes to break results down by",
    ),
) -> PollResults:
    """
    Aggregate a poll's responses.

    Reports per-option counts, percentages and the winning option of each
    question, plus distinct respondents per requested attribute.
    """
    repo = PollRepository(db)
    poll = await repo.get_by_id(poll_id)

    if not poll:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poll not found",
        )

    responses = await repo.get_response_records(poll_id)
    respondents = await repo.get_respondent_profiles(poll_id)

    result = aggregate(
        PollData.from_model(poll),
        responses,
        respondents=respondents,
        breakdown_by=tuple(b.value for b in breakdown),
    )

    return poll_result_to_schema(result)
