"""
Public poll endpoints.

Polls are visible while active, before their active_until, and only to
viewers matching the poll's target filter. Each user answers each question
at most once.
"""

from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_current_user_optional, rate_limit_default
from db.session import get_db
from models.poll import Poll as PollModel
from repositories.poll_repository import PollRepository
from schemas.converters import poll_model_to_schema
from schemas.poll import Poll, PollSubmission, PollSubmissionStatus
from schemas.user import UserInDB
from services.audience_filter import ANONYMOUS, TargetFilter, Viewer, filter_for_viewer, matches

logger = structlog.get_logger(__name__)

router = APIRouter()


def _viewer(user: Optional[UserInDB]) -> Viewer:
    return Viewer.from_user(user) if user else ANONYMOUS


def _is_visible(poll: PollModel, user: Optional[UserInDB]) -> bool:
    return poll.is_open and matches(_viewer(user), TargetFilter.from_dict(poll.target_filters))


async def _get_visible_poll(repo: PollRepository, poll_id: str, user: Optional[UserInDB]) -> PollModel:
    poll = await repo.get_by_id(poll_id)

    # Hidden polls are indistinguishable from missing ones
    if not poll or not _is_visible(poll, user):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poll not found",
        )
    return poll


@router.get("", response_model=list[Poll])
async def list_polls(
    current_user: Annotated[Optional[UserInDB], Depends(get_current_user_optional)],
    db: AsyncSession = Depends(get_db),
) -> list[Poll]:
    """List open polls visible to the caller, newest first."""
    repo = PollRepository(db)
    polls = await repo.list_open_polls()

    return [poll_model_to_schema(p) for p in filter_for_viewer(polls, _viewer(current_user))]


@router.get("/{poll_id}", response_model=Poll)
async def get_poll(
    poll_id: str,
    current_user: Annotated[Optional[UserInDB], Depends(get_current_user_optional)],
    db: AsyncSession = Depends(get_db),
) -> Poll:
    """Get a single open poll visible to the caller."""
    repo = PollRepository(db)
    poll = await _get_visible_poll(repo, poll_id, current_user)

    return poll_model_to_schema(poll)


@router.get("/{poll_id}/status", response_model=PollSubmissionStatus)
async def get_response_status(
    poll_id: str,
    current_user: Annotated[UserInDB, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> PollSubmissionStatus:
    """Which questions of a visible poll the caller has already answered."""
    repo = PollRepository(db)
    await _get_visible_poll(repo, poll_id, current_user)

    answered = await repo.get_answered_question_ids(poll_id, current_user.id)

    return PollSubmissionStatus(
        poll_id=poll_id,
        has_responded=bool(answered),
        answered_question_ids=answered,
    )


@router.post(
    "/{poll_id}/responses",
    response_model=PollSubmissionStatus,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_default)],
)
async def submit_responses(
    poll_id: str,
    submission: PollSubmission,
    current_user: Annotated[UserInDB, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db),
) -> PollSubmissionStatus:
    """
    Submit answers to a poll.

    Each answer must pick an option belonging to its question. Answering a
    question twice is rejected with 409.
    """
    repo = PollRepository(db)
    poll = await _get_visible_poll(repo, poll_id, current_user)

    valid_options = {str(q.id): {str(o.id) for o in q.options} for q in poll.questions}
    answers: list[tuple[str, str]] = []
    for answer in submission.answers:
        allowed = valid_options.get(answer.question_id)
        if allowed is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Question {answer.question_id} is not part of this poll",
            )
        if answer.option_id not in allowed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid option for question {answer.question_id}",
            )
        answers.append((answer.question_id, answer.option_id))

    already_answered = set(await repo.get_answered_question_ids(poll_id, current_user.id))
    if already_answered.intersection(q for q, _ in answers):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already responded to this poll",
        )

    try:
        await repo.record_responses(poll_id, current_user.id, answers)
    except IntegrityError:
        # Concurrent submission won the unique constraint
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already responded to this poll",
        )

    logger.info("poll_responses_recorded", poll_id=poll_id, user_id=current_user.id, answers=len(answers))

    answered = sorted(already_answered.union(q for q, _ in answers))
    return PollSubmissionStatus(poll_id=poll_id, has_responded=True, answered_question_ids=answered)
