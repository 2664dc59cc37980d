"""
Schema converter functions.

Centralized helper functions for converting SQLAlchemy models and service
results to Pydantic schemas. Used by both public and admin endpoints.
"""

from typing import TYPE_CHECKING, Optional

from schemas.leader import LeaderWithStats
from schemas.poll import (
    AdminPoll,
    OptionResult,
    Poll,
    PollOption,
    PollQuestion,
    PollResults,
    QuestionResult,
    QuestionTypeEnum,
)
from schemas.user import UserInDB

if TYPE_CHECKING:
    from models.leader import Leader as LeaderModel
    from models.poll import Poll as PollModel
    from models.user import User as UserModel
    from services.poll_aggregator import PollResult


def _poll_questions(poll: "PollModel") -> list[PollQuestion]:
    return [
        PollQuestion(
            id=str(q.id),
            question_text=q.question_text,
            question_type=QuestionTypeEnum(q.question_type) if q.question_type else QuestionTypeEnum.MULTIPLE_CHOICE,
            position=q.position or 0,
            options=[
                PollOption(id=str(o.id), option_text=o.option_text, position=o.position or 0)
                for o in sorted(q.options, key=lambda x: x.position or 0)
            ],
        )
        for q in sorted(poll.questions, key=lambda x: x.position or 0)
    ]


def poll_model_to_schema(poll: "PollModel") -> Poll:
    """
    Convert a Poll SQLAlchemy model to the public Poll schema.

    Targeting details are never exposed to end users.
    """
    return Poll(
        id=str(poll.id),
        title=poll.title,
        description=poll.description,
        is_active=poll.is_active,
        active_until=poll.active_until,
        questions=_poll_questions(poll),
        created_at=poll.created_at,
        updated_at=poll.updated_at,
    )


def poll_model_to_admin_schema(poll: "PollModel", total_responses: int = 0) -> AdminPoll:
    """Convert a Poll SQLAlchemy model to the admin schema, including targeting."""
    return AdminPoll(
        id=str(poll.id),
        title=poll.title,
        description=poll.description,
        is_active=poll.is_active,
        active_until=poll.active_until,
        questions=_poll_questions(poll),
        created_at=poll.created_at,
        updated_at=poll.updated_at,
        target_filters=poll.target_filters or None,
        total_responses=total_responses,
    )


def poll_result_to_schema(result: "PollResult") -> PollResults:
    """Convert an aggregated PollResult to its API schema."""
    return PollResults(
        poll_id=result.poll_id,
        title=result.title,
        total_responses=result.total_responses,
        is_empty=result.is_empty,
        questions=[
            QuestionResult(
                question_id=q.question_id,
                text=q.text,
                total_votes=q.total_votes,
                winner_option_id=q.winner_option_id,
                options=[
                    OptionResult(
                        option_id=o.option_id,
                        text=o.text,
                        vote_count=o.vote_count,
                        percentage=round(o.percentage, 2),
                        is_winner=o.is_winner,
                    )
                    for o in q.options
                ],
            )
            for q in result.questions
        ],
        demographics=result.demographics,
    )


def leader_model_to_schema(
    leader: "LeaderModel",
    average_rating: Optional[float] = None,
    rating_count: int = 0,
) -> LeaderWithStats:
    """Convert a Leader SQLAlchemy model plus its rating stats."""
    return LeaderWithStats(
        id=str(leader.id),
        name=leader.name,
        party=leader.party,
        constituency=leader.constituency,
        state=leader.state,
        manifesto=leader.manifesto,
        previous_elections=leader.previous_elections or [],
        current_office=leader.current_office,
        status=leader.status,
        admin_comment=leader.admin_comment,
        added_by_user_id=str(leader.added_by_user_id) if leader.added_by_user_id else None,
        created_at=leader.created_at,
        updated_at=leader.updated_at,
        average_rating=round(float(average_rating), 2) if average_rating else 0.0,
        rating_count=rating_count or 0,
    )


def user_model_to_schema(user: "UserModel") -> UserInDB:
    """Convert a User (profile) SQLAlchemy model to the internal UserInDB schema."""
    return UserInDB(
        id=str(user.id),
        name=user.name or "",
        email=user.email,
        location=user.location,
        role=user.role,
        is_admin=user.is_admin,
        is_blocked=user.is_currently_blocked,
        block_reason=user.block_reason,
        blocked_until=user.blocked_until,
        state=user.state,
        constituency=user.constituency,
        gender=user.gender,
        date_of_birth=user.date_of_birth,
        created_at=user.created_at,
    )
