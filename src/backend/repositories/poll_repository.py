"""
Poll repository for database operations.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.poll import Poll, PollOption, PollQuestion, PollResponse
from models.user import User
from schemas.poll import PollCreate, PollQuestionCreate, PollUpdate
from services.audience_filter import Viewer
from services.poll_aggregator import ResponseRecord


class PollRepository:
    """Repository for poll database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    def _with_questions(self):
        return select(Poll).options(selectinload(Poll.questions).selectinload(PollQuestion.options))

    async def get_by_id(self, poll_id: str) -> Optional[Poll]:
        """Get a poll by ID with its questions and options."""
        result = await self.db.execute(self._with_questions().where(Poll.id == poll_id))
        return result.scalar_one_or_none()

    async def list_open_polls(self, now: Optional[datetime] = None) -> list[Poll]:
        """Active polls whose active_until has not passed, newest first."""
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(
            self._with_questions()
            .where(
                and_(
                    Poll.is_active == True,
                    or_(Poll.active_until.is_(None), Poll.active_until > now),
                )
            )
            .order_by(Poll.created_at.desc())
        )
        return list(result.scalars().all())

    # ========================================================================
    # Admin Methods
    # ========================================================================

    async def get_all_polls(
        self,
        page: int = 1,
        per_page: int = 20,
        include_inactive: bool = True,
        search_query: Optional[str] = None,
    ) -> tuple[list[Poll], int]:
        """Get all polls with filtering for admin views."""
        query = self._with_questions()
        count_query = select(func.count(Poll.id))

        if not include_inactive:
            query = query.where(Poll.is_active == True)
            count_query = count_query.where(Poll.is_active == True)

        if search_query:
            search_pattern = f"%{search_query}%"
            query = query.where(Poll.title.ilike(search_pattern))
            count_query = count_query.where(Poll.title.ilike(search_pattern))

        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(Poll.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await self.db.execute(query)
        polls = list(result.scalars().all())

        return polls, total

    def _build_questions(self, questions: list[PollQuestionCreate]) -> list[PollQuestion]:
        return [
            PollQuestion(
                id=str(uuid4()),
                question_text=q.question_text,
                question_type=q.question_type.value,
                position=q_idx,
                options=[
                    PollOption(id=str(uuid4()), option_text=text, position=o_idx, vote_count=0)
                    for o_idx, text in enumerate(q.options)
                ],
            )
            for q_idx, q in enumerate(questions)
        ]

    async def create(self, data: PollCreate) -> Poll:
        """Create a poll with its questions and options."""
        poll = Poll(
            id=str(uuid4()),
            title=data.title,
            description=data.description,
            is_active=data.is_active,
            active_until=data.active_until,
            target_filters=data.target_filters.to_storage() if data.target_filters else None,
            questions=self._build_questions(data.questions),
        )

        self.db.add(poll)
        await self.db.flush()

        return await self.get_by_id(poll.id)

    async def update(self, poll: Poll, data: PollUpdate) -> Poll:
        """
        Apply a partial update.

        Callers must refuse question replacement once responses exist.
        """
        updates = data.model_dump(exclude_unset=True, exclude={"questions", "target_filters"})
        for field in ("title", "is_active"):
            if field in updates and updates[field] is None:
                del updates[field]
        for field, value in updates.items():
            setattr(poll, field, value)

        if "target_filters" in data.model_fields_set:
            poll.target_filters = data.target_filters.to_storage() if data.target_filters else None

        if data.questions is not None:
            poll.questions = self._build_questions(data.questions)

        poll.updated_at = datetime.now(timezone.utc)
        await self.db.flush()

        return await self.get_by_id(poll.id)

    async def deactivate(self, poll_id: str) -> bool:
        result = await self.db.execute(
            update(Poll).where(Poll.id == poll_id).values(is_active=False, updated_at=datetime.now(timezone.utc))
        )
        return self._get_rowcount(result) > 0

    async def delete_poll(self, poll_id: str) -> bool:
        """Delete a poll; questions, options and responses cascade."""
        result = await self.db.execute(delete(Poll).where(Poll.id == poll_id))
        return self._get_rowcount(result) > 0

    async def deactivate_expired(self, now: Optional[datetime] = None) -> int:
        """Deactivate polls whose active_until has passed."""
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(
            update(Poll)
            .where(
                and_(
                    Poll.is_active == True,
                    Poll.active_until.is_not(None),
                    Poll.active_until <= now,
                )
            )
            .values(is_active=False)
        )
        return self._get_rowcount(result)

    # ========================================================================
    # Responses
    # ========================================================================

    async def get_answered_question_ids(self, poll_id: str, user_id: str) -> list[str]:
        result = await self.db.execute(
            select(PollResponse.question_id).where(
                and_(PollResponse.poll_id == poll_id, PollResponse.user_id == user_id)
            )
        )
        return [str(qid) for qid in result.scalars().all()]

    async def count_respondents(self, poll_id: str) -> int:
        result = await self.db.execute(
            select(func.count(func.distinct(PollResponse.user_id))).where(PollResponse.poll_id == poll_id)
        )
        return result.scalar() or 0

    async def record_responses(self, poll_id: str, user_id: str, answers: list[tuple[str, str]]) -> int:
        """
        Store one response per (question, option) pair and bump option counters.

        The unique (user_id, question_id) constraint rejects duplicates with an
        IntegrityError at flush time.
        """
        for question_id, option_id in answers:
            self.db.add(
                PollResponse(
                    id=str(uuid4()),
                    poll_id=poll_id,
                    question_id=question_id,
                    option_id=option_id,
                    user_id=user_id,
                )
            )
        await self.db.flush()

        for _, option_id in answers:
            await self.db.execute(
                update(PollOption).where(PollOption.id == option_id).values(vote_count=PollOption.vote_count + 1)
            )

        return len(answers)

    async def get_response_records(self, poll_id: str) -> list[ResponseRecord]:
        result = await self.db.execute(
            select(PollResponse.user_id, PollResponse.question_id, PollResponse.option_id).where(
                PollResponse.poll_id == poll_id
            )
        )
        return [
            ResponseRecord(respondent_id=str(user_id), question_id=str(question_id), option_id=str(option_id))
            for user_id, question_id, option_id in result.all()
        ]

    async def get_respondent_profiles(self, poll_id: str) -> dict[str, Viewer]:
        """Demographic profiles of everyone who answered the poll."""
        respondents = select(PollResponse.user_id).where(PollResponse.poll_id == poll_id).distinct()
        result = await self.db.execute(select(User).where(User.id.in_(respondents)))
        return {str(user.id): Viewer.from_user(user) for user in result.scalars().all()}
