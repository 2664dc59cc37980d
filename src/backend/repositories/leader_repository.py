"""
Leader and rating repository for database operations.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from models.leader import Leader, LeaderStatus, Rating
from schemas.leader import LeaderCreate, LeaderUpdate


class LeaderRepository:
    """Repository for leader and rating database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    def _with_stats(self):
        stats = (
            select(
                Rating.leader_id.label("leader_id"),
                func.avg(Rating.rating).label("average_rating"),
                func.count(Rating.id).label("rating_count"),
            )
            .group_by(Rating.leader_id)
            .subquery()
        )
        query = select(
            Leader,
            stats.c.average_rating,
            func.coalesce(stats.c.rating_count, 0),
        ).outerjoin(stats, stats.c.leader_id == Leader.id)
        return query

    async def get_by_id(self, leader_id: str) -> Optional[Leader]:
        result = await self.db.execute(select(Leader).where(Leader.id == leader_id))
        return result.scalar_one_or_none()

    async def get_with_stats(self, leader_id: str) -> Optional[tuple[Leader, Optional[float], int]]:
        """Get a leader with (average_rating, rating_count)."""
        result = await self.db.execute(self._with_stats().where(Leader.id == leader_id))
        row = result.first()
        if row is None:
            return None
        leader, average, count = row
        return leader, average, int(count)

    async def list_leaders(
        self,
        page: int = 1,
        per_page: int = 20,
        status: Optional[str] = LeaderStatus.APPROVED.value,
        state: Optional[str] = None,
        constituency: Optional[str] = None,
        party: Optional[str] = None,
        search_query: Optional[str] = None,
    ) -> tuple[list[tuple[Leader, Optional[float], int]], int]:
        """List leaders with their rating stats. Pass status=None for all statuses."""
        conditions = []
        if status:
            conditions.append(Leader.status == status)
        if state:
            conditions.append(Leader.state == state)
        if constituency:
            conditions.append(Leader.constituency == constituency)
        if party:
            conditions.append(Leader.party.ilike(f"%{party}%"))
        if search_query:
            conditions.append(Leader.name.ilike(f"%{search_query}%"))

        count_query = select(func.count(Leader.id))
        query = self._with_stats()
        if conditions:
            count_query = count_query.where(and_(*conditions))
            query = query.where(and_(*conditions))

        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(Leader.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await self.db.execute(query)
        rows = [(leader, average, int(count)) for leader, average, count in result.all()]

        return rows, total

    async def create(self, data: LeaderCreate, added_by_user_id: str) -> Leader:
        """Create a leader submission awaiting review."""
        leader = Leader(
            id=str(uuid4()),
            **data.model_dump(),
            status=LeaderStatus.PENDING.value,
            added_by_user_id=added_by_user_id,
        )

        self.db.add(leader)
        await self.db.flush()
        await self.db.refresh(leader)

        return leader

    async def update(self, leader: Leader, data: LeaderUpdate) -> Leader:
        updates = data.model_dump(exclude_unset=True)
        for field in ("name", "party", "constituency", "state", "previous_elections"):
            if field in updates and updates[field] is None:
                del updates[field]
        for field, value in updates.items():
            setattr(leader, field, value)
        leader.updated_at = datetime.now(timezone.utc)

        await self.db.flush()
        await self.db.refresh(leader)

        return leader

    async def set_status(self, leader_id: str, status: str, admin_comment: Optional[str] = None) -> bool:
        result = await self.db.execute(
            update(Leader)
            .where(Leader.id == leader_id)
            .values(status=status, admin_comment=admin_comment, updated_at=datetime.now(timezone.utc))
        )
        return self._get_rowcount(result) > 0

    async def delete(self, leader_id: str) -> bool:
        result = await self.db.execute(delete(Leader).where(Leader.id == leader_id))
        return self._get_rowcount(result) > 0

    # ========================================================================
    # Ratings
    # ========================================================================

    async def list_ratings(self, leader_id: str, limit: int = 50, offset: int = 0) -> list[Rating]:
        result = await self.db.execute(
            select(Rating)
            .where(Rating.leader_id == leader_id)
            .order_by(Rating.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def upsert_rating(self, user_id: str, leader_id: str, rating: int, review: Optional[str]) -> Rating:
        """
        Create the user's rating for a leader or replace the existing one.

        A single INSERT ... ON CONFLICT keeps concurrent first ratings from
        colliding on the (user_id, leader_id) unique constraint.
        """
        stmt = pg_insert(Rating).values(
            id=str(uuid4()),
            user_id=user_id,
            leader_id=leader_id,
            rating=rating,
            review=review,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_ratings_user_leader",
            set_={
                "rating": stmt.excluded.rating,
                "review": stmt.excluded.review,
                "updated_at": func.now(),
            },
        ).returning(Rating)

        result = await self.db.scalars(stmt, execution_options={"populate_existing": True})
        return result.one()

    async def delete_rating(self, user_id: str, leader_id: str) -> bool:
        result = await self.db.execute(
            delete(Rating).where(and_(Rating.user_id == user_id, Rating.leader_id == leader_id))
        )
        return self._get_rowcount(result) > 0
