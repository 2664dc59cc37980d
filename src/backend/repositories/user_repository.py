"""
User (profile) repository for database operations.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.leader import Leader, Rating
from models.user import User
from schemas.user import UserProfileUpdate


class UserRepository:
    """Repository for profile database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get a profile by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def update_profile(self, user: User, data: UserProfileUpdate) -> User:
        """Update the caller's own profile fields."""
        updates = data.model_dump(exclude_unset=True)
        if updates.get("name") is None:
            updates.pop("name", None)
        for field, value in updates.items():
            setattr(user, field, value)
        user.updated_at = datetime.now(timezone.utc)

        await self.db.flush()
        await self.db.refresh(user)

        return user

    # ========================================================================
    # Admin Methods
    # ========================================================================

    def _apply_filters(
        self,
        query,
        name: Optional[str] = None,
        location: Optional[str] = None,
        is_blocked: Optional[bool] = None,
    ):
        if name:
            query = query.where(User.name.ilike(f"%{name}%"))
        if location:
            pattern = f"%{location}%"
            query = query.where(
                or_(User.location.ilike(pattern), User.state.ilike(pattern), User.constituency.ilike(pattern))
            )
        if is_blocked is not None:
            query = query.where(User.is_blocked == is_blocked)
        return query

    async def list_users(
        self,
        page: int = 1,
        per_page: int = 20,
        name: Optional[str] = None,
        location: Optional[str] = None,
        is_blocked: Optional[bool] = None,
    ) -> tuple[list[tuple[User, int, int]], int]:
        """
        List profiles for the admin panel.

        Returns (user, leader_count, rating_count) rows and the total count.
        """
        leader_counts = (
            select(Leader.added_by_user_id.label("user_id"), func.count(Leader.id).label("leader_count"))
            .group_by(Leader.added_by_user_id)
            .subquery()
        )
        rating_counts = (
            select(Rating.user_id.label("user_id"), func.count(Rating.id).label("rating_count"))
            .group_by(Rating.user_id)
            .subquery()
        )

        query = (
            select(
                User,
                func.coalesce(leader_counts.c.leader_count, 0),
                func.coalesce(rating_counts.c.rating_count, 0),
            )
            .outerjoin(leader_counts, leader_counts.c.user_id == User.id)
            .outerjoin(rating_counts, rating_counts.c.user_id == User.id)
        )
        query = self._apply_filters(query, name, location, is_blocked)

        count_query = self._apply_filters(select(func.count(User.id)), name, location, is_blocked)
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(User.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await self.db.execute(query)
        rows = [(user, int(leaders), int(ratings)) for user, leaders, ratings in result.all()]

        return rows, total

    async def count_users(
        self,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        location: Optional[str] = None,
    ) -> int:
        """Count profiles created in a range, optionally by location."""
        query = select(func.count(User.id))
        if created_from:
            query = query.where(User.created_at >= created_from)
        if created_to:
            query = query.where(User.created_at <= created_to)
        query = self._apply_filters(query, location=location)

        result = await self.db.execute(query)
        return result.scalar() or 0

    async def block_user(self, user_id: str, reason: str, blocked_until: Optional[datetime] = None) -> bool:
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                is_blocked=True,
                block_reason=reason,
                blocked_until=blocked_until,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return self._get_rowcount(result) > 0

    async def unblock_user(self, user_id: str) -> bool:
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                is_blocked=False,
                block_reason=None,
                blocked_until=None,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return self._get_rowcount(result) > 0

    async def lift_expired_blocks(self, now: Optional[datetime] = None) -> int:
        """Unblock users whose blocked_until has passed."""
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(
            update(User)
            .where(
                and_(
                    User.is_blocked == True,
                    User.blocked_until.is_not(None),
                    User.blocked_until <= now,
                )
            )
            .values(is_blocked=False, block_reason=None, blocked_until=None)
        )
        return self._get_rowcount(result)
