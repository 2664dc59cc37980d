"""
User profile model.

The auth service owns credentials; this table extends each auth user with
profile, demographics and moderation state.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, Date, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class UserRole(str, Enum):
    """Access role of a profile."""

    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


ADMIN_ROLES = frozenset({UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value})


class User(Base):
    """
    User profile.

    Demographics (state, constituency, gender, date of birth) are optional
    and drive audience targeting for notifications and polls.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    name: Mapped[str] = mapped_column(String(100), default="")
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Demographics
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    constituency: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Moderation
    is_blocked: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    block_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    blocked_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    role: Mapped[str] = mapped_column(String(20), default=UserRole.USER.value, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def is_admin(self) -> bool:
        """Check if the profile has an admin role."""
        return self.role in ADMIN_ROLES

    @property
    def is_currently_blocked(self) -> bool:
        """A block with an expiry in the past no longer applies."""
        if not self.is_blocked:
            return False
        if self.blocked_until is None:
            return True
        return datetime.now(timezone.utc) < self.blocked_until
