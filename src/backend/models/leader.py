"""
Leader and rating models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base


class LeaderStatus(str, Enum):
    """Moderation status of a submitted leader."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Leader(Base):
    """
    A political figure users can rate.

    Leaders submitted by users start as pending and only become public
    once an admin approves them.
    """

    __tablename__ = "leaders"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    name: Mapped[str] = mapped_column(String(150))
    party: Mapped[str] = mapped_column(String(150))
    constituency: Mapped[str] = mapped_column(String(150), index=True)
    state: Mapped[str] = mapped_column(String(100), index=True)
    manifesto: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Format: [{"year": 2019, "result": "won", "constituency": "..."}]
    previous_elections: Mapped[list] = mapped_column(JSONB, default=list)
    current_office: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default=LeaderStatus.PENDING.value, index=True)
    admin_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    added_by_user_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

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

    ratings = relationship("Rating", back_populates="leader", cascade="all, delete-orphan")


class Rating(Base):
    """A user's 1-5 star rating of a leader, one per user and leader."""

    __tablename__ = "ratings"

    __table_args__ = (
        UniqueConstraint("user_id", "leader_id", name="uq_ratings_user_leader"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_range"),
    )

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        index=True,
    )
    leader_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("leaders.id", ondelete="CASCADE"),
        index=True,
    )

    rating: Mapped[int] = mapped_column(Integer)
    review: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

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

    leader = relationship("Leader", back_populates="ratings")
