"""
Poll models.

A poll is an admin-created multi-question survey. Each question holds an
ordered list of options; users record one response per question.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base


class QuestionType(str, Enum):
    """Kind of poll question."""

    YES_NO = "yes_no"
    MULTIPLE_CHOICE = "multiple_choice"


class Poll(Base):
    """
    Poll model.

    Polls are soft-deleted by clearing is_active; active_until closes a poll
    automatically once it has passed.
    """

    __tablename__ = "polls"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    title: Mapped[str] = mapped_column(String(300))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    active_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    # Same structure as notifications.target_filters
    target_filters: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)

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

    questions = relationship(
        "PollQuestion",
        back_populates="poll",
        cascade="all, delete-orphan",
        order_by="PollQuestion.position",
    )

    @property
    def is_expired(self) -> bool:
        """Check if the poll's active window has passed."""
        if self.active_until is None:
            return False
        return datetime.now(timezone.utc) > self.active_until

    @property
    def is_open(self) -> bool:
        """Check if the poll currently accepts responses."""
        return self.is_active and not self.is_expired


class PollQuestion(Base):
    """A question within a poll."""

    __tablename__ = "poll_questions"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    poll_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("polls.id", ondelete="CASCADE"),
        index=True,
    )

    question_text: Mapped[str] = mapped_column(Text)
    question_type: Mapped[str] = mapped_column(String(20), default=QuestionType.MULTIPLE_CHOICE.value)
    position: Mapped[int] = mapped_column(Integer, default=0)

    poll = relationship("Poll", back_populates="questions")
    options = relationship(
        "PollOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="PollOption.position",
    )


class PollOption(Base):
    """
    Answer option for a poll question.

    vote_count is a denormalised counter kept in step with poll_responses.
    """

    __tablename__ = "poll_options"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    question_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("poll_questions.id", ondelete="CASCADE"),
        index=True,
    )

    option_text: Mapped[str] = mapped_column(Text)
    position: Mapped[int] = mapped_column(Integer, default=0)
    vote_count: Mapped[int] = mapped_column(Integer, default=0)

    question = relationship("PollQuestion", back_populates="options")


class PollResponse(Base):
    """A user's chosen option for one question of a poll."""

    __tablename__ = "poll_responses"

    __table_args__ = (
        UniqueConstraint("user_id", "question_id", name="uq_poll_responses_user_question"),
        Index("ix_poll_responses_poll_user", "poll_id", "user_id"),
    )

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    poll_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("polls.id", ondelete="CASCADE"),
        index=True,
    )
    question_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("poll_questions.id", ondelete="CASCADE"),
    )
    option_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("poll_options.id", ondelete="CASCADE"),
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
