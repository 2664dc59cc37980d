"""
Site notification model.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class NotificationType(str, Enum):
    """Presentation category of a notification."""

    ANNOUNCEMENT = "announcement"
    ALERT = "alert"
    INFO = "info"
    WARNING = "warning"


class Notification(Base):
    """
    Admin-curated notification shown to users.

    Visibility is governed by the is_active flag, an optional
    start/end window and an optional demographic target filter.
    """

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    title: Mapped[str] = mapped_column(String(200), default="Site Notification")
    message: Mapped[str] = mapped_column(Text)
    notification_type: Mapped[str] = mapped_column(String(20), default=NotificationType.ANNOUNCEMENT.value)
    show_banner: Mapped[bool] = mapped_column(Boolean, default=True)
    link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    start_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    # Format: {"states": [...], "constituencies": [...], "genders": [...], "age_min": 18, "age_max": 30}
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

    def is_live(self, now: datetime | None = None) -> bool:
        """Check if the notification is active and inside its time window."""
        now = now or datetime.now(timezone.utc)
        if not self.is_active:
            return False
        if self.start_time and self.start_time > now:
            return False
        if self.end_time and self.end_time < now:
            return False
        return True
