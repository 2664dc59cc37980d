"""
Site-wide settings (single row).
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base

DEFAULT_MAINTENANCE_MESSAGE = "We are currently performing maintenance. Please check back later."


class SiteSettings(Base):
    """Maintenance mode switch and banner text."""

    __tablename__ = "site_settings"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    maintenance_mode: Mapped[bool] = mapped_column(Boolean, default=False)
    maintenance_message: Mapped[str] = mapped_column(Text, default=DEFAULT_MAINTENANCE_MESSAGE)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
