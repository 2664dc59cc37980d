"""
Notification-related Pydantic schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from schemas.audience import TargetFiltersSchema


class NotificationTypeEnum(str, Enum):
    """Presentation category of a notification."""

    ANNOUNCEMENT = "announcement"
    ALERT = "alert"
    INFO = "info"
    WARNING = "warning"


def _check_window(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is not None and end is not None and start >= end:
        raise ValueError("End time must be after start time")


class NotificationCreate(BaseModel):
    """Schema for creating a notification."""

    title: str = Field("Site Notification", min_length=1, max_length=200)
    message: str = Field(..., max_length=2000)
    is_active: bool = True
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    notification_type: NotificationTypeEnum = NotificationTypeEnum.ANNOUNCEMENT
    show_banner: bool = True
    link: Optional[str] = Field(None, max_length=500)
    target_filters: Optional[TargetFiltersSchema] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("message")
    @classmethod
    def message_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Message is required")
        return v

    @model_validator(mode="after")
    def check_window(self) -> "NotificationCreate":
        _check_window(self.start_time, self.end_time)
        return self


class NotificationUpdate(BaseModel):
    """Partial update; only provided fields change."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    message: Optional[str] = Field(None, max_length=2000)
    is_active: Optional[bool] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    notification_type: Optional[NotificationTypeEnum] = None
    show_banner: Optional[bool] = None
    link: Optional[str] = Field(None, max_length=500)
    target_filters: Optional[TargetFiltersSchema] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("message")
    @classmethod
    def message_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Message cannot be empty")
        return v

    @model_validator(mode="after")
    def check_window(self) -> "NotificationUpdate":
        _check_window(self.start_time, self.end_time)
        return self


class Notification(BaseModel):
    """Schema for notification responses."""

    id: str
    title: str
    message: str
    is_active: bool
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    notification_type: NotificationTypeEnum = NotificationTypeEnum.ANNOUNCEMENT
    show_banner: bool = True
    link: Optional[str] = None
    target_filters: Optional[TargetFiltersSchema] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ViewerNotification(BaseModel):
    """Notification as shown to end users (targeting details omitted)."""

    id: str
    title: str
    message: str
    notification_type: NotificationTypeEnum = NotificationTypeEnum.ANNOUNCEMENT
    show_banner: bool = True
    link: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
