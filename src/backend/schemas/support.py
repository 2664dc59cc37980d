"""
Support ticket, site settings and dashboard schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class TicketCreate(BaseModel):
    """Public contact form submission."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)


class Ticket(BaseModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SiteSettings(BaseModel):
    maintenance_mode: bool
    maintenance_message: str
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SiteSettingsUpdate(BaseModel):
    maintenance_mode: Optional[bool] = None
    maintenance_message: Optional[str] = Field(None, min_length=1, max_length=1000)


class DashboardStats(BaseModel):
    """Overview metrics for the admin dashboard."""

    total_users: int
    blocked_users: int
    pending_leaders: int
    approved_leaders: int
    rejected_leaders: int
    total_ratings: int
    active_polls: int
    active_notifications: int
    unread_tickets: int
