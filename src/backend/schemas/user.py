"""
User-related Pydantic schemas.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class UserInDB(BaseModel):
    """Schema for the authenticated user (internal use)."""

    id: str
    name: str = ""
    email: Optional[str] = None
    location: Optional[str] = None
    role: str = "user"
    is_admin: bool = False
    is_blocked: bool = False
    block_reason: Optional[str] = None
    blocked_until: Optional[datetime] = None
    # Demographics for audience targeting
    state: Optional[str] = None
    constituency: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserProfile(BaseModel):
    """Schema for profile responses."""

    id: str
    name: str
    email: Optional[str] = None
    location: Optional[str] = None
    state: Optional[str] = None
    constituency: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    role: str = "user"
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserProfileUpdate(BaseModel):
    """Schema for updating one's own profile."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    state: Optional[str] = Field(None, max_length=100)
    constituency: Optional[str] = Field(None, max_length=150)
    gender: Optional[str] = Field(None, max_length=30)
    date_of_birth: Optional[date] = None

    @model_validator(mode="after")
    def birth_date_in_past(self) -> "UserProfileUpdate":
        if self.date_of_birth is not None and self.date_of_birth >= date.today():
            raise ValueError("date_of_birth must be in the past")
        return self


class AdminUserListItem(UserProfile):
    """User row in the admin panel."""

    is_blocked: bool = False
    block_reason: Optional[str] = None
    blocked_until: Optional[datetime] = None
    leader_count: int = 0
    rating_count: int = 0


class BlockUserRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)
    blocked_until: Optional[datetime] = Field(None, description="Omit for a permanent block")


class UserCountResponse(BaseModel):
    count: int


class AdminMessageCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)


class AdminMessage(BaseModel):
    id: str
    user_id: str
    message: str
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
