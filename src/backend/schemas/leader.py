"""
Leader and rating schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class LeaderStatusEnum(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaderBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=150)
    party: str = Field(..., min_length=1, max_length=150)
    constituency: str = Field(..., min_length=1, max_length=150)
    state: str = Field(..., min_length=1, max_length=100)
    manifesto: Optional[str] = Field(None, max_length=10000)
    previous_elections: list[dict[str, Any]] = Field(default_factory=list)
    current_office: Optional[str] = Field(None, max_length=200)


class LeaderCreate(LeaderBase):
    """Submitted by a user; starts pending review."""


class LeaderUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=150)
    party: Optional[str] = Field(None, min_length=1, max_length=150)
    constituency: Optional[str] = Field(None, min_length=1, max_length=150)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    manifesto: Optional[str] = Field(None, max_length=10000)
    previous_elections: Optional[list[dict[str, Any]]] = None
    current_office: Optional[str] = Field(None, max_length=200)


class Leader(LeaderBase):
    id: str
    status: LeaderStatusEnum = LeaderStatusEnum.PENDING
    admin_comment: Optional[str] = None
    added_by_user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LeaderWithStats(Leader):
    average_rating: float = 0.0
    rating_count: int = 0


class LeaderListResponse(BaseModel):
    leaders: list[LeaderWithStats]
    total: int
    page: int
    per_page: int
    total_pages: int


class LeaderModeration(BaseModel):
    """Admin decision on a pending leader."""

    status: LeaderStatusEnum
    admin_comment: Optional[str] = Field(None, max_length=1000)


class RatingCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = Field(None, max_length=2000)


class Rating(BaseModel):
    id: str
    user_id: str
    leader_id: str
    rating: int
    review: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
