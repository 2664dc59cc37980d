"""Schemas module initialization."""

from schemas.audience import TargetFiltersSchema
from schemas.leader import Leader, LeaderCreate, LeaderWithStats, Rating, RatingCreate
from schemas.notification import Notification, NotificationCreate, NotificationUpdate
from schemas.poll import Poll, PollCreate, PollResults, PollSubmission
from schemas.support import DashboardStats, SiteSettings, Ticket, TicketCreate
from schemas.user import UserInDB, UserProfile, UserProfileUpdate

__all__ = [
    "TargetFiltersSchema",
    "UserInDB",
    "UserProfile",
    "UserProfileUpdate",
    "Notification",
    "NotificationCreate",
    "NotificationUpdate",
    "Poll",
    "PollCreate",
    "PollResults",
    "PollSubmission",
    "Leader",
    "LeaderCreate",
    "LeaderWithStats",
    "Rating",
    "RatingCreate",
    "Ticket",
    "TicketCreate",
    "SiteSettings",
    "DashboardStats",
]
