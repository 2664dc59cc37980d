"""Database models module."""

from models.leader import Leader, LeaderStatus, Rating
from models.message import AdminMessage, SupportTicket
from models.notification import Notification, NotificationType
from models.poll import Poll, PollOption, PollQuestion, PollResponse, QuestionType
from models.site_settings import SiteSettings
from models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "Leader",
    "LeaderStatus",
    "Rating",
    "Notification",
    "NotificationType",
    "Poll",
    "PollQuestion",
    "PollOption",
    "PollResponse",
    "QuestionType",
    "AdminMessage",
    "SupportTicket",
    "SiteSettings",
]
