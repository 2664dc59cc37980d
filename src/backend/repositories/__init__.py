"""Repository modules for database access."""

from repositories.leader_repository import LeaderRepository
from repositories.message_repository import AdminMessageRepository, SupportTicketRepository
from repositories.notification_repository import NotificationRepository
from repositories.poll_repository import PollRepository
from repositories.site_repository import SiteRepository
from repositories.user_repository import UserRepository

__all__ = [
    "AdminMessageRepository",
    "LeaderRepository",
    "NotificationRepository",
    "PollRepository",
    "SiteRepository",
    "SupportTicketRepository",
    "UserRepository",
]
