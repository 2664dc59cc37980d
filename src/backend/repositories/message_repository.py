"""
Admin message and support ticket repositories.
"""

from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.message import AdminMessage, SupportTicket
from schemas.support import TicketCreate


class AdminMessageRepository:
    """Repository for admin-to-user messages."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        return getattr(result, "rowcount", 0) or 0

    async def create(self, user_id: str, message: str) -> AdminMessage:
        admin_message = AdminMessage(id=str(uuid4()), user_id=user_id, message=message, is_read=False)
        self.db.add(admin_message)
        await self.db.flush()
        await self.db.refresh(admin_message)
        return admin_message

    async def list_for_user(self, user_id: str) -> list[AdminMessage]:
        """A user's messages, unread first then newest first."""
        result = await self.db.execute(
            select(AdminMessage)
            .where(AdminMessage.user_id == user_id)
            .order_by(AdminMessage.is_read.asc(), AdminMessage.created_at.desc())
        )
        return list(result.scalars().all())

    async def mark_read(self, message_id: str, user_id: str) -> bool:
        """Mark one of the user's own messages as read."""
        result = await self.db.execute(
            update(AdminMessage)
            .where(and_(AdminMessage.id == message_id, AdminMessage.user_id == user_id))
            .values(is_read=True)
        )
        return self._get_rowcount(result) > 0

    async def delete(self, message_id: str, user_id: str) -> bool:
        result = await self.db.execute(
            delete(AdminMessage).where(and_(AdminMessage.id == message_id, AdminMessage.user_id == user_id))
        )
        return self._get_rowcount(result) > 0


class SupportTicketRepository:
    """Repository for contact form tickets."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        return getattr(result, "rowcount", 0) or 0

    async def create(self, data: TicketCreate) -> SupportTicket:
        ticket = SupportTicket(
            id=str(uuid4()),
            name=data.name.strip(),
            email=str(data.email).lower(),
            subject=data.subject.strip(),
            message=data.message.strip(),
            is_read=False,
        )
        self.db.add(ticket)
        await self.db.flush()
        await self.db.refresh(ticket)
        return ticket

    async def list_tickets(
        self,
        page: int = 1,
        per_page: int = 20,
        unread_only: bool = False,
    ) -> tuple[list[SupportTicket], int]:
        query = select(SupportTicket)
        count_query = select(func.count(SupportTicket.id))

        if unread_only:
            query = query.where(SupportTicket.is_read == False)
            count_query = count_query.where(SupportTicket.is_read == False)

        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(SupportTicket.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)

        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def mark_read(self, ticket_id: str) -> bool:
        result = await self.db.execute(update(SupportTicket).where(SupportTicket.id == ticket_id).values(is_read=True))
        return self._get_rowcount(result) > 0

    async def delete(self, ticket_id: str) -> bool:
        result = await self.db.execute(delete(SupportTicket).where(SupportTicket.id == ticket_id))
        return self._get_rowcount(result) > 0

    async def get_by_id(self, ticket_id: str) -> Optional[SupportTicket]:
        result = await self.db.execute(select(SupportTicket).where(SupportTicket.id == ticket_id))
        return result.scalar_one_or_none()
