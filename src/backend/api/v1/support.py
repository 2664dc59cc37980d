"""
Public support endpoints: contact form and site status.
"""

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import rate_limit_tickets
from db.session import get_db
from repositories.message_repository import SupportTicketRepository
from repositories.site_repository import SiteRepository
from schemas.support import SiteSettings, TicketCreate

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "/contact",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit_tickets)],
)
async def submit_ticket(
    data: TicketCreate,
    db: AsyncSession = Depends(get_db),
) -> dict[str, str]:
    """Submit a contact form message to the site admins."""
    repo = SupportTicketRepository(db)
    ticket = await repo.create(data)

    logger.info("support_ticket_created", ticket_id=str(ticket.id))

    return {"id": str(ticket.id), "message": "Thanks for getting in touch. We will reply by email."}


@router.get("/site-settings", response_model=SiteSettings)
async def get_site_settings(
    db: AsyncSession = Depends(get_db),
) -> SiteSettings:
    """Maintenance mode status, readable by anyone."""
    repo = SiteRepository(db)
    return SiteSettings.model_validate(await repo.get_settings())
