"""
Admin endpoints for site management.

These endpoints require admin authentication and are used for:
- Dashboard metrics
- Maintenance mode
- Support ticket triage
- Manual maintenance runs and scheduler status
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_admin_user
from db.session import get_db
from repositories.message_repository import SupportTicketRepository
from repositories.site_repository import SiteRepository
from schemas.support import DashboardStats, SiteSettings, SiteSettingsUpdate, Ticket
from schemas.user import UserInDB

logger = logging.getLogger(__name__)

router = APIRouter()


class MaintenanceResult(BaseModel):
    """Result of a maintenance cycle."""

    expired_polls: int
    expired_notifications: int
    lifted_blocks: int


class SchedulerStatus(BaseModel):
    """Status of the background scheduler."""

    running: bool
    jobs: list[dict]


class TicketListResponse(BaseModel):
    tickets: list[Ticket]
    total: int
    page: int
    per_page: int
    total_pages: int


# ============================================================================
# Dashboard & Settings
# ============================================================================


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    _admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> DashboardStats:
    """Overview counts for the admin dashboard."""
    repo = SiteRepository(db)
    return await repo.get_dashboard_stats()


@router.patch("/settings", response_model=SiteSettings)
async def update_site_settings(
    data: SiteSettingsUpdate,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> SiteSettings:
    """Toggle maintenance mode or change its message."""
    repo = SiteRepository(db)
    site_settings = await repo.update_settings(data)

    logger.info(
        f"Admin {admin.id} updated site settings",
        extra={"admin_id": admin.id, "maintenance_mode": site_settings.maintenance_mode},
    )

    return SiteSettings.model_validate(site_settings)


# ============================================================================
# Support Tickets
# ============================================================================


@router.get("/tickets", response_model=TicketListResponse)
async def list_tickets(
    _admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False, description="Only unread tickets"),
) -> TicketListResponse:
    """List contact form tickets, newest first."""
    repo = SupportTicketRepository(db)
    tickets, total = await repo.list_tickets(page=page, per_page=per_page, unread_only=unread_only)

    return TicketListResponse(
        tickets=[Ticket.model_validate(t) for t in tickets],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=(total + per_page - 1) // per_page,
    )


@router.post("/tickets/{ticket_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_ticket_read(
    ticket_id: str,
    _admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = SupportTicketRepository(db)
    if not await repo.mark_read(ticket_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found",
        )


@router.delete("/tickets/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ticket(
    ticket_id: str,
    admin: Annotated[UserInDB, Depends(get_current_admin_user)],
    db: AsyncSession = Depends(get_db),
) -> None:
    repo = SupportTicketRepository(db)
    if not await repo.delete(ticket_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found",
        )

    logger.info(f"Admin {admin.id} deleted ticket {ticket_id}", extra={"admin_id": admin.id})


# ============================================================================
# Maintenance
# ============================================================================


@router.post("/maintenance/run", response_model=MaintenanceResult)
async def trigger_maintenance(
    _admin: Annotated[UserInDB, Depends(get_current_admin_user)],
) -> MaintenanceResult:
    """
    Run the maintenance cycle now instead of waiting for the scheduler.

    Deactivates expired polls and notifications and lifts expired blocks.
    """
    from services.background_scheduler import run_maintenance_cycle

    result = await run_maintenance_cycle()
    return MaintenanceResult(**result)


@router.get("/scheduler-status", response_model=SchedulerStatus)
async def get_scheduler_status(
    _admin: Annotated[UserInDB, Depends(get_current_admin_user)],
) -> SchedulerStatus:
    """
    Get the status of the background scheduler.

    Returns whether it is running and the next run time of each job.
    """
    from services.background_scheduler import get_scheduler

    scheduler = get_scheduler()

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append(
            {
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger),
            }
        )

    return SchedulerStatus(
        running=scheduler.running,
        jobs=jobs,
    )
