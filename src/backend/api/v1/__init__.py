"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.admin import router as admin_router
from api.v1.admin_leaders import router as admin_leaders_router
from api.v1.admin_notifications import router as admin_notifications_router
from api.v1.admin_polls import router as admin_polls_router
from api.v1.admin_users import router as admin_users_router
from api.v1.leaders import router as leaders_router
from api.v1.notifications import router as notifications_router
from api.v1.polls import router as polls_router
from api.v1.support import router as support_router
from api.v1.users import router as users_router

router = APIRouter()

router.include_router(users_router, prefix="/users", tags=["Users"])
router.include_router(leaders_router, prefix="/leaders", tags=["Leaders"])
router.include_router(polls_router, prefix="/polls", tags=["Polls"])
router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
router.include_router(support_router, tags=["Support"])
router.include_router(admin_router, prefix="/admin", tags=["Admin"])
router.include_router(admin_users_router, prefix="/admin/users", tags=["Admin - Users"])
router.include_router(admin_leaders_router, prefix="/admin/leaders", tags=["Admin - Leaders"])
router.include_router(admin_polls_router, prefix="/admin/polls", tags=["Admin - Polls"])
router.include_router(
    admin_notifications_router,
    prefix="/admin/notifications",
    tags=["Admin - Notifications"],
)
