from datetime import datetime, timezone

from fastapi import APIRouter

from eventhub.api.v1.admin_users import router as admin_users_router
from eventhub.api.v1.auth import router as auth_router
from eventhub.api.v1.events import router as events_router
from eventhub.api.v1.rsvps import router as rsvps_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(events_router)
router.include_router(rsvps_router)
router.include_router(admin_users_router)


@router.get("/health", tags=["health"])
def api_health():
    return {
        "success": True,
        "message": "Server is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
