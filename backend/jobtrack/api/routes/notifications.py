"""
Notifications API Routes
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from jobtrack.api.auth import get_current_user
from jobtrack.models.user import User
from jobtrack.services.notification_service import NotificationType, notification_service

router = APIRouter()


@router.get("")
async def list_notifications(
    limit: int = Query(50, ge=1, le=500),
    application_id: Optional[str] = None,
    notification_type: Optional[NotificationType] = Query(None, alias="type"),
    user: User = Depends(get_current_user),
):
    """The current user's recent notifications, newest first."""
    notifications = notification_service.get_notifications(
        user_id=user.id,
        limit=limit,
        application_id=application_id,
        notification_type=notification_type,
    )
    return {
        "notifications": [n.to_dict() for n in notifications],
        "total": len(notifications),
    }


@router.delete("")
async def clear_notifications(
    application_id: Optional[str] = None,
    user: User = Depends(get_current_user),
):
    cleared = notification_service.clear_notifications(user_id=user.id, application_id=application_id)
    return {"cleared": cleared}
