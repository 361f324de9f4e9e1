"""
Dashboard and Calendar API Routes
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrack.api.auth import get_current_user
from jobtrack.database import get_db
from jobtrack.models.user import User
from jobtrack.schemas.application import CalendarResponse
from jobtrack.schemas.dashboard import DashboardResponse
from jobtrack.services.analytics import DEFAULT_WEEKS, build_dashboard
from jobtrack.services.calendar import build_calendar

router = APIRouter()
calendar_router = APIRouter()


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    weeks: int = Query(DEFAULT_WEEKS, ge=1, le=52),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """KPIs, source breakdown, funnel and weekly series for the current user."""
    return await build_dashboard(db, user.id, weeks=weeks)


@calendar_router.get("", response_model=CalendarResponse)
async def get_calendar(
    tz: str = Query("UTC", description="IANA time zone used to group events by day"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await build_calendar(db, user.id, tz)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
