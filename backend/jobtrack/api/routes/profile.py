"""
Profile API Routes - user settings page
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrack.api.auth import get_current_user
from jobtrack.database import get_db
from jobtrack.models.user import User
from jobtrack.schemas.auth import ProfileUpdate, UserResponse
from jobtrack.services.auth_service import AuthService

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update the display name shown across the app."""
    user = await AuthService(db).update_profile(user, payload.display_name)
    await db.commit()
    return UserResponse.model_validate(user)
