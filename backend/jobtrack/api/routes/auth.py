"""
Authentication API routes
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrack.api.auth import SESSION_COOKIE, get_current_user, get_token, security
from jobtrack.config import settings
from jobtrack.database import get_db
from jobtrack.models.user import User, UserSession
from jobtrack.schemas.auth import (
    FederatedLoginRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserResponse,
)
from jobtrack.services.auth_service import AuthService
from jobtrack.utils import ensure_utc

logger = logging.getLogger(__name__)

router = APIRouter()


def _start_session(response: Response, user: User, session: UserSession) -> LoginResponse:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.token,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        max_age=settings.session_duration_hours * 60 * 60,
    )
    return LoginResponse(
        token=session.token,
        user=UserResponse.model_validate(user),
        expires_at=ensure_utc(session.expires_at),
    )


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Register with email and password and sign in straight away."""
    auth_service = AuthService(db)
    try:
        user = await auth_service.register_user(
            email=payload.email,
            password=payload.password,
            display_name=payload.display_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    session = await auth_service.create_session(user.id)
    await db.commit()
    return _start_session(response, user, session)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    auth_service = AuthService(db)

    user = await auth_service.authenticate(payload.email, payload.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    session = await auth_service.create_session(user.id)
    await db.commit()
    return _start_session(response, user, session)


@router.post("/federated", response_model=LoginResponse)
async def federated_login(
    payload: FederatedLoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Sign in with an identity provider token (Google)."""
    auth_service = AuthService(db)
    user = await auth_service.authenticate_federated(payload.provider, payload.id_token)
    session = await auth_service.create_session(user.id)
    await db.commit()
    return _start_session(response, user, session)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
):
    """Invalidate the session and clear the cookie."""
    token = get_token(request, credentials)
    if token:
        await AuthService(db).logout(token)
        await db.commit()

    response.delete_cookie(key=SESSION_COOKIE)
    return None


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)
