"""
Applications API Routes - CRUD, status updates, notes and timeline events
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrack.api.auth import get_current_user
from jobtrack.api.helpers import application_not_found, require_found
from jobtrack.api.routes.websocket import emit_application_event, emit_status_changed
from jobtrack.database import get_db
from jobtrack.models.application import SOURCE_CHOICES, ApplicationStatus
from jobtrack.models.event import EVENT_TYPES
from jobtrack.models.user import User
from jobtrack.schemas.application import (
    ApplicationCreate,
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationOptions,
    ApplicationResponse,
    EventCreate,
    EventResponse,
    NoteCreate,
    NoteResponse,
    StatusUpdate,
)
from jobtrack.services import storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    status_filter: Optional[list[ApplicationStatus]] = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's applications, optionally filtered by status."""
    statuses = [s.value for s in status_filter] if status_filter else None
    items = await storage.get_applications_list(db, user.id, statuses=statuses)
    return ApplicationListResponse(
        items=[ApplicationResponse.model_validate(item) for item in items],
        total=len(items),
    )


@router.get("/options", response_model=ApplicationOptions)
async def application_options(user: User = Depends(get_current_user)):
    return ApplicationOptions(
        statuses=[s.value for s in ApplicationStatus],
        sources=SOURCE_CHOICES,
        event_types=EVENT_TYPES,
    )


@router.post("", response_model=ApplicationDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_application(
    payload: ApplicationCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create an application with its initial event and optional first note."""
    data = payload.model_dump()
    data["user_id"] = user.id
    record = await storage.save_application(db, data)
    await db.commit()
    return ApplicationDetailResponse.model_validate(record)


@router.get("/{application_id}", response_model=ApplicationDetailResponse)
async def get_application(
    application_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    record = require_found(await storage.get_application_by_id(db, application_id, user.id))
    return ApplicationDetailResponse.model_validate(record)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application(
    application_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete an application together with its notes and events."""
    if not await storage.delete_application(db, application_id, user.id):
        raise application_not_found()
    await db.commit()


@router.put("/{application_id}/status", response_model=ApplicationResponse)
async def update_status(
    application_id: str,
    payload: StatusUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Change the status of an application."""
    record = require_found(
        await storage.update_application_status(db, application_id, user.id, payload.status)
    )
    await db.commit()

    await emit_status_changed(
        user_id=user.id,
        application_id=application_id,
        new_status=record["status"],
        title=record["title"],
        company_name=record["company_name"],
    )
    return ApplicationResponse.model_validate(record)


@router.post(
    "/{application_id}/events",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_event(
    application_id: str,
    payload: EventCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Add a timeline event to an application."""
    record = require_found(
        await storage.add_application_event(db, application_id, user.id, payload.model_dump())
    )
    await db.commit()

    await emit_application_event(user_id=user.id, application_id=application_id, event_type=record["type"])
    return EventResponse.model_validate(record)


@router.post(
    "/{application_id}/notes",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_note(
    application_id: str,
    payload: NoteCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    record = require_found(await storage.add_note(db, application_id, user.id, payload.text))
    await db.commit()
    return NoteResponse.model_validate(record)
