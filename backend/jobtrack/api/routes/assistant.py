"""
AI Assistant API Routes - email parsing and analytics SQL generation
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from assistant.flows import (
    GenerateAnalyticsSQLInput,
    GenerateAnalyticsSQLOutput,
    ParseApplicationEmailInput,
    ParseApplicationEmailOutput,
    generate_analytics_sql,
    parse_application_email,
)
from jobtrack.api.auth import get_current_user
from jobtrack.database import get_db
from jobtrack.models.application import ApplicationStatus
from jobtrack.models.user import User
from jobtrack.schemas.application import ApplicationDetailResponse
from jobtrack.services import storage

logger = logging.getLogger(__name__)

router = APIRouter()
analytics_router = APIRouter()

EMAIL_SOURCE = "Email"


class ParsedEmailImport(BaseModel):
    """Reviewed output of the email parser, saved as a new application."""

    company: str = Field(..., min_length=1, max_length=255)
    title: str = Field(..., min_length=1, max_length=255)
    applied_at: Optional[datetime] = None
    url: Optional[str] = Field(None, max_length=2000)
    application_id: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    @field_validator("applied_at", "url", "application_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


@router.post("", response_model=ParseApplicationEmailOutput)
async def parse_email(
    payload: ParseApplicationEmailInput,
    user: User = Depends(get_current_user),
):
    """Extract company, title, date and link from a forwarded email."""
    logger.info(f"Parsing email for user {user.id} ({len(payload.raw_text)} chars)")
    return await parse_application_email(payload)


@router.post("/import", response_model=ApplicationDetailResponse, status_code=status.HTTP_201_CREATED)
async def import_parsed_email(
    payload: ParsedEmailImport,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    record = await storage.save_application(db, {
        "user_id": user.id,
        "company_name": payload.company,
        "title": payload.title,
        "source_name": EMAIL_SOURCE,
        "applied_at": payload.applied_at,
        "status": ApplicationStatus.APPLIED,
        "url": payload.url,
        "job_id": payload.application_id,
        "notes": payload.notes,
    })
    await db.commit()
    return ApplicationDetailResponse.model_validate(record)


@analytics_router.post("/sql", response_model=GenerateAnalyticsSQLOutput)
async def analytics_sql(
    payload: GenerateAnalyticsSQLInput,
    user: User = Depends(get_current_user),
):
    """Generate the SQL behind the dashboard charts for the given table layout."""
    return await generate_analytics_sql(payload)
