"""
Application, Note and Event Schemas for API Validation
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from jobtrack.models.application import ApplicationStatus


class ApplicationBase(BaseModel):
    """Fields shared by the create form and the responses."""

    company_name: str = Field(..., min_length=1, max_length=255)
    title: str = Field(..., min_length=1, max_length=255)
    source_name: str = Field(..., min_length=1, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    salary: Optional[str] = Field(None, max_length=100)
    url: Optional[str] = Field(None, max_length=2000)
    job_id: Optional[str] = Field(None, max_length=255)
    source_id: Optional[str] = Field(None, max_length=255)
    resume_id: Optional[str] = Field(None, max_length=255)
    cover_letter: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class ApplicationCreate(ApplicationBase):
    """Schema for creating an application; ``notes`` becomes the first note."""

    applied_at: Optional[datetime] = None
    status: ApplicationStatus = ApplicationStatus.APPLIED
    notes: Optional[str] = None

    @field_validator("company_name", "title", "source_name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be blank")
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        if not v or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return [tag.strip() for tag in v if tag and tag.strip()]


class StatusUpdate(BaseModel):
    status: ApplicationStatus


class EventCreate(BaseModel):
    """Schema for adding a timeline event. Type is free text."""

    type: str = Field(..., min_length=1, max_length=100)
    occurred_at: Optional[datetime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class NoteCreate(BaseModel):
    text: str = Field(..., min_length=1)


class EventResponse(BaseModel):
    id: str
    application_id: str
    type: str
    occurred_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)


class NoteResponse(BaseModel):
    id: str
    application_id: str
    text: str
    created_at: datetime


class ApplicationResponse(ApplicationBase):
    """Schema for an application in list responses."""

    id: str
    user_id: str
    applied_at: datetime
    status: ApplicationStatus
    created_at: datetime
    updated_at: datetime


class ApplicationDetailResponse(ApplicationResponse):
    """Schema for a single application with its notes and events."""

    notes: list[NoteResponse] = Field(default_factory=list)
    events: list[EventResponse] = Field(default_factory=list)


class ApplicationListResponse(BaseModel):
    items: list[ApplicationResponse]
    total: int


class ApplicationOptions(BaseModel):
    """Choices the new-application and timeline forms offer."""

    statuses: list[str]
    sources: list[str]
    event_types: list[str]


class CalendarEvent(EventResponse):
    application_title: str
    company_name: str


class CalendarDay(BaseModel):
    date: str
    events: list[CalendarEvent]


class CalendarResponse(BaseModel):
    timezone: str
    events: list[CalendarEvent]
    days: list[CalendarDay]
