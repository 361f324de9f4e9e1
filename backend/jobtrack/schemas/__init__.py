"""
Pydantic Schemas for API Request/Response Validation
"""

from jobtrack.schemas.application import (
    ApplicationCreate,
    ApplicationDetailResponse,
    ApplicationListResponse,
    ApplicationOptions,
    ApplicationResponse,
    CalendarResponse,
    EventCreate,
    EventResponse,
    NoteCreate,
    NoteResponse,
    StatusUpdate,
)
from jobtrack.schemas.auth import (
    FederatedLoginRequest,
    LoginRequest,
    LoginResponse,
    ProfileUpdate,
    RegisterRequest,
    UserResponse,
)
from jobtrack.schemas.dashboard import DashboardResponse

__all__ = [
    "ApplicationCreate",
    "ApplicationDetailResponse",
    "ApplicationListResponse",
    "ApplicationOptions",
    "ApplicationResponse",
    "CalendarResponse",
    "EventCreate",
    "EventResponse",
    "NoteCreate",
    "NoteResponse",
    "StatusUpdate",
    "FederatedLoginRequest",
    "LoginRequest",
    "LoginResponse",
    "ProfileUpdate",
    "RegisterRequest",
    "UserResponse",
    "DashboardResponse",
]
