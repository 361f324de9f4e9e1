"""
Authentication and Profile Schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from jobtrack.utils import ensure_utc


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    display_name: Optional[str] = Field(None, max_length=255)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class FederatedLoginRequest(BaseModel):
    """Sign-in with a token issued by an identity provider."""

    provider: str = Field("google", min_length=1)
    id_token: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    display_name: Optional[str] = None
    auth_provider: Optional[str] = None
    created_at: datetime
    last_login: Optional[datetime] = None

    @field_validator("created_at", "last_login")
    @classmethod
    def as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v else v


class LoginResponse(BaseModel):
    token: str
    user: UserResponse
    expires_at: datetime


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=255)
