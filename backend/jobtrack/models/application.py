"""
Application Model - Represents a tracked job application
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobtrack.database import Base
from jobtrack.utils import generate_uuid, utcnow

if TYPE_CHECKING:
    from jobtrack.models.event import ApplicationEvent
    from jobtrack.models.note import Note
    from jobtrack.models.user import User


class ApplicationStatus(str, Enum):
    APPLIED = "APPLIED"
    VIEWED = "VIEWED"
    PHONE_SCREEN = "PHONE_SCREEN"
    INTERVIEW = "INTERVIEW"
    OFFER = "OFFER"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"

    @classmethod
    def closed_statuses(cls) -> List[str]:
        return [
            cls.OFFER.value,
            cls.REJECTED.value,
            cls.WITHDRAWN.value,
        ]


SOURCE_CHOICES = [
    "LinkedIn",
    "Indeed",
    "Company Site",
    "On Campus",
    "Email",
    "Referral",
    "Other",
]


class Application(Base):
    """
    A single job application owned by one user.
    Notes and events hang off it and are removed with it.
    """

    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Job details
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    source_name: Mapped[str] = mapped_column(String(100), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    salary: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)

    # External references (job board ids, stored resume)
    job_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    source_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    resume_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    cover_letter: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(50),
        default=ApplicationStatus.APPLIED.value,
        nullable=False,
    )
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Timestamps (naive UTC)
    applied_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="applications")
    notes: Mapped[list["Note"]] = relationship(
        "Note",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="Note.created_at",
    )
    events: Mapped[list["ApplicationEvent"]] = relationship(
        "ApplicationEvent",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ApplicationEvent.occurred_at",
    )

    __table_args__ = (
        Index("ix_applications_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Application {self.title} at {self.company_name} ({self.status})>"
