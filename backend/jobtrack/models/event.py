"""
ApplicationEvent Model - Timeline milestones for an application
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, String, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobtrack.database import Base
from jobtrack.utils import generate_uuid, utcnow

if TYPE_CHECKING:
    from jobtrack.models.application import Application


EVENT_TYPES = [
    "applied",
    "viewed",
    "first_response",
    "followed_up",
    "phone_screen_scheduled",
    "online_assessment",
    "technical_interview",
    "hr_interview",
    "interview_scheduled",
    "offer",
    "rejected",
    "withdrawn",
]


class ApplicationEvent(Base):
    """
    A timestamped milestone on an application ("applied", "interview_scheduled", ...).
    The type is free text; EVENT_TYPES lists the ones the UI offers.
    """

    __tablename__ = "application_events"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
    )

    application_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type: Mapped[str] = mapped_column(String(100), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    # "metadata" is reserved on declarative classes
    event_metadata: Mapped[Optional[dict]] = mapped_column(
        "metadata", JSON, default=dict, nullable=True
    )

    application: Mapped["Application"] = relationship(
        "Application", back_populates="events"
    )

    def __repr__(self) -> str:
        return f"<ApplicationEvent {self.type} at {self.occurred_at}>"
