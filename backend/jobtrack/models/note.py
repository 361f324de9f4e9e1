from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobtrack.database import Base
from jobtrack.utils import generate_uuid, utcnow

if TYPE_CHECKING:
    from jobtrack.models.application import Application


class Note(Base):
    """Free-text annotation on an application."""

    __tablename__ = "notes"

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

    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    application: Mapped["Application"] = relationship(
        "Application", back_populates="notes"
    )

    def __repr__(self) -> str:
        return f"<Note {self.id} at {self.created_at}>"
