"""
Database Models Package
"""

from jobtrack.models.user import User, UserSession
from jobtrack.models.application import Application, ApplicationStatus
from jobtrack.models.event import ApplicationEvent
from jobtrack.models.note import Note

__all__ = [
    "User",
    "UserSession",
    "Application",
    "ApplicationStatus",
    "ApplicationEvent",
    "Note",
]
