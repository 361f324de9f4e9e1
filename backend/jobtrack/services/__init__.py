"""
Services module.

Contains:
- Storage facade over applications, notes and events
- Authentication and session management
- Dashboard analytics and calendar grouping
- In-memory notification service
"""

from jobtrack.services.auth_service import AuthService
from jobtrack.services.notification_service import notification_service

__all__ = [
    "AuthService",
    "notification_service",
]
