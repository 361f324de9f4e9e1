"""
API Routes Package
"""

from jobtrack.api.routes import (
    applications,
    assistant,
    auth,
    dashboard,
    notifications,
    profile,
    websocket,
)

__all__ = [
    "applications",
    "assistant",
    "auth",
    "dashboard",
    "notifications",
    "profile",
    "websocket",
]
