"""
JobTrack - Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobtrack import __version__
from jobtrack.config import settings
from jobtrack.logging_config import setup_logging

# Must run before the imports below create their module loggers
setup_logging()

from jobtrack.api.exception_handlers import register_exception_handlers  # noqa: E402
from jobtrack.api.middleware import RequestLoggingMiddleware  # noqa: E402
from jobtrack.api.routes import (  # noqa: E402
    applications,
    assistant,
    auth,
    dashboard,
    notifications,
    profile,
    websocket,
)
from jobtrack.database import dispose_engine, init_db, session_scope  # noqa: E402
from jobtrack.errors import error_emitter  # noqa: E402
from jobtrack.services.auth_service import AuthService  # noqa: E402
from jobtrack.services.notification_service import notification_service  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Starting {settings.app_name} {__version__}")
    await init_db()
    async with session_scope() as db:
        await AuthService(db).cleanup_expired_sessions()

    notification_service.attach(error_emitter)
    notification_service.subscribe(websocket.forward_notification)
    logger.info(f"Serving on port {settings.api_port}, docs at /docs")

    try:
        yield
    finally:
        notification_service.unsubscribe(websocket.forward_notification)
        notification_service.detach(error_emitter)
        await dispose_engine()
        logger.info("Stopped")


app = FastAPI(
    title=settings.app_name,
    description="Personal job application tracker",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

ROUTERS = (
    (auth.router, "/api/auth", "Auth"),
    (applications.router, "/api/applications", "Applications"),
    (dashboard.router, "/api/dashboard", "Dashboard"),
    (dashboard.calendar_router, "/api/calendar", "Calendar"),
    (profile.router, "/api/settings", "Settings"),
    (assistant.router, "/api/parse-email", "Assistant"),
    (assistant.analytics_router, "/api/analytics", "Assistant"),
    (notifications.router, "/api/notifications", "Notifications"),
)

for router, prefix, tag in ROUTERS:
    app.include_router(router, prefix=prefix, tags=[tag])
app.include_router(websocket.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    return {"status": "ok"}
