"""
WebSocket route for real-time updates

Clients connect to /ws with their session token (``?token=`` or the session
cookie) and receive status changes, new timeline events and notifications
for their own applications as JSON messages.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, Optional, Set

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrack.api.auth import SESSION_COOKIE
from jobtrack.database import get_db
from jobtrack.models.user import User
from jobtrack.services.auth_service import AuthService
from jobtrack.services.notification_service import SystemNotification

logger = logging.getLogger(__name__)

router = APIRouter()

KEEPALIVE_SECONDS = 30


class ConnectionManager:
    """Tracks open sockets per user and delivers messages to the owner's sockets only."""

    def __init__(self):
        self.connections: Dict[str, Set[WebSocket]] = defaultdict(set)
        self._background: Set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket, user_id: str) -> None:
        await websocket.accept()
        self.connections[user_id].add(websocket)
        logger.info(f"WebSocket connected for user {user_id} ({len(self.connections[user_id])} open)")

    def disconnect(self, websocket: WebSocket, user_id: str) -> None:
        sockets = self.connections.get(user_id)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.connections[user_id]
        logger.info(f"WebSocket closed for user {user_id}")

    async def send_to_user(self, user_id: str, message: dict) -> None:
        stale = []
        for websocket in list(self.connections.get(user_id, ())):
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError, ConnectionError) as e:
                logger.debug(f"Dropping closed WebSocket: {e}")
                stale.append(websocket)

        for websocket in stale:
            self.disconnect(websocket, user_id)

    def schedule_send(self, user_id: str, message: dict) -> None:
        """Send from synchronous code running inside the event loop."""
        if user_id not in self.connections:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, dropped {message.get('type')} message")
            return

        task = loop.create_task(self.send_to_user(user_id, message))
        self._background.add(task)
        task.add_done_callback(self._background.discard)


manager = ConnectionManager()


async def authenticate_websocket(websocket: WebSocket, db: AsyncSession) -> Optional[User]:
    token = websocket.query_params.get("token") or websocket.cookies.get(SESSION_COOKIE)
    if not token:
        return None

    user = await AuthService(db).validate_session(token)
    # Release the connection; the socket may stay open for hours
    await db.commit()
    return user


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, db: AsyncSession = Depends(get_db)):
    user = await authenticate_websocket(websocket, db)
    if user is None:
        logger.warning("Rejected unauthenticated WebSocket connection")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(websocket, user.id)
    try:
        await websocket.send_json({"type": "connected", "message": "Connected to JobTrack"})
        while True:
            try:
                data = await asyncio.wait_for(websocket.receive_text(), timeout=KEEPALIVE_SECONDS)
            except asyncio.TimeoutError:
                await websocket.send_text("ping")
                continue

            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, user.id)


async def emit_status_changed(
    user_id: str,
    application_id: str,
    new_status: str,
    title: str = None,
    company_name: str = None,
) -> None:
    await manager.send_to_user(user_id, {
        "type": "application_status_changed",
        "application_id": application_id,
        "new_status": new_status,
        "title": title,
        "company_name": company_name,
    })


async def emit_application_event(user_id: str, application_id: str, event_type: str) -> None:
    await manager.send_to_user(user_id, {
        "type": "application_event_added",
        "application_id": application_id,
        "event_type": event_type,
    })


def forward_notification(notification: SystemNotification) -> None:
    """Notification-service subscriber relaying each notification to its owner's sockets."""
    if notification.user_id is None:
        return
    manager.schedule_send(notification.user_id, {"type": "notification", **notification.to_dict()})
