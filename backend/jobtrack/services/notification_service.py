import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from jobtrack.errors import PERMISSION_ERROR_EVENT, ErrorEmitter, PermissionDeniedError

logger = logging.getLogger(__name__)

Subscriber = Callable[["SystemNotification"], None]


class NotificationType(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    STATUS_ROLLED_BACK = "status_rolled_back"
    ERROR = "error"
    INFO = "info"


class NotificationPriority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"


@dataclass
class SystemNotification:
    notification_type: NotificationType
    title: str
    message: str
    # Owner of the notification; None for process-wide notices kept only in the log
    user_id: Optional[str] = None
    application_id: Optional[str] = None
    priority: NotificationPriority = NotificationPriority.NORMAL
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.notification_type.value,
            "title": self.title,
            "message": self.message,
            "user_id": self.user_id,
            "application_id": self.application_id,
            "priority": self.priority.value,
            "data": self.data,
            "created_at": self.created_at.isoformat(),
        }


class NotificationService:
    """
    In-memory feed of system notifications.

    Newest notifications are kept first and the history is capped at
    ``max_history`` entries. Subscribers are called synchronously, outside
    the lock, after each notification is recorded.
    """

    def __init__(self, max_history: int = 200):
        self._history: Deque[SystemNotification] = deque(maxlen=max_history)
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def attach(self, emitter: ErrorEmitter) -> None:
        """Start listening for permission errors published on the emitter."""
        emitter.on(PERMISSION_ERROR_EVENT, self.notify_permission_denied)

    def detach(self, emitter: ErrorEmitter) -> None:
        emitter.off(PERMISSION_ERROR_EVENT, self.notify_permission_denied)

    def notify(self, notification: SystemNotification) -> SystemNotification:
        with self._lock:
            self._history.appendleft(notification)
            subscribers = list(self._subscribers)

        level = logging.WARNING if notification.priority is NotificationPriority.HIGH else logging.INFO
        logger.log(level, f"{notification.title}: {notification.message}")

        for subscriber in subscribers:
            try:
                subscriber(notification)
            except Exception as e:
                logger.error(f"Notification subscriber {subscriber!r} failed: {e}")

        return notification

    def notify_permission_denied(self, error: PermissionDeniedError) -> SystemNotification:
        return self.notify(SystemNotification(
            notification_type=NotificationType.PERMISSION_DENIED,
            title="Permission Denied",
            message=str(error),
            user_id=error.user_id,
            application_id=_application_id_from_path(error.path),
            priority=NotificationPriority.HIGH,
            data={
                "operation": error.operation,
                "path": error.path,
                "resource": error.resource,
            },
        ))

    def notify_status_rolled_back(
        self,
        application_id: str,
        attempted_status: str,
        restored_status: str,
        error: str,
        user_id: Optional[str] = None,
    ) -> SystemNotification:
        return self.notify(SystemNotification(
            notification_type=NotificationType.STATUS_ROLLED_BACK,
            title="Status Update Failed",
            message=f"Could not change status to {attempted_status}; it is still {restored_status}.",
            user_id=user_id,
            application_id=application_id,
            priority=NotificationPriority.HIGH,
            data={
                "attempted_status": attempted_status,
                "restored_status": restored_status,
                "error": error,
            },
        ))

    def notify_error(
        self,
        message: str,
        application_id: Optional[str] = None,
        error_details: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> SystemNotification:
        return self.notify(SystemNotification(
            notification_type=NotificationType.ERROR,
            title="Something went wrong",
            message=message,
            user_id=user_id,
            application_id=application_id,
            priority=NotificationPriority.HIGH,
            data={"details": error_details} if error_details else {},
        ))

    def get_notifications(
        self,
        limit: int = 50,
        application_id: Optional[str] = None,
        notification_type: Optional[NotificationType] = None,
        user_id: Optional[str] = None,
    ) -> List[SystemNotification]:
        """Newest first, optionally narrowed to one owner, application and/or type."""
        with self._lock:
            history = list(self._history)

        matches = (
            n for n in history
            if _matches(n, user_id=user_id, application_id=application_id)
            and (notification_type is None or n.notification_type == notification_type)
        )
        return [n for _, n in zip(range(limit), matches)]

    def clear_notifications(
        self,
        application_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> int:
        """Drop matching notifications; with no filters the whole history goes."""
        with self._lock:
            before = len(self._history)
            kept = [
                n for n in self._history
                if not _matches(n, user_id=user_id, application_id=application_id)
            ]
            self._history.clear()
            self._history.extend(kept)
            return before - len(self._history)


def _matches(
    notification: SystemNotification,
    user_id: Optional[str],
    application_id: Optional[str],
) -> bool:
    if user_id is not None and notification.user_id != user_id:
        return False
    return application_id is None or notification.application_id == application_id


def _application_id_from_path(path: str) -> Optional[str]:
    # applications/<id>[/notes|/events]
    parts = path.split("/")
    if len(parts) >= 2 and parts[0] == "applications" and parts[1]:
        return parts[1]
    return None


notification_service = NotificationService()
