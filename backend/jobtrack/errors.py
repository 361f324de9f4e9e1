import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

PERMISSION_ERROR_EVENT = "permission-error"


class JobTrackError(Exception):
    pass


class AuthenticationError(JobTrackError):
    def __init__(self, message: str = "You must be logged in"):
        super().__init__(message)


class PermissionDeniedError(JobTrackError):
    def __init__(
        self,
        operation: str,
        path: str,
        resource: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
        user_id: Optional[str] = None,
    ):
        self.operation = operation
        self.path = path
        # The user whose request was refused
        self.user_id = user_id
        self.resource = resource
        self.original_error = original_error
        super().__init__(f"Permission denied for {operation} on {path}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "path": self.path,
            "resource": self.resource,
            "user_id": self.user_id,
            "message": str(self),
        }


Listener = Callable[[Any], None]


class ErrorEmitter:
    """Minimal named-event publisher used to surface errors to notification listeners."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._lock = threading.Lock()

    def on(self, event: str, listener: Listener) -> None:
        with self._lock:
            self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

    def emit(self, event: str, payload: Any) -> None:
        with self._lock:
            listeners = list(self._listeners[event])

        for listener in listeners:
            try:
                listener(payload)
            except Exception as e:
                logger.error(f"Error in '{event}' listener: {e}")

    def listener_count(self, event: str) -> int:
        with self._lock:
            return len(self._listeners[event])


error_emitter = ErrorEmitter()


def report_permission_error(error: PermissionDeniedError) -> PermissionDeniedError:
    """Publish a permission error on the shared emitter and hand it back for raising."""
    logger.warning(str(error))
    error_emitter.emit(PERMISSION_ERROR_EVENT, error)
    return error
