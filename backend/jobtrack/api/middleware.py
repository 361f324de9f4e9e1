"""
Request logging middleware
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request with status and duration, tagging it with a request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            logger.error(
                f"[{request_id}] {request.method} {request.url.path} raised "
                f"{type(e).__name__} after {elapsed_ms}ms"
            )
            raise

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        message = f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms}ms)"
        if response.status_code >= 500:
            logger.error(message)
        else:
            logger.debug(message)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
