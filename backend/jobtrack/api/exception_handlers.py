"""
Exception-to-response mapping for the API.
"""

import logging
import traceback

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from assistant.prompt import PromptFlowError
from jobtrack.config import settings
from jobtrack.errors import AuthenticationError, PermissionDeniedError
from jobtrack.services.notification_service import notification_service

logger = logging.getLogger(__name__)


def _where(request: Request) -> str:
    return f"{request.method} {request.url.path}"


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code >= 400:
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(level, f"{_where(request)} -> {exc.status_code}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers,
    )


async def handle_permission_denied(request: Request, exc: PermissionDeniedError) -> JSONResponse:
    # The notification was raised through the error emitter at the source
    return JSONResponse(
        status_code=403,
        content={"detail": str(exc), "operation": exc.operation, "path": exc.path},
    )


async def handle_authentication_error(request: Request, exc: AuthenticationError) -> JSONResponse:
    logger.warning(f"{_where(request)} rejected: {exc}")
    return JSONResponse(
        status_code=401,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def handle_prompt_flow_error(request: Request, exc: PromptFlowError) -> JSONResponse:
    logger.error(f"{_where(request)} AI flow '{exc.flow_name}' failed: {exc}")
    return JSONResponse(
        status_code=502,
        content={
            "detail": "The AI assistant could not complete the request",
            "error": str(exc) if settings.debug else None,
        },
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {_where(request)}: {exc}\n"
        f"{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )
    notification_service.notify_error(
        message=f"Unexpected error on {_where(request)}",
        user_id=getattr(request.state, "user_id", None),
        error_details=str(exc) if settings.debug else None,
    )

    content = {"detail": "Internal server error", "error": "An unexpected error occurred"}
    if settings.debug:
        content.update(error=str(exc), type=type(exc).__name__)
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(PermissionDeniedError, handle_permission_denied)
    app.add_exception_handler(AuthenticationError, handle_authentication_error)
    app.add_exception_handler(PromptFlowError, handle_prompt_flow_error)
    app.add_exception_handler(Exception, handle_unexpected)
