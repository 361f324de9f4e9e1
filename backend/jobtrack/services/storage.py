"""
Data-access facade for applications and their notes and events.

Every function takes the request's AsyncSession and the id of the user making
the request. Records are returned as plain dicts with timezone-aware UTC
timestamps. Reads of another user's application publish a permission error on
the shared emitter and raise PermissionDeniedError; a missing application is
reported as None (or False for deletes).
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jobtrack.errors import AuthenticationError, PermissionDeniedError, report_permission_error
from jobtrack.models.application import Application, ApplicationStatus
from jobtrack.models.event import ApplicationEvent
from jobtrack.models.note import Note
from jobtrack.services.notification_service import notification_service
from jobtrack.utils import normalize_timestamps, to_storage, utcnow

logger = logging.getLogger(__name__)

APPLICATIONS_PATH = "applications"

_APPLICATION_FIELDS = (
    "user_id",
    "company_name",
    "title",
    "source_name",
    "location",
    "salary",
    "url",
    "job_id",
    "source_id",
    "resume_id",
    "cover_letter",
)


def _path(application_id: str, subcollection: Optional[str] = None) -> str:
    path = f"{APPLICATIONS_PATH}/{application_id}"
    return f"{path}/{subcollection}" if subcollection else path


def _status_value(status: Any) -> str:
    if isinstance(status, ApplicationStatus):
        return status.value
    return ApplicationStatus(status).value


def event_to_record(event: ApplicationEvent) -> Dict[str, Any]:
    return normalize_timestamps({
        "id": event.id,
        "application_id": event.application_id,
        "type": event.type,
        "occurred_at": event.occurred_at,
        "metadata": event.event_metadata or {},
    })


def note_to_record(note: Note) -> Dict[str, Any]:
    return normalize_timestamps({
        "id": note.id,
        "application_id": note.application_id,
        "text": note.text,
        "created_at": note.created_at,
    })


def application_to_record(
    application: Application,
    notes: Optional[Iterable[Note]] = None,
    events: Optional[Iterable[ApplicationEvent]] = None,
) -> Dict[str, Any]:
    record = {
        "id": application.id,
        "user_id": application.user_id,
        "company_name": application.company_name,
        "title": application.title,
        "source_name": application.source_name,
        "applied_at": application.applied_at,
        "status": application.status,
        "location": application.location,
        "salary": application.salary,
        "url": application.url,
        "job_id": application.job_id,
        "source_id": application.source_id,
        "resume_id": application.resume_id,
        "cover_letter": application.cover_letter,
        "tags": list(application.tags or []),
        "created_at": application.created_at,
        "updated_at": application.updated_at,
    }
    record = normalize_timestamps(record)
    if notes is not None:
        record["notes"] = [note_to_record(n) for n in notes]
    if events is not None:
        record["events"] = [event_to_record(e) for e in events]
    return record


async def _get_owned_application(
    db: AsyncSession,
    application_id: str,
    user_id: str,
    operation: str,
    with_children: bool = False,
) -> Optional[Application]:
    query = select(Application).where(Application.id == application_id)
    if with_children:
        query = query.options(
            selectinload(Application.notes),
            selectinload(Application.events),
        ).execution_options(populate_existing=True)

    application = await db.scalar(query)
    if application is None:
        return None

    if application.user_id != user_id:
        raise report_permission_error(
            PermissionDeniedError(operation=operation, path=_path(application_id), user_id=user_id)
        )
    return application


async def get_applications_list(
    db: AsyncSession,
    user_id: str,
    statuses: Optional[List[str]] = None,
) -> List[Dict[str, Any]]:
    """List a user's applications (without notes and events), newest first."""
    if not user_id:
        logger.warning("get_applications_list called without a user_id")
        return []

    query = select(Application).where(Application.user_id == user_id)
    if statuses:
        query = query.where(Application.status.in_(statuses))
    query = query.order_by(Application.applied_at.desc(), Application.created_at.desc())

    result = await db.execute(query)
    return [application_to_record(a) for a in result.scalars().all()]


async def get_application_by_id(
    db: AsyncSession,
    application_id: str,
    user_id: str,
) -> Optional[Dict[str, Any]]:
    """Full application record with notes and events, or None when it does not exist."""
    application = await _get_owned_application(
        db, application_id, user_id, operation="get", with_children=True
    )
    if application is None:
        return None
    return application_to_record(application, notes=application.notes, events=application.events)


async def save_application(db: AsyncSession, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create an application along with its initial "applied" event.

    ``data`` holds the application fields plus ``user_id``; an optional
    ``notes`` string becomes the first note. Everything is written in the
    session's transaction, so a failure leaves nothing behind.
    """
    if not data.get("user_id"):
        raise AuthenticationError("You must be logged in to save an application")

    now = utcnow()
    applied_at = data.get("applied_at")
    applied_at = to_storage(applied_at) if isinstance(applied_at, datetime) else now

    application = Application(
        **{field: data.get(field) for field in _APPLICATION_FIELDS},
        status=_status_value(data.get("status") or ApplicationStatus.APPLIED),
        applied_at=applied_at,
        tags=list(data.get("tags") or []),
        created_at=now,
        updated_at=now,
        notes=[],
        events=[],
    )

    application.events.append(ApplicationEvent(
        type="applied",
        occurred_at=applied_at,
        event_metadata={},
    ))

    note_text = data.get("notes")
    if note_text:
        application.notes.append(Note(text=note_text, created_at=now))

    db.add(application)
    await db.flush()

    logger.info(f"Saved application {application.id} ({application.title} at {application.company_name})")
    return application_to_record(application, notes=application.notes, events=application.events)


async def delete_application(db: AsyncSession, application_id: str, user_id: str) -> bool:
    """Delete an application with its notes and events in a single transaction."""
    application = await _get_owned_application(db, application_id, user_id, operation="delete")
    if application is None:
        return False

    await db.execute(delete(Note).where(Note.application_id == application_id))
    await db.execute(delete(ApplicationEvent).where(ApplicationEvent.application_id == application_id))
    await db.execute(delete(Application).where(Application.id == application_id))
    await db.flush()

    logger.info(f"Deleted application {application_id}")
    return True


async def add_application_event(
    db: AsyncSession,
    application_id: str,
    user_id: str,
    data: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """Record an event on an application and bump its updated_at."""
    application = await _get_owned_application(db, application_id, user_id, operation="create")
    if application is None:
        return None

    occurred_at = data.get("occurred_at")
    event = ApplicationEvent(
        application_id=application_id,
        type=data["type"],
        occurred_at=to_storage(occurred_at) if isinstance(occurred_at, datetime) else utcnow(),
        event_metadata=dict(data.get("metadata") or {}),
    )
    db.add(event)
    application.updated_at = utcnow()
    await db.flush()

    return event_to_record(event)


async def add_note(
    db: AsyncSession,
    application_id: str,
    user_id: str,
    text: str,
) -> Optional[Dict[str, Any]]:
    application = await _get_owned_application(db, application_id, user_id, operation="create")
    if application is None:
        return None

    now = utcnow()
    note = Note(application_id=application_id, text=text, created_at=now)
    db.add(note)
    application.updated_at = now
    await db.flush()

    return note_to_record(note)


async def update_application_status(
    db: AsyncSession,
    application_id: str,
    user_id: str,
    status: Any,
) -> Optional[Dict[str, Any]]:
    """
    Apply a new status right away; if the write fails, put the previous
    status back on the application and re-raise.
    """
    application = await _get_owned_application(db, application_id, user_id, operation="update")
    if application is None:
        return None

    new_status = _status_value(status)
    previous_status = application.status
    previous_updated_at = application.updated_at

    application.status = new_status
    application.updated_at = utcnow()

    try:
        await db.flush()
    except Exception as e:
        application.status = previous_status
        application.updated_at = previous_updated_at
        logger.error(f"Status update for {application_id} failed, restored {previous_status}: {e}")
        notification_service.notify_status_rolled_back(
            user_id=user_id,
            application_id=application_id,
            attempted_status=new_status,
            restored_status=previous_status,
            error=str(e),
        )
        raise

    logger.info(f"Application {application_id} status {previous_status} -> {new_status}")
    return application_to_record(application)


async def get_user_events(db: AsyncSession, user_id: str) -> List[Dict[str, Any]]:
    """All events on the user's applications, oldest first, with the application's title and company."""
    if not user_id:
        logger.warning("get_user_events called without a user_id")
        return []

    query = (
        select(ApplicationEvent, Application.title, Application.company_name)
        .join(Application, ApplicationEvent.application_id == Application.id)
        .where(Application.user_id == user_id)
        .order_by(ApplicationEvent.occurred_at.asc())
    )
    result = await db.execute(query)

    events = []
    for event, title, company_name in result.all():
        record = event_to_record(event)
        record["application_title"] = title
        record["company_name"] = company_name
        events.append(record)
    return events
