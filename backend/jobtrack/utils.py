import uuid
from datetime import datetime, timezone
from typing import Any


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage(value: datetime) -> datetime:
    """Convert a datetime to naive UTC for storage. Naive input is assumed to be UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalize_timestamps(value: Any) -> Any:
    """
    Recursively convert stored timestamps to timezone-aware UTC datetimes.

    Mappings and sequences are rebuilt with their contents normalized;
    any other value is returned as is.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, dict):
        return {key: normalize_timestamps(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_timestamps(item) for item in value]
    return value
