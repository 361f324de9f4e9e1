from collections import defaultdict
from typing import Any, Dict, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.ext.asyncio import AsyncSession

from jobtrack.services import storage
from jobtrack.utils import ensure_utc


def get_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone: {name}") from e


def group_events_by_day(events: List[Dict[str, Any]], tz_name: str = "UTC") -> List[Dict[str, Any]]:
    """Group events by their local calendar day; days and events both ascend."""
    tz = get_timezone(tz_name)

    days: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for event in sorted(events, key=lambda e: ensure_utc(e["occurred_at"])):
        day = ensure_utc(event["occurred_at"]).astimezone(tz).date().isoformat()
        days[day].append(event)

    return [{"date": day, "events": days[day]} for day in sorted(days)]


async def build_calendar(db: AsyncSession, user_id: str, tz_name: str = "UTC") -> Dict[str, Any]:
    events = await storage.get_user_events(db, user_id)
    return {
        "timezone": tz_name,
        "events": events,
        "days": group_events_by_day(events, tz_name),
    }
