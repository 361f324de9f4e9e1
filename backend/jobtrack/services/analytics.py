"""
Dashboard aggregates computed over one user's applications and events.
"""

import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from jobtrack.config import settings
from jobtrack.models.application import ApplicationStatus
from jobtrack.services import storage
from jobtrack.utils import ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_WEEKS = 8

VIEWED_STATUSES = {
    ApplicationStatus.VIEWED.value,
    ApplicationStatus.PHONE_SCREEN.value,
    ApplicationStatus.INTERVIEW.value,
    ApplicationStatus.OFFER.value,
}
INTERVIEW_STATUSES = {
    ApplicationStatus.PHONE_SCREEN.value,
    ApplicationStatus.INTERVIEW.value,
    ApplicationStatus.OFFER.value,
}
CLOSED_STATUSES = set(ApplicationStatus.closed_statuses())


def compute_kpis(applications: List[Dict[str, Any]]) -> Dict[str, Any]:
    total = len(applications)
    offers = sum(1 for a in applications if a["status"] == ApplicationStatus.OFFER.value)
    active = sum(1 for a in applications if a["status"] not in CLOSED_STATUSES)
    offer_rate = round(offers / total * 100, 1) if total else 0.0

    return {
        "total_applications": total,
        "total_offers": offers,
        "offer_rate": offer_rate,
        "active_applications": active,
    }


def applications_by_source(applications: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    counts = Counter(a.get("source_name") or "Other" for a in applications)
    return [
        {"source": source, "count": count}
        for source, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


def funnel_counts(applications: List[Dict[str, Any]]) -> Dict[str, int]:
    statuses = [a["status"] for a in applications]
    return {
        "applied": len(statuses),
        "viewed": sum(1 for s in statuses if s in VIEWED_STATUSES),
        "interview": sum(1 for s in statuses if s in INTERVIEW_STATUSES),
        "offer": sum(1 for s in statuses if s == ApplicationStatus.OFFER.value),
    }


def avg_hours_to_first_response(
    applications: List[Dict[str, Any]],
    events: List[Dict[str, Any]],
    event_name: Optional[str] = None,
) -> float:
    """
    Mean hours from applied_at to the earliest first-response event, over the
    applications that have one. Returns 0.0 when no application has a response.
    """
    event_name = event_name or settings.first_response_event_name

    first_response: Dict[str, datetime] = {}
    for event in events:
        if event["type"] != event_name:
            continue
        occurred_at = ensure_utc(event["occurred_at"])
        current = first_response.get(event["application_id"])
        if current is None or occurred_at < current:
            first_response[event["application_id"]] = occurred_at

    hours = []
    for application in applications:
        responded_at = first_response.get(application["id"])
        if responded_at is None:
            continue
        delta = responded_at - ensure_utc(application["applied_at"])
        hours.append(delta.total_seconds() / 3600)

    if not hours:
        return 0.0
    return round(sum(hours) / len(hours), 1)


def week_start(value: datetime) -> datetime:
    """Midnight UTC of the Monday starting the value's week."""
    value = ensure_utc(value)
    monday = value - timedelta(days=value.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def weekly_series(
    applications: List[Dict[str, Any]],
    weeks: int = DEFAULT_WEEKS,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Applications per week for the last ``weeks`` weeks, oldest first, zero-filled."""
    if weeks < 1:
        raise ValueError("weeks must be at least 1")

    current = week_start(now or datetime.now(timezone.utc))
    starts = [current - timedelta(weeks=offset) for offset in range(weeks - 1, -1, -1)]

    counts: Dict[datetime, int] = defaultdict(int)
    for application in applications:
        counts[week_start(application["applied_at"])] += 1

    return [{"week": start.date().isoformat(), "count": counts.get(start, 0)} for start in starts]


async def build_dashboard(
    db: AsyncSession,
    user_id: str,
    weeks: int = DEFAULT_WEEKS,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    applications = await storage.get_applications_list(db, user_id)
    events = await storage.get_user_events(db, user_id)

    dashboard = compute_kpis(applications)
    dashboard.update({
        "avg_hours_to_first_response": avg_hours_to_first_response(applications, events),
        "applications_by_source": applications_by_source(applications),
        "funnel": funnel_counts(applications),
        "weekly_series": weekly_series(applications, weeks=weeks, now=now),
    })

    logger.debug(f"Dashboard for {user_id}: {dashboard['total_applications']} applications")
    return dashboard
