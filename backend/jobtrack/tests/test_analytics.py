from datetime import datetime, timezone

import pytest

from jobtrack.services.analytics import (
    applications_by_source,
    avg_hours_to_first_response,
    compute_kpis,
    funnel_counts,
    week_start,
    weekly_series,
)
from jobtrack.services.calendar import group_events_by_day


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _app(app_id, status="APPLIED", source="LinkedIn", applied_at=None):
    return {
        "id": app_id,
        "status": status,
        "source_name": source,
        "applied_at": applied_at or _utc(2024, 5, 6, 9, 0),
    }


@pytest.fixture
def applications():
    return [
        _app("a1", "APPLIED", "LinkedIn"),
        _app("a2", "VIEWED", "LinkedIn"),
        _app("a3", "PHONE_SCREEN", "Referral"),
        _app("a4", "INTERVIEW", "Indeed"),
        _app("a5", "OFFER", "Referral"),
        _app("a6", "REJECTED", "LinkedIn"),
        _app("a7", "WITHDRAWN", "Email"),
    ]


class TestKpis:
    def test_counts_and_rate(self, applications):
        kpis = compute_kpis(applications)

        assert kpis["total_applications"] == 7
        assert kpis["total_offers"] == 1
        assert kpis["offer_rate"] == 14.3
        assert kpis["active_applications"] == 4

    def test_empty(self):
        assert compute_kpis([]) == {
            "total_applications": 0,
            "total_offers": 0,
            "offer_rate": 0.0,
            "active_applications": 0,
        }


class TestFunnelAndSources:
    def test_funnel_is_cumulative(self, applications):
        assert funnel_counts(applications) == {
            "applied": 7,
            "viewed": 4,
            "interview": 3,
            "offer": 1,
        }

    def test_sources_sorted_by_count(self, applications):
        assert applications_by_source(applications) == [
            {"source": "LinkedIn", "count": 3},
            {"source": "Referral", "count": 2},
            {"source": "Email", "count": 1},
            {"source": "Indeed", "count": 1},
        ]


class TestFirstResponse:
    def test_uses_earliest_response_per_application(self):
        apps = [
            _app("a1", applied_at=_utc(2024, 5, 6, 0, 0)),
            _app("a2", applied_at=_utc(2024, 5, 6, 0, 0)),
            _app("a3", applied_at=_utc(2024, 5, 6, 0, 0)),
        ]
        events = [
            {"application_id": "a1", "type": "first_response", "occurred_at": _utc(2024, 5, 7, 0, 0)},
            {"application_id": "a1", "type": "first_response", "occurred_at": _utc(2024, 5, 6, 12, 0)},
            {"application_id": "a2", "type": "first_response", "occurred_at": _utc(2024, 5, 7, 12, 0)},
            {"application_id": "a3", "type": "viewed", "occurred_at": _utc(2024, 5, 6, 1, 0)},
        ]

        # a1: 12h, a2: 36h, a3 has no response
        assert avg_hours_to_first_response(apps, events) == 24.0

    def test_no_responses(self, applications):
        assert avg_hours_to_first_response(applications, []) == 0.0

    def test_custom_event_name(self):
        apps = [_app("a1", applied_at=_utc(2024, 5, 6, 0, 0))]
        events = [{"application_id": "a1", "type": "recruiter_reply", "occurred_at": _utc(2024, 5, 6, 6, 0)}]

        assert avg_hours_to_first_response(apps, events, event_name="recruiter_reply") == 6.0


class TestWeeklySeries:
    def test_week_start_is_monday_midnight(self):
        assert week_start(_utc(2024, 5, 9, 17, 45)) == _utc(2024, 5, 6)
        assert week_start(_utc(2024, 5, 6, 0, 0)) == _utc(2024, 5, 6)

    def test_zero_filled_oldest_first(self):
        now = _utc(2024, 5, 9, 12, 0)
        apps = [
            _app("a1", applied_at=_utc(2024, 5, 7)),
            _app("a2", applied_at=_utc(2024, 5, 8)),
            _app("a3", applied_at=_utc(2024, 4, 23)),
            _app("a4", applied_at=_utc(2023, 1, 1)),
        ]

        series = weekly_series(apps, weeks=3, now=now)

        assert series == [
            {"week": "2024-04-22", "count": 1},
            {"week": "2024-04-29", "count": 0},
            {"week": "2024-05-06", "count": 2},
        ]

    def test_default_is_eight_weeks(self):
        assert len(weekly_series([], now=_utc(2024, 5, 9))) == 8

    def test_rejects_non_positive_weeks(self):
        with pytest.raises(ValueError):
            weekly_series([], weeks=0)


class TestCalendarGrouping:
    def _event(self, event_id, occurred_at):
        return {
            "id": event_id,
            "application_id": "a1",
            "type": "applied",
            "occurred_at": occurred_at,
            "metadata": {},
            "application_title": "Engineer",
            "company_name": "Initech",
        }

    def test_groups_by_local_day_in_order(self):
        events = [
            self._event("late", _utc(2024, 5, 6, 23, 30)),
            self._event("early", _utc(2024, 5, 6, 8, 0)),
            self._event("next", _utc(2024, 5, 8, 10, 0)),
        ]

        days = group_events_by_day(events, "UTC")

        assert [d["date"] for d in days] == ["2024-05-06", "2024-05-08"]
        assert [e["id"] for e in days[0]["events"]] == ["early", "late"]

    def test_time_zone_moves_events_across_midnight(self):
        events = [self._event("late", _utc(2024, 5, 6, 23, 30))]

        assert group_events_by_day(events, "Asia/Tokyo")[0]["date"] == "2024-05-07"
        assert group_events_by_day(events, "America/Los_Angeles")[0]["date"] == "2024-05-06"

    def test_unknown_time_zone(self):
        with pytest.raises(ValueError):
            group_events_by_day([], "Nowhere/Special")
