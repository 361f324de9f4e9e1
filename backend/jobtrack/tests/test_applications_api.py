from datetime import datetime

import pytest
from sqlalchemy import select

from jobtrack.database import get_db
from jobtrack.main import app
from jobtrack.models import Application, Note, User
from jobtrack.services.notification_service import NotificationType


async def _create(client, headers, data):
    response = await client.post("/api/applications", json=data, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestApplicationsAPI:
    async def test_requires_authentication(self, client):
        response = await client.get("/api/applications")

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    async def test_create_returns_full_record(self, client, auth_headers, application_data):
        body = await _create(client, auth_headers, application_data)

        assert body["company_name"] == "Initech"
        assert body["status"] == "APPLIED"
        assert body["tags"] == ["python", "remote"]
        assert datetime.fromisoformat(body["applied_at"].replace("Z", "+00:00")).hour == 9
        assert [e["type"] for e in body["events"]] == ["applied"]
        assert [n["text"] for n in body["notes"]] == ["Referred by Sam"]

    async def test_create_validates_required_fields(self, client, auth_headers):
        response = await client.post(
            "/api/applications",
            json={"company_name": "", "title": "Engineer", "source_name": "Other"},
            headers=auth_headers,
        )

        assert response.status_code == 422

    async def test_list_is_scoped_to_user(self, client, auth_headers, other_auth_headers, application_data):
        await _create(client, auth_headers, application_data)
        await _create(client, other_auth_headers, {**application_data, "company_name": "Globex"})

        response = await client.get("/api/applications", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["company_name"] == "Initech"

    async def test_list_filters_by_status(self, client, auth_headers, application_data):
        await _create(client, auth_headers, application_data)
        await _create(client, auth_headers, {**application_data, "title": "Lead", "status": "OFFER"})

        response = await client.get("/api/applications", params={"status": "OFFER"}, headers=auth_headers)

        assert [a["title"] for a in response.json()["items"]] == ["Lead"]

    async def test_get_detail(self, client, auth_headers, application_data):
        created = await _create(client, auth_headers, application_data)

        response = await client.get(f"/api/applications/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    async def test_form_options(self, client, auth_headers):
        response = await client.get("/api/applications/options", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert "APPLIED" in body["statuses"]
        assert "LinkedIn" in body["sources"]
        assert "first_response" in body["event_types"]

    async def test_get_missing_is_404(self, client, auth_headers):
        response = await client.get("/api/applications/does-not-exist", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Application not found"

    async def test_cross_user_access_is_403_with_notification(
        self, client, auth_headers, other_auth_headers, application_data, notifications
    ):
        created = await _create(client, auth_headers, application_data)

        response = await client.get(f"/api/applications/{created['id']}", headers=other_auth_headers)

        assert response.status_code == 403
        body = response.json()
        assert body["operation"] == "get"
        assert body["path"] == f"applications/{created['id']}"

        denied = notifications.get_notifications(notification_type=NotificationType.PERMISSION_DENIED)
        assert len(denied) == 1
        assert denied[0].data["path"] == f"applications/{created['id']}"

    async def test_update_status(self, client, auth_headers, application_data):
        created = await _create(client, auth_headers, application_data)

        response = await client.put(
            f"/api/applications/{created['id']}/status",
            json={"status": "PHONE_SCREEN"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "PHONE_SCREEN"

        detail = await client.get(f"/api/applications/{created['id']}", headers=auth_headers)
        assert detail.json()["status"] == "PHONE_SCREEN"

    async def test_update_status_rejects_unknown_value(self, client, auth_headers, application_data):
        created = await _create(client, auth_headers, application_data)

        response = await client.put(
            f"/api/applications/{created['id']}/status",
            json={"status": "HIRED"},
            headers=auth_headers,
        )

        assert response.status_code == 422

    async def test_add_event_and_note(self, client, auth_headers, application_data):
        created = await _create(client, auth_headers, application_data)

        event = await client.post(
            f"/api/applications/{created['id']}/events",
            json={"type": "interview_scheduled", "occurred_at": "2024-05-10T15:00:00Z", "metadata": {"round": 1}},
            headers=auth_headers,
        )
        note = await client.post(
            f"/api/applications/{created['id']}/notes",
            json={"text": "Bring portfolio"},
            headers=auth_headers,
        )

        assert event.status_code == 201
        assert event.json()["metadata"] == {"round": 1}
        assert note.status_code == 201

        detail = (await client.get(f"/api/applications/{created['id']}", headers=auth_headers)).json()
        assert [e["type"] for e in detail["events"]] == ["applied", "interview_scheduled"]
        assert [n["text"] for n in detail["notes"]] == ["Referred by Sam", "Bring portfolio"]

    async def test_delete(self, client, auth_headers, application_data):
        created = await _create(client, auth_headers, application_data)

        response = await client.delete(f"/api/applications/{created['id']}", headers=auth_headers)
        assert response.status_code == 204

        missing = await client.get(f"/api/applications/{created['id']}", headers=auth_headers)
        assert missing.status_code == 404

        again = await client.delete(f"/api/applications/{created['id']}", headers=auth_headers)
        assert again.status_code == 404


class TestDashboardAndCalendarAPI:
    async def test_dashboard(self, client, auth_headers, application_data):
        await _create(client, auth_headers, application_data)
        await _create(client, auth_headers, {**application_data, "source_name": "Referral", "status": "OFFER"})

        response = await client.get("/api/dashboard", params={"weeks": 4}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["total_applications"] == 2
        assert body["total_offers"] == 1
        assert body["offer_rate"] == 50.0
        assert body["active_applications"] == 1
        assert body["funnel"] == {"applied": 2, "viewed": 1, "interview": 1, "offer": 1}
        assert len(body["weekly_series"]) == 4

    async def test_dashboard_weeks_out_of_range(self, client, auth_headers):
        response = await client.get("/api/dashboard", params={"weeks": 0}, headers=auth_headers)

        assert response.status_code == 422

    async def test_calendar_groups_by_local_day(self, client, auth_headers, application_data):
        # 23:30 UTC on May 6 is already May 7 in Berlin
        await _create(client, auth_headers, {**application_data, "applied_at": "2024-05-06T23:30:00Z"})

        utc = (await client.get("/api/calendar", headers=auth_headers)).json()
        berlin = (await client.get("/api/calendar", params={"tz": "Europe/Berlin"}, headers=auth_headers)).json()

        assert [d["date"] for d in utc["days"]] == ["2024-05-06"]
        assert [d["date"] for d in berlin["days"]] == ["2024-05-07"]
        assert berlin["days"][0]["events"][0]["company_name"] == "Initech"

    async def test_calendar_unknown_timezone(self, client, auth_headers):
        response = await client.get("/api/calendar", params={"tz": "Mars/Olympus"}, headers=auth_headers)

        assert response.status_code == 400


class TestWritesAreCommitted:
    @pytest.fixture
    def uncommitted_client(self, client, session_maker):
        # Sessions that roll back on close unless the route commits
        async def plain_session():
            async with session_maker() as session:
                yield session

        app.dependency_overrides[get_db] = plain_session
        return client

    async def test_routes_commit_their_writes(
        self, uncommitted_client, user, auth_headers, application_data, session_maker
    ):
        created = await _create(uncommitted_client, auth_headers, application_data)
        note = await uncommitted_client.post(
            f"/api/applications/{created['id']}/notes",
            json={"text": "Follow up Friday"},
            headers=auth_headers,
        )
        profile = await uncommitted_client.put(
            "/api/settings/profile", json={"display_name": "Ada L."}, headers=auth_headers
        )
        assert note.status_code == 201
        assert profile.status_code == 200

        async with session_maker() as session:
            assert await session.get(Application, created["id"]) is not None
            notes = (await session.scalars(
                select(Note.text).where(Note.application_id == created["id"])
            )).all()
            display_name = await session.scalar(select(User.display_name).where(User.id == user.id))

        assert sorted(notes) == ["Follow up Friday", "Referred by Sam"]
        assert display_name == "Ada L."


class TestNotificationsAPI:
    async def test_list_and_clear(self, client, user, auth_headers, notifications):
        notifications.notify_error("Something broke", user_id=user.id)

        listed = await client.get("/api/notifications", headers=auth_headers)
        assert listed.json()["total"] == 1
        assert listed.json()["notifications"][0]["type"] == "error"

        cleared = await client.delete("/api/notifications", headers=auth_headers)
        assert cleared.json() == {"cleared": 1}

    async def test_each_user_sees_only_their_own_notifications(
        self, client, user, auth_headers, other_auth_headers, application_data, notifications
    ):
        created = await _create(client, auth_headers, application_data)
        notifications.notify_status_rolled_back(created["id"], "OFFER", "APPLIED", "db down", user_id=user.id)
        denied = await client.get(f"/api/applications/{created['id']}", headers=other_auth_headers)
        assert denied.status_code == 403

        mine = (await client.get("/api/notifications", headers=auth_headers)).json()
        theirs = (await client.get("/api/notifications", headers=other_auth_headers)).json()
        assert [n["type"] for n in mine["notifications"]] == ["status_rolled_back"]
        assert [n["type"] for n in theirs["notifications"]] == ["permission_denied"]

        cleared = await client.delete("/api/notifications", headers=other_auth_headers)
        assert cleared.json() == {"cleared": 1}
        assert (await client.get("/api/notifications", headers=auth_headers)).json()["total"] == 1


class TestHealth:
    async def test_root_and_health(self, client):
        health = await client.get("/health")

        assert health.json() == {"status": "ok"}
        assert health.headers["X-Request-ID"]
        assert (await client.get("/")).json()["status"] == "running"

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"
