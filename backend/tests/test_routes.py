"""
Safe Haven Backend: API Route Tests
=====================================

What:  End-to-end HTTP tests through the full middleware stack, with the
       repositories and mailer swapped for in-memory fakes.

What we test:
    ✅ Public booking: 201 envelope, validation errors carry the field name
    ✅ Auth: 401 without a token, 403 for another client's appointment
    ✅ Status changes: legal transition 200, illegal transition 409
    ✅ Over-long cancel reasons and notes are 400s naming the field
    ✅ Appointments embed client and counselor summaries
    ✅ Service catalog, availability, contact form
    ✅ Register / login / me, profile update, admin activation
    ✅ Error envelope shape and X-Request-ID echo
"""

from uuid import uuid4

import pytest

from tests.conftest import TEST_PASSWORD, make_user
from tests.fakes import FailingMailService


class TestBookingEndpoint:

    @pytest.mark.asyncio
    async def test_booking_created(self, test_client, booking_payload, appointment_repo, mailer, counselor):
        response = await test_client.post("/api/appointments", json=booking_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["appointment"]["status"] == "scheduled"
        assert body["appointment"]["start_time"] == "10:00"
        assert body["appointment"]["end_time"] == "11:00"
        assert body["appointment"]["admin_notes"] is None
        assert body["counselor"]["id"] == str(counselor.id)
        assert body["appointment"]["counselor"]["email"] == "sarah@example.org"
        assert body["appointment"]["client"]["email"] == "maria.lopez@example.com"
        assert "password_hash" not in body["counselor"]
        assert len(appointment_repo.rows) == 1
        assert "maria.lopez@example.com" in mailer.recipients()

    @pytest.mark.asyncio
    async def test_invalid_time_names_field(self, test_client, booking_payload, appointment_repo):
        booking_payload["preferred_time"] = "25:99"
        response = await test_client.post("/api/appointments", json=booking_payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "start_time"
        assert body["request_id"]
        assert appointment_repo.rows == {}

    @pytest.mark.asyncio
    async def test_unknown_service(self, test_client, booking_payload):
        booking_payload["service_type"] = "astrology"
        response = await test_client.post("/api/appointments", json=booking_payload)

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "service_type"

    @pytest.mark.asyncio
    async def test_malformed_email_is_422(self, test_client, booking_payload):
        booking_payload["email"] = "not-an-email"
        response = await test_client.post("/api/appointments", json=booking_payload)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_all_counselors_busy(
        self, test_client, booking_payload, make_appointment, second_counselor
    ):
        make_appointment()
        make_appointment(counselor_id=second_counselor.id)

        response = await test_client.post("/api/appointments", json=booking_payload)

        assert response.status_code == 400
        assert response.json()["error"] == "no_counselor_available"


class TestAppointmentAccess:

    @pytest.mark.asyncio
    async def test_list_requires_token(self, test_client):
        response = await test_client.get("/api/appointments")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_garbage_token(self, test_client):
        response = await test_client.get(
            "/api/appointments", headers={"Authorization": "Bearer not.a.token"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_client_lists_own(self, test_client, make_appointment, client_user, auth_headers):
        make_appointment(admin_notes="Sliding scale approved")
        make_appointment(client_id=uuid4(), start_time="14:00", end_time="15:00")

        response = await test_client.get("/api/appointments", headers=auth_headers(client_user))

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["appointments"][0]["admin_notes"] is None

    @pytest.mark.asyncio
    async def test_admin_sees_admin_notes(self, test_client, make_appointment, admin, auth_headers):
        appointment = make_appointment(admin_notes="Sliding scale approved")

        response = await test_client.get(
            f"/api/appointments/{appointment.id}", headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["appointment"]["admin_notes"] == "Sliding scale approved"

    @pytest.mark.asyncio
    async def test_participants_embedded(
        self, test_client, make_appointment, client_user, second_counselor, auth_headers
    ):
        client_user.phone = "555-0100"
        make_appointment(counselor_id=second_counselor.id)

        response = await test_client.get("/api/appointments", headers=auth_headers(client_user))

        assert response.status_code == 200
        listed = response.json()["appointments"][0]
        assert listed["client"]["email"] == "jane@example.org"
        assert listed["client"]["phone"] == "555-0100"
        assert listed["counselor"]["first_name"] == "Mark"
        assert listed["counselor"]["specializations"] == ["Grief and loss", "Youth Counseling"]
        assert "password_hash" not in listed["client"]

    @pytest.mark.asyncio
    async def test_token_for_unknown_user_rejected(self, test_client, make_appointment, auth_headers):
        stranger = make_user("client", "stranger@example.org")
        appointment = make_appointment(client_id=stranger.id)

        response = await test_client.get(
            f"/api/appointments/{appointment.id}", headers=auth_headers(stranger)
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_client_cannot_read_foreign_appointment(
        self, test_client, make_appointment, user_repo, auth_headers
    ):
        other = make_user("client", "other@example.org")
        user_repo._store(other)
        appointment = make_appointment()

        response = await test_client.get(
            f"/api/appointments/{appointment.id}", headers=auth_headers(other)
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    @pytest.mark.asyncio
    async def test_missing_appointment(self, test_client, admin, auth_headers):
        response = await test_client.get(f"/api/appointments/{uuid4()}", headers=auth_headers(admin))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_status_filter(self, test_client, admin, auth_headers):
        response = await test_client.get(
            "/api/appointments", params={"status": "archived"}, headers=auth_headers(admin)
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "status"


class TestStatusAndNotes:

    @pytest.mark.asyncio
    async def test_counselor_confirms(self, test_client, make_appointment, counselor, auth_headers):
        appointment = make_appointment()

        response = await test_client.put(
            f"/api/appointments/{appointment.id}/status",
            json={"status": "confirmed"},
            headers=auth_headers(counselor),
        )

        assert response.status_code == 200
        assert response.json()["appointment"]["status"] == "confirmed"

    @pytest.mark.asyncio
    async def test_illegal_transition_is_409(self, test_client, make_appointment, admin, auth_headers):
        appointment = make_appointment(status="completed")

        response = await test_client.put(
            f"/api/appointments/{appointment.id}/status",
            json={"status": "scheduled"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "conflict"
        assert body["details"]["current_status"] == "completed"

    @pytest.mark.asyncio
    async def test_client_cannot_complete(self, test_client, make_appointment, client_user, auth_headers):
        appointment = make_appointment(status="confirmed")

        response = await test_client.put(
            f"/api/appointments/{appointment.id}/status",
            json={"status": "completed"},
            headers=auth_headers(client_user),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_long_cancel_reason_names_field(self, test_client, make_appointment, admin, auth_headers):
        appointment = make_appointment()

        response = await test_client.put(
            f"/api/appointments/{appointment.id}/status",
            json={"status": "cancelled", "cancel_reason": "x" * 201},
            headers=auth_headers(admin),
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "cancel_reason"
        assert appointment.status == "scheduled"

    @pytest.mark.asyncio
    async def test_long_client_notes_names_field(
        self, test_client, make_appointment, client_user, auth_headers
    ):
        appointment = make_appointment()

        response = await test_client.put(
            f"/api/appointments/{appointment.id}/notes",
            json={"notes": "n" * 501},
            headers=auth_headers(client_user),
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "notes"

    @pytest.mark.asyncio
    async def test_counselor_writes_notes(self, test_client, make_appointment, counselor, auth_headers):
        appointment = make_appointment()

        response = await test_client.put(
            f"/api/appointments/{appointment.id}/notes",
            json={"notes": "  Discussed coping strategies  "},
            headers=auth_headers(counselor),
        )

        assert response.status_code == 200
        assert response.json()["appointment"]["counselor_notes"] == "Discussed coping strategies"


class TestServiceCatalog:

    @pytest.mark.asyncio
    async def test_list(self, test_client):
        response = await test_client.get("/api/services")

        assert response.status_code == 200
        services = response.json()["services"]
        assert len(services) == 8
        assert services[0]["id"] == "individual-counseling"

    @pytest.mark.asyncio
    async def test_detail(self, test_client):
        response = await test_client.get("/api/services/couples-counseling")

        assert response.status_code == 200
        service = response.json()["service"]
        assert service["duration"] == 90
        assert service["session_types"] == ["in-person", "video-call"]

    @pytest.mark.asyncio
    async def test_unknown_service_is_404(self, test_client):
        response = await test_client.get("/api/services/astrology")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_availability(self, test_client, next_monday, make_appointment, second_counselor):
        make_appointment(start_time="09:00", end_time="10:00")
        make_appointment(start_time="09:00", end_time="10:00", counselor_id=second_counselor.id)

        response = await test_client.get(f"/api/services/availability/{next_monday.isoformat()}")

        assert response.status_code == 200
        body = response.json()
        assert body["date"] == next_monday.isoformat()
        assert "09:00" not in body["available_slots"]
        assert "10:00" in body["available_slots"]

    @pytest.mark.asyncio
    async def test_availability_bad_date(self, test_client):
        response = await test_client.get("/api/services/availability/next-tuesday")

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "date"


class TestContactEndpoint:

    @pytest.mark.asyncio
    async def test_contact_sends_two_messages(self, test_client, mailer):
        response = await test_client.post(
            "/api/contact",
            json={
                "name": "Paul Smith",
                "email": "paul@example.org",
                "subject": "insurance",
                "message": "Which insurance plans do you accept?",
            },
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert len(mailer.sent) == 2

    @pytest.mark.asyncio
    async def test_contact_succeeds_when_mail_fails(self, test_client):
        from safehaven.dependencies import get_mail_service
        from safehaven.main import app

        app.dependency_overrides[get_mail_service] = FailingMailService
        response = await test_client.post(
            "/api/contact",
            json={
                "name": "Paul Smith",
                "email": "paul@example.org",
                "subject": "other",
                "message": "Just saying thank you.",
            },
        )

        assert response.status_code == 200
        assert response.json()["success"] is True

    @pytest.mark.asyncio
    async def test_short_message_rejected(self, test_client):
        response = await test_client.post(
            "/api/contact",
            json={"name": "Paul", "email": "paul@example.org", "subject": "other", "message": "hi"},
        )
        assert response.status_code == 422


class TestAuthAndUsers:

    @pytest.mark.asyncio
    async def test_register_then_me(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={
                "first_name": "Ruth",
                "last_name": "Adams",
                "email": "ruth@example.org",
                "password": "s3cret-pass",
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert "password_hash" not in body["user"]

        me = await test_client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["user"]["email"] == "ruth@example.org"

    @pytest.mark.asyncio
    async def test_register_duplicate_is_409(self, test_client):
        response = await test_client.post(
            "/api/auth/register",
            json={
                "first_name": "Jane",
                "last_name": "Doe",
                "email": "jane@example.org",
                "password": "another-pass",
            },
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_login(self, test_client, client_user):
        response = await test_client.post(
            "/api/auth/login", json={"email": "jane@example.org", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(client_user.id)

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, test_client):
        response = await test_client.post(
            "/api/auth/login", json={"email": "jane@example.org", "password": "nope"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_update_own_profile(self, test_client, counselor, auth_headers):
        response = await test_client.put(
            "/api/users/me",
            json={"bio": "Grief and trauma specialist"},
            headers=auth_headers(counselor),
        )

        assert response.status_code == 200
        assert response.json()["user"]["bio"] == "Grief and trauma specialist"

    @pytest.mark.asyncio
    async def test_admin_deactivates_user(self, test_client, admin, client_user, auth_headers):
        response = await test_client.put(
            f"/api/users/{client_user.id}/active",
            json={"is_active": False},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert response.json()["user"]["is_active"] is False

        # the deactivated client's token stops working
        me = await test_client.get("/api/auth/me", headers=auth_headers(client_user))
        assert me.status_code == 401

    @pytest.mark.asyncio
    async def test_counselor_cannot_deactivate(self, test_client, counselor, client_user, auth_headers):
        response = await test_client.put(
            f"/api/users/{client_user.id}/active",
            json={"is_active": False},
            headers=auth_headers(counselor),
        )
        assert response.status_code == 403


class TestCrossCutting:

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/api/services", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/api/services")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["database"] == "connected"
        assert body["mail"] == "not_configured"
        assert body["status"] == "degraded"
