"""
Safe Haven Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.

Fixture Hierarchy (all function-scoped):
    ├── admin / counselor / second_counselor / client: sample users
    ├── user_repo / appointment_repo: in-memory repositories seeded with them
    ├── mailer: recording mail service
    ├── make_appointment: factory for stored appointments
    ├── auth_headers: bearer header builder
    └── test_client: HTTPX AsyncClient with repositories and mailer overridden
"""

import os

# Must run before any safehaven import: settings are read once at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-real"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["ADMIN_EMAIL"] = "office@example.org"
os.environ["COUNSELOR_ASSIGNMENT_STRATEGY"] = "first-active"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date, datetime, timedelta, timezone  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from safehaven.models.appointment import Appointment  # noqa: E402
from safehaven.models.user import User  # noqa: E402
from safehaven.security import create_access_token, hash_password  # noqa: E402
from tests.fakes import (  # noqa: E402
    InMemoryAppointmentRepository,
    InMemoryUserRepository,
    RecordingMailService,
)

TEST_PASSWORD = "correct-horse"


def make_user(role: str, email: str, first_name: str = "Test", **overrides) -> User:
    created = overrides.pop("created_at", datetime.now(timezone.utc))
    return User(
        id=overrides.pop("id", uuid4()),
        first_name=first_name,
        last_name=overrides.pop("last_name", "User"),
        email=email,
        password_hash=overrides.pop("password_hash", "not-a-real-hash"),
        role=role,
        is_active=overrides.pop("is_active", True),
        specializations=overrides.pop("specializations", []),
        email_notifications=overrides.pop("email_notifications", True),
        created_at=created,
        updated_at=created,
        **overrides,
    )


@pytest.fixture
def admin():
    return make_user("admin", "admin@example.org", first_name="Ada")


@pytest.fixture
def counselor():
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return make_user(
        "counselor",
        "sarah@example.org",
        first_name="Sarah",
        last_name="Johnson",
        password_hash=hash_password(TEST_PASSWORD),
        created_at=base,
    )


@pytest.fixture
def second_counselor():
    base = datetime(2024, 1, 2, tzinfo=timezone.utc)
    return make_user(
        "counselor",
        "mark@example.org",
        first_name="Mark",
        last_name="Lee",
        specializations=["Grief and loss", "Youth Counseling"],
        created_at=base,
    )


@pytest.fixture
def client_user():
    return make_user(
        "client",
        "jane@example.org",
        first_name="Jane",
        last_name="Doe",
        password_hash=hash_password(TEST_PASSWORD),
    )


@pytest.fixture
def user_repo(admin, counselor, second_counselor, client_user):
    return InMemoryUserRepository([admin, counselor, second_counselor, client_user])


@pytest.fixture
def appointment_repo(user_repo):
    return InMemoryAppointmentRepository(users=user_repo)


@pytest.fixture
def mailer():
    return RecordingMailService()


@pytest.fixture
def next_monday():
    today = date.today()
    return today + timedelta(days=7 - today.weekday())


@pytest.fixture
def make_appointment(appointment_repo, client_user, counselor, next_monday):
    """Stores an appointment between the sample client and counselor."""

    def _make(**fields) -> Appointment:
        values = dict(
            client_id=client_user.id,
            counselor_id=counselor.id,
            service_type="individual-counseling",
            appointment_date=next_monday,
            start_time="10:00",
            end_time="11:00",
            duration=60,
            status="scheduled",
            session_type="in-person",
        )
        values.update(fields)
        appointment = Appointment(**values)
        appointment_repo._store(appointment)
        return appointment

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}

    return _headers


@pytest.fixture
def booking_payload(next_monday):
    return {
        "first_name": "Maria",
        "last_name": "Lopez",
        "email": "Maria.Lopez@Example.com",
        "phone": "(555) 010-2030",
        "service_type": "individual-counseling",
        "preferred_date": next_monday.isoformat(),
        "preferred_time": "10:00",
        "session_type": "in-person",
        "message": "First visit",
    }


@pytest_asyncio.fixture
async def test_client(user_repo, appointment_repo, mailer):
    """
    HTTPX AsyncClient talking to the app through ASGITransport, with the
    SQL repositories and SMTP mailer swapped for in-memory fakes.
    """
    from safehaven.dependencies import (
        get_appointment_repository,
        get_mail_service,
        get_user_repository,
    )
    from safehaven.main import app

    app.dependency_overrides[get_user_repository] = lambda: user_repo
    app.dependency_overrides[get_appointment_repository] = lambda: appointment_repo
    app.dependency_overrides[get_mail_service] = lambda: mailer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
