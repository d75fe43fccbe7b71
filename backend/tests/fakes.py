"""
In-memory stand-ins for the repositories and the mailer.

They implement the same abstract interfaces as the SQL repositories and the
SMTP mailer, so services run unchanged against them.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from safehaven.exceptions import DuplicateEmailError, MailDeliveryError
from safehaven.models.appointment import Appointment
from safehaven.models.user import User
from safehaven.services.mail_service import MailMessage, MailService
from safehaven.services.repositories import AppointmentRepository, UserRepository


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _fill(entity: Any, **defaults: Any) -> None:
    # ORM column defaults only apply on flush; mimic them here
    for name, value in defaults.items():
        if getattr(entity, name, None) is None:
            setattr(entity, name, value() if callable(value) else value)


class InMemoryUserRepository(UserRepository):

    def __init__(self, users: Sequence[User] = ()):
        self.rows: Dict[uuid.UUID, User] = {}
        for user in users:
            self._store(user)

    def _store(self, user: User) -> User:
        _fill(
            user,
            id=uuid.uuid4,
            role="client",
            is_active=True,
            specializations=list,
            email_notifications=True,
            created_at=_now,
            updated_at=_now,
        )
        user.email = user.email.strip().lower()
        self.rows[user.id] = user
        return user

    async def find(self, *, role: Optional[str] = None, is_active: Optional[bool] = None) -> List[User]:
        return [
            u for u in self.rows.values()
            if (role is None or u.role == role) and (is_active is None or u.is_active == is_active)
        ]

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.rows.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        normalized = email.strip().lower()
        for user in self.rows.values():
            if user.email == normalized:
                return user
        return None

    async def insert(self, user: User) -> User:
        if await self.find_by_email(user.email) is not None:
            raise DuplicateEmailError(user.email)
        return self._store(user)

    async def update_by_id(self, user_id: uuid.UUID, patch: Dict[str, Any]) -> Optional[User]:
        user = self.rows.get(user_id)
        if user is None:
            return None
        for name, value in patch.items():
            setattr(user, name, value)
        user.updated_at = _now()
        return user


class InMemoryAppointmentRepository(AppointmentRepository):

    def __init__(
        self,
        appointments: Sequence[Appointment] = (),
        users: Optional[InMemoryUserRepository] = None,
    ):
        self.rows: Dict[uuid.UUID, Appointment] = {}
        self.users = users
        self.update_calls = 0
        self.commits = 0
        for appointment in appointments:
            self._store(appointment)

    def _store(self, appointment: Appointment) -> Appointment:
        _fill(
            appointment,
            id=uuid.uuid4,
            status="scheduled",
            session_type="in-person",
            location="SHRM Office",
            duration=60,
            reminder_sent=False,
            is_recurring=False,
            fee_currency="USD",
            payment_status="pending",
            created_at=_now,
            updated_at=_now,
        )
        self.rows[appointment.id] = appointment
        return appointment

    def _with_participants(self, appointment: Appointment) -> Appointment:
        # Stands in for the selectinload of client and counselor
        if self.users is not None:
            if appointment.client is None:
                appointment.client = self.users.rows.get(appointment.client_id)
            if appointment.counselor is None:
                appointment.counselor = self.users.rows.get(appointment.counselor_id)
        return appointment

    async def find(
        self,
        *,
        client_id=None,
        counselor_id=None,
        counselor_ids=None,
        status=None,
        statuses=None,
        appointment_date=None,
    ) -> List[Appointment]:
        matches = [
            a for a in self.rows.values()
            if (client_id is None or a.client_id == client_id)
            and (counselor_id is None or a.counselor_id == counselor_id)
            and (counselor_ids is None or a.counselor_id in set(counselor_ids))
            and (status is None or a.status == status)
            and (statuses is None or a.status in set(statuses))
            and (appointment_date is None or a.appointment_date == appointment_date)
        ]
        ordered = sorted(matches, key=lambda a: (a.appointment_date, a.start_time))
        return [self._with_participants(a) for a in ordered]

    async def find_by_id(self, appointment_id: uuid.UUID) -> Optional[Appointment]:
        appointment = self.rows.get(appointment_id)
        return self._with_participants(appointment) if appointment is not None else None

    async def insert(self, appointment: Appointment) -> Appointment:
        return self._store(appointment)

    async def update_by_id(
        self,
        appointment_id: uuid.UUID,
        patch: Dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> Optional[Appointment]:
        self.update_calls += 1
        appointment = self.rows.get(appointment_id)
        if appointment is None:
            return None
        if expected_status is not None and appointment.status != expected_status:
            return None
        for name, value in patch.items():
            setattr(appointment, name, value)
        appointment.updated_at = _now()
        return self._with_participants(appointment)

    async def commit(self) -> None:
        self.commits += 1


class RacingAppointmentRepository(InMemoryAppointmentRepository):
    """Another writer moves the appointment to `winner_status` just before each update."""

    def __init__(self, appointments: Sequence[Appointment] = (), winner_status: str = "cancelled"):
        super().__init__(appointments)
        self.winner_status = winner_status

    async def update_by_id(self, appointment_id, patch, expected_status=None):
        appointment = self.rows.get(appointment_id)
        if appointment is not None:
            appointment.status = self.winner_status
        return await super().update_by_id(appointment_id, patch, expected_status)


class RecordingMailService(MailService):

    def __init__(self):
        self.sent: List[MailMessage] = []

    @property
    def configured(self) -> bool:
        return True

    async def send(self, message: MailMessage) -> bool:
        self.sent.append(message)
        return True

    def recipients(self) -> List[str]:
        return [m.to for m in self.sent]


class FailingMailService(MailService):

    def __init__(self):
        self.attempts = 0

    @property
    def configured(self) -> bool:
        return True

    async def send(self, message: MailMessage) -> bool:
        self.attempts += 1
        raise MailDeliveryError(context={"to": message.to})
