"""
Safe Haven Backend: Appointment Service (Lifecycle Orchestrator)
==================================================================

What:  Runs every appointment use case over injected collaborators.
Who:   /api/appointments and /api/services/availability routes.

Booking flow (POST /api/appointments):
    ┌───────────┐   ┌──────────────┐   ┌─────────────┐   ┌──────────┐   ┌────────┐
    │ Validator │──▶│ Find/create  │──▶│ Counselors  │──▶│ Strategy │──▶│ Insert │
    │  (draft)  │   │   client     │   │ minus busy  │   │ (select) │   │        │
    └───────────┘   └──────────────┘   └─────────────┘   └──────────┘   └───┬────┘
                                                                            ▼
                                                        confirmation + admin emails
                                                        (failures logged, not raised)

Status flow (PUT /api/appointments/{id}/status):
    find → ownership → state machine → one conditional update keyed on the
    status that was read. If the update matches nothing, the appointment is
    re-read: gone → NotFoundError, otherwise another request won the race →
    ConcurrentUpdateError.

Design Decision:
    The service holds no state of its own beyond its collaborators. Routes
    build one per request with the request's repositories, so tests can
    hand it in-memory fakes and a recording mailer.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from safehaven.config import settings
from safehaven.enums import TERMINAL_STATUSES, AppointmentStatus, PaymentStatus, Role
from safehaven.exceptions import (
    ConcurrentUpdateError,
    ForbiddenError,
    MailDeliveryError,
    NotFoundError,
    ValidationError,
)
from safehaven.models.appointment import Appointment
from safehaven.models.user import User
from safehaven.schemas.appointment import BookingRequest
from safehaven.services.assignment import BookingContext, CounselorAssignmentStrategy
from safehaven.services.catalog import get_service, service_name
from safehaven.services.email_templates import (
    booking_confirmation_template,
    booking_notification_template,
)
from safehaven.services.mail_service import MailMessage, MailService
from safehaven.services.repositories import AppointmentRepository, UserRepository
from safehaven.services.scheduling_validator import (
    AppointmentDraft,
    SchedulingValidator,
    parse_date,
    parse_time,
    spans_overlap,
)
from safehaven.services.status_machine import StatusStateMachine, status_machine
from safehaven.services.user_service import UserService

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = [s.value for s in AppointmentStatus if s not in TERMINAL_STATUSES]

# Which notes column each role writes, and its length limit
NOTE_FIELDS: Dict[str, tuple] = {
    Role.CLIENT.value: ("client_notes", 500),
    Role.COUNSELOR.value: ("counselor_notes", 1000),
    Role.ADMIN.value: ("admin_notes", 500),
}


@dataclass
class BookingResult:
    appointment: Appointment
    client: User
    counselor: User
    client_created: bool = False


class AppointmentService:

    def __init__(
        self,
        users: UserRepository,
        appointments: AppointmentRepository,
        mailer: MailService,
        strategy: CounselorAssignmentStrategy,
        validator: Optional[SchedulingValidator] = None,
        state_machine: Optional[StatusStateMachine] = None,
        prevent_double_booking: Optional[bool] = None,
        default_location: Optional[str] = None,
    ):
        self.users = users
        self.appointments = appointments
        self.mailer = mailer
        self.strategy = strategy
        self.validator = validator or SchedulingValidator.from_settings()
        self.state_machine = state_machine or status_machine
        self.prevent_double_booking = (
            settings.prevent_double_booking
            if prevent_double_booking is None
            else prevent_double_booking
        )
        self.default_location = default_location or settings.default_location
        self.user_service = UserService(users)

    # ── Booking ───────────────────────────────────────────────────────────

    async def create_appointment(self, request: BookingRequest) -> BookingResult:
        """
        Books a session from the public form.

        Steps:
            1. Validate and normalize the candidate (nothing is written on failure)
            2. Find or create the client account by email
            3. Collect active counselors, drop those busy in the requested range
            4. Let the assignment strategy pick one
            5. Insert the appointment (status scheduled) and commit it
            6. Send client confirmation and admin notification

        Raises:
            ValidationError subclasses: bad service/date/time/session/duration
            NoCounselorAvailableError:  no active, free counselor
            DatabaseError:              store failure
        """
        draft = self.validator.validate(
            service_type=request.service_type,
            appointment_date=request.preferred_date,
            start_time=request.preferred_time,
            session_type=request.session_type,
            end_time=request.end_time,
        )

        client, created = await self.user_service.find_or_create_client(
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            phone=request.phone,
        )

        candidates = await self.users.find(role=Role.COUNSELOR.value, is_active=True)
        if self.prevent_double_booking and candidates:
            candidates = await self._without_conflicts(candidates, draft)

        counselor = self.strategy.select_counselor(
            candidates,
            BookingContext(
                service_type=draft.service_type,
                appointment_date=draft.appointment_date,
                start_time=draft.start_time,
                duration=draft.duration,
            ),
        )

        appointment = await self.appointments.insert(
            self._build_appointment(draft, request, client, counselor)
        )
        logger.info(
            "Appointment %s booked: %s on %s %s with counselor %s",
            appointment.id,
            draft.service_type.value,
            draft.appointment_date.isoformat(),
            appointment.time_range,
            counselor.id,
        )

        # Emails go out only for a booking that is already durable
        await self.appointments.commit()
        await self._send_booking_emails(appointment, client, counselor)
        return BookingResult(
            appointment=appointment,
            client=client,
            counselor=counselor,
            client_created=created,
        )

    def _build_appointment(
        self,
        draft: AppointmentDraft,
        request: BookingRequest,
        client: User,
        counselor: User,
    ) -> Appointment:
        recurrence = request.recurrence
        message = (request.message or "").strip()
        return Appointment(
            client_id=client.id,
            counselor_id=counselor.id,
            client=client,
            counselor=counselor,
            service_type=draft.service_type.value,
            appointment_date=draft.appointment_date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            duration=draft.duration,
            status=draft.status.value,
            session_type=draft.session_type.value,
            location=self.default_location,
            client_notes=message or None,
            is_recurring=recurrence is not None,
            recurrence_frequency=recurrence.frequency.value if recurrence else None,
            recurrence_end_date=recurrence.end_date if recurrence else None,
            recurrence_occurrences=recurrence.occurrences if recurrence else None,
            fee_amount=get_service(draft.service_type.value).standard_price,
            fee_currency="USD",
            payment_status=PaymentStatus.PENDING.value,
            reminder_sent=False,
        )

    async def _without_conflicts(
        self, candidates: Sequence[User], draft: AppointmentDraft
    ) -> List[User]:
        booked = await self._booked_around(candidates, draft.appointment_date)
        busy = {
            a.counselor_id
            for a in booked
            if spans_overlap(
                a.appointment_date, a.start_time, a.duration,
                draft.appointment_date, draft.start_time, draft.duration,
            )
        }
        if busy:
            logger.debug("Skipping %d counselor(s) already booked at %s", len(busy), draft.start_time)
        return [c for c in candidates if c.id not in busy]

    async def _booked_around(self, counselors: Sequence[User], day: date) -> List[Appointment]:
        """Non-terminal appointments of `counselors` on `day` and both neighbouring days."""
        # Sessions may run past midnight, so the neighbouring days count too
        booked: List[Appointment] = []
        for offset in (-1, 0, 1):
            booked.extend(
                await self.appointments.find(
                    counselor_ids=[c.id for c in counselors],
                    statuses=ACTIVE_STATUSES,
                    appointment_date=day + timedelta(days=offset),
                )
            )
        return booked

    async def _send_booking_emails(self, appointment: Appointment, client: User, counselor: User) -> None:
        subject_service = service_name(appointment.service_type)
        messages = []
        if client.email_notifications:
            messages.append(
                MailMessage(
                    sender=settings.mail_from,
                    to=client.email,
                    subject="Appointment Request Received - Safe Haven Restoration Ministries",
                    html=booking_confirmation_template(appointment, client, counselor),
                )
            )
        messages.append(
            MailMessage(
                sender=settings.mail_from,
                to=settings.admin_recipient,
                subject=f"New Appointment Request - {subject_service}",
                html=booking_notification_template(appointment, client, counselor),
            )
        )

        for message in messages:
            try:
                await self.mailer.send(message)
            except MailDeliveryError as e:
                # The booking is already stored; the office follows up by phone
                logger.error(
                    "Booking %s email to %s not delivered: %s",
                    appointment.id,
                    message.to,
                    e.message,
                )

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_appointments(self, actor: User, status: Optional[str] = None) -> List[Appointment]:
        criteria: Dict[str, Any] = {}
        if status:
            try:
                criteria["status"] = AppointmentStatus(status).value
            except ValueError:
                raise ValidationError(f"'{status}' is not a valid appointment status", field="status")

        if actor.role == Role.CLIENT.value:
            criteria["client_id"] = actor.id
        elif actor.role == Role.COUNSELOR.value:
            criteria["counselor_id"] = actor.id
        return await self.appointments.find(**criteria)

    async def get_appointment(self, actor: User, appointment_id: UUID) -> Appointment:
        appointment = await self.appointments.find_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment", str(appointment_id))
        self._ensure_participant(actor, appointment)
        return appointment

    async def available_slots(self, day: Any) -> List[str]:
        """
        Configured start times on `day` for which at least one active
        counselor has no overlapping non-terminal appointment.
        """
        target = parse_date(day, field="date")
        counselors = await self.users.find(role=Role.COUNSELOR.value, is_active=True)
        if not counselors:
            return []

        booked = await self._booked_around(counselors, target)
        length = self.validator.default_minutes
        slots = []
        for raw in settings.availability_slots_list:
            slot = parse_time(raw, field="availability_slots")
            busy = {
                a.counselor_id
                for a in booked
                if spans_overlap(a.appointment_date, a.start_time, a.duration, target, slot, length)
            }
            if any(c.id not in busy for c in counselors):
                slots.append(slot)
        return slots

    # ── Mutations ─────────────────────────────────────────────────────────

    async def update_status(
        self,
        actor: User,
        appointment_id: UUID,
        requested_status: str,
        cancel_reason: Optional[str] = None,
    ) -> Appointment:
        appointment = await self.get_appointment(actor, appointment_id)
        change = self.state_machine.transition(
            appointment, requested_status, actor.role, cancel_reason=cancel_reason
        )

        updated = await self.appointments.update_by_id(
            appointment_id, change.patch, expected_status=change.source.value
        )
        if updated is None:
            if await self.appointments.find_by_id(appointment_id) is None:
                raise NotFoundError("Appointment", str(appointment_id))
            logger.warning(
                "Lost status race on appointment %s (%s → %s)",
                appointment_id,
                change.source.value,
                change.target.value,
            )
            raise ConcurrentUpdateError(str(appointment_id), change.source.value)

        logger.info(
            "Appointment %s: %s → %s by %s %s",
            appointment_id,
            change.source.value,
            change.target.value,
            actor.role,
            actor.id,
        )
        return updated

    async def update_notes(self, actor: User, appointment_id: UUID, text: str) -> Appointment:
        """Writes the notes column belonging to the actor's role."""
        await self.get_appointment(actor, appointment_id)
        column, limit = NOTE_FIELDS[actor.role]
        text = (text or "").strip()
        if len(text) > limit:
            raise ValidationError(f"Notes cannot exceed {limit} characters", field="notes")

        updated = await self.appointments.update_by_id(appointment_id, {column: text or None})
        if updated is None:
            raise NotFoundError("Appointment", str(appointment_id))
        return updated

    @staticmethod
    def _ensure_participant(actor: User, appointment: Appointment) -> None:
        if actor.role == Role.ADMIN.value:
            return
        if actor.role == Role.CLIENT.value and appointment.client_id == actor.id:
            return
        if actor.role == Role.COUNSELOR.value and appointment.counselor_id == actor.id:
            return
        raise ForbiddenError(
            message="Access denied",
            context={"appointment_id": str(appointment.id)},
        )
