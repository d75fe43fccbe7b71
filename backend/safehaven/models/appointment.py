"""
Safe Haven Backend: Appointment SQLAlchemy Model
==================================================

What:  ORM model for the `appointments` table.
Who:   Written through AppointmentRepository after the scheduling validator
       (creation) or the status state machine (updates) has approved the
       change.

Column notes:
    - start_time / end_time stay "HH:MM" strings: they are wall-clock times
      on appointment_date, not instants
    - duration is written from the validator's draft, never from client input
    - notes are partitioned by author role (client / counselor / admin)
    - recurrence and fee descriptors are flattened into prefixed columns

Query Patterns (each backed by an index below):
    - client history:    WHERE client_id = :id ORDER BY appointment_date
    - counselor agenda:  WHERE counselor_id = :id AND appointment_date = :d
    - daily board:       WHERE appointment_date = :d AND status = :s
"""

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from safehaven.database import Base
from safehaven.enums import AppointmentStatus, PaymentStatus, SessionType

if TYPE_CHECKING:
    from safehaven.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Appointment(Base):
    """
    One scheduled counseling session linking a client and a counselor.

    Appointments are never deleted. Cancellation is the terminal
    `cancelled` status with an optional reason.
    """

    __tablename__ = "appointments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    counselor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)

    # Loaded explicitly with selectinload by SQLAppointmentRepository
    client: Mapped["User"] = relationship(foreign_keys=[client_id])
    counselor: Mapped["User"] = relationship(foreign_keys=[counselor_id])

    service_type: Mapped[str] = mapped_column(String(40), nullable=False)
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AppointmentStatus.SCHEDULED.value
    )
    session_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SessionType.IN_PERSON.value
    )
    location: Mapped[str] = mapped_column(String(120), nullable=False, default="SHRM Office")

    client_notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    counselor_notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cancel_reason: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    reminder_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurrence_frequency: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    recurrence_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    recurrence_occurrences: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    fee_amount: Mapped[Optional[float]] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    fee_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("ix_appointments_client_date", "client_id", "appointment_date"),
        Index("ix_appointments_counselor_date", "counselor_id", "appointment_date"),
        Index("ix_appointments_date_status", "appointment_date", "status"),
        Index("ix_appointments_status", "status"),
    )

    @property
    def time_range(self) -> str:
        return f"{self.start_time} - {self.end_time}"

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, date={self.appointment_date}, "
            f"{self.time_range}, status='{self.status}')>"
        )
