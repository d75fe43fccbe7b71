"""
Safe Haven Backend: Appointment Request/Response Schemas
==========================================================

What:  Pydantic models for the /api/appointments contract.
Who:   Route handlers (request bodies, response_model) and AppointmentService
       (BookingRequest is its input).

Validation split:
    Schemas check shape (lengths, email syntax, phone characters). Service
    type, date, times and session type stay plain strings here and are
    checked by the scheduling validator, so a bad value comes back as a
    400 naming the field rather than a generic 422.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from safehaven.enums import AppointmentStatus, RecurrenceFrequency

PHONE_PATTERN = r"^\+?[0-9()\-.\s]{7,20}$"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RecurrenceRequest(BaseModel):
    """Optional repeat descriptor. Stored on the appointment; no series is generated."""

    frequency: RecurrenceFrequency
    end_date: Optional[date] = None
    occurrences: Optional[int] = Field(default=None, ge=1, le=52)


class BookingRequest(BaseModel):
    """
    Public booking form. Submitted without authentication; the client
    account is looked up (or created) from `email`.
    """

    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    service_type: str = Field(description="One of the catalog service ids")
    preferred_date: str = Field(description="ISO-8601 date, e.g. 2025-03-10")
    preferred_time: str = Field(description="Start time, HH:MM 24-hour")
    end_time: Optional[str] = Field(
        default=None,
        description="Optional end time; defaults to start + 60 minutes",
    )
    session_type: str = Field(default="in-person")
    message: Optional[str] = Field(default=None, max_length=500)
    recurrence: Optional[RecurrenceRequest] = None


class StatusUpdateRequest(BaseModel):
    status: str = Field(description="Requested target status")
    # Body-size guard only; the 200-character rule is enforced on the
    # stripped text by the status state machine (400 with a field name)
    cancel_reason: Optional[str] = Field(default=None, max_length=2000)


class NotesUpdateRequest(BaseModel):
    # Per-role limits (500 or 1000) are enforced by AppointmentService
    notes: str = Field(max_length=5000)

    @model_validator(mode="after")
    def strip_notes(self) -> "NotesUpdateRequest":
        self.notes = self.notes.strip()
        return self


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ParticipantSummary(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str

    model_config = {"from_attributes": True}


class ClientSummary(ParticipantSummary):
    phone: Optional[str] = None


class CounselorSummary(ParticipantSummary):
    specializations: List[str] = Field(default_factory=list)


class AppointmentResponse(BaseModel):
    """
    Full appointment as seen by a participant.

    `admin_notes` is blanked for clients by the route before serialization.
    `client` and `counselor` are present when the repository loaded them.
    """

    id: uuid.UUID
    client_id: uuid.UUID
    counselor_id: uuid.UUID
    client: Optional[ClientSummary] = None
    counselor: Optional[CounselorSummary] = None
    service_type: str
    appointment_date: date
    start_time: str
    end_time: str
    duration: int
    status: AppointmentStatus
    session_type: str
    location: str
    client_notes: Optional[str] = None
    counselor_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    cancel_reason: Optional[str] = None
    is_recurring: bool = False
    recurrence_frequency: Optional[str] = None
    recurrence_end_date: Optional[date] = None
    recurrence_occurrences: Optional[int] = None
    fee_amount: Optional[float] = None
    fee_currency: str = "USD"
    payment_status: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    success: bool = True
    message: str = Field(
        default=(
            "Appointment request submitted successfully. "
            "We will contact you within 24 hours to confirm."
        )
    )
    appointment: AppointmentResponse
    counselor: CounselorSummary


class AppointmentListResponse(BaseModel):
    success: bool = True
    appointments: List[AppointmentResponse]
    total: int


class AppointmentEnvelope(BaseModel):
    success: bool = True
    appointment: AppointmentResponse
