"""
Safe Haven Backend: Domain Enumerations
=========================================

Closed value sets shared by models, schemas and services. All are `str`
enums so they compare equal to the raw strings stored in the database and
sent over the wire.
"""

from enum import Enum


class Role(str, Enum):
    CLIENT = "client"
    COUNSELOR = "counselor"
    ADMIN = "admin"


class ServiceType(str, Enum):
    INDIVIDUAL_COUNSELING = "individual-counseling"
    COUPLES_COUNSELING = "couples-counseling"
    FAMILY_COUNSELING = "family-counseling"
    GROUP_THERAPY = "group-therapy"
    CRISIS_INTERVENTION = "crisis-intervention"
    ADDICTION_COUNSELING = "addiction-counseling"
    GRIEF_COUNSELING = "grief-counseling"
    YOUTH_COUNSELING = "youth-counseling"


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
)


class SessionType(str, Enum):
    IN_PERSON = "in-person"
    VIDEO_CALL = "video-call"
    PHONE_CALL = "phone-call"


class RecurrenceFrequency(str, Enum):
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    WAIVED = "waived"
    PARTIAL = "partial"


class ContactSubject(str, Enum):
    APPOINTMENT = "appointment"
    SERVICES = "services"
    INSURANCE = "insurance"
    CRISIS = "crisis"
    FEEDBACK = "feedback"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CONTACT_SUBJECT_LABELS[self]


CONTACT_SUBJECT_LABELS = {
    ContactSubject.APPOINTMENT: "Appointment Inquiry",
    ContactSubject.SERVICES: "Services Information",
    ContactSubject.INSURANCE: "Insurance Questions",
    ContactSubject.CRISIS: "Crisis Support",
    ContactSubject.FEEDBACK: "Feedback",
    ContactSubject.OTHER: "General Inquiry",
}
