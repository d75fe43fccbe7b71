"""
Safe Haven Backend: Scheduling Validator
==========================================

What:  Turns a candidate booking into a normalized, storable AppointmentDraft
       or raises a ValidationError subclass naming the offending field.
Why:   Time-range and duration rules used to live in an ORM save hook that
       both validated and mutated. Here they are a pure function of the input,
       followed by an explicit repository insert.
Who:   AppointmentService.create_appointment, before any persistence call.

Rules:
    - service_type must be one of the 8 ServiceType values
    - appointment_date must be a real calendar date (past dates are allowed)
    - times are "H:MM" or "HH:MM", 24-hour, normalized to "HH:MM"
    - session_type must be valid AND offered for the chosen service
    - no end time → end = start + default duration, wrapping past midnight
      (23:30 → 00:30, duration 60, same appointment_date)
    - explicit end time must be strictly after start on the same day and
      give a duration inside [min, max] minutes
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from safehaven.config import settings
from safehaven.enums import AppointmentStatus, ServiceType, SessionType
from safehaven.exceptions import (
    EndBeforeOrEqualStartError,
    InvalidDateError,
    InvalidDurationError,
    InvalidServiceTypeError,
    InvalidSessionTypeError,
    InvalidTimeFormatError,
)
from safehaven.services.catalog import get_service

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


@dataclass(frozen=True)
class AppointmentDraft:
    """Validated appointment fields, ready to be combined with client/counselor ids."""

    service_type: ServiceType
    appointment_date: date
    start_time: str
    end_time: str
    duration: int
    session_type: SessionType
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    end_synthesized: bool = False


# ── Time helpers ──────────────────────────────────────────────────────────

def parse_time(value: Any, field: str = "start_time") -> str:
    """Validates an "H:MM"/"HH:MM" string and returns it zero-padded."""
    if not isinstance(value, str):
        raise InvalidTimeFormatError(value, field=field)
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeFormatError(value, field=field)
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    total %= MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def _overlaps(a_start: int, duration_a: int, b_start: int, duration_b: int) -> bool:
    return a_start < b_start + duration_b and b_start < a_start + duration_a


def ranges_overlap(start_a: str, duration_a: int, start_b: str, duration_b: int) -> bool:
    """
    Half-open interval overlap on the minute axis.

    Intervals are [start, start + duration), so back-to-back sessions
    (10:00-11:00 and 11:00-12:00) do not overlap. Using the stored duration
    instead of end_time keeps wrapped sessions (23:30 → 00:30) comparable.
    """
    return _overlaps(to_minutes(start_a), duration_a, to_minutes(start_b), duration_b)


def spans_overlap(
    day_a: date,
    start_a: str,
    duration_a: int,
    day_b: date,
    start_b: str,
    duration_b: int,
) -> bool:
    """
    ranges_overlap across calendar days.

    Session A is placed on B's minute axis by its day offset, so a 23:30
    session of 60 minutes on Monday covers [-30, 30) of Tuesday and
    collides with a Tuesday 00:00 booking.
    """
    offset = (day_a - day_b).days * MINUTES_PER_DAY
    return _overlaps(offset + to_minutes(start_a), duration_a, to_minutes(start_b), duration_b)


def parse_date(value: Any, field: str = "appointment_date") -> date:
    # datetime is a date subclass, so it has to be checked first
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(value, field=field)
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidDateError(value, field=field)


# ── Validator ─────────────────────────────────────────────────────────────

class SchedulingValidator:
    """
    Pure validator for new bookings. Holds only the duration policy.

    Example:
        >>> SchedulingValidator().validate(
        ...     service_type="individual-counseling",
        ...     appointment_date="2025-03-10",
        ...     start_time="09:00",
        ...     session_type="in-person",
        ... ).end_time
        '10:00'
    """

    def __init__(
        self,
        default_minutes: int = 60,
        min_minutes: int = 30,
        max_minutes: int = 180,
    ):
        self.default_minutes = default_minutes
        self.min_minutes = min_minutes
        self.max_minutes = max_minutes

    @classmethod
    def from_settings(cls) -> "SchedulingValidator":
        return cls(
            default_minutes=settings.default_session_minutes,
            min_minutes=settings.min_session_minutes,
            max_minutes=settings.max_session_minutes,
        )

    def validate(
        self,
        *,
        service_type: Any,
        appointment_date: Any,
        start_time: Any,
        session_type: Any,
        end_time: Optional[Any] = None,
    ) -> AppointmentDraft:
        service = self._parse_service_type(service_type)
        day = parse_date(appointment_date)
        start = parse_time(start_time, field="start_time")
        session = self._parse_session_type(session_type, service)

        if end_time is None or (isinstance(end_time, str) and not end_time.strip()):
            end = from_minutes(to_minutes(start) + self.default_minutes)
            duration = self.default_minutes
            synthesized = True
        else:
            end = parse_time(end_time, field="end_time")
            if to_minutes(end) <= to_minutes(start):
                raise EndBeforeOrEqualStartError(start, end)
            duration = to_minutes(end) - to_minutes(start)
            synthesized = False

        if not self.min_minutes <= duration <= self.max_minutes:
            raise InvalidDurationError(duration, self.min_minutes, self.max_minutes)

        return AppointmentDraft(
            service_type=service,
            appointment_date=day,
            start_time=start,
            end_time=end,
            duration=duration,
            session_type=session,
            end_synthesized=synthesized,
        )

    @staticmethod
    def _parse_service_type(value: Any) -> ServiceType:
        try:
            return ServiceType(value)
        except ValueError:
            raise InvalidServiceTypeError(value)

    @staticmethod
    def _parse_session_type(value: Any, service: ServiceType) -> SessionType:
        try:
            session = SessionType(value)
        except ValueError:
            raise InvalidSessionTypeError(value)
        catalog_entry = get_service(service.value)
        if not catalog_entry.allows(session):
            offered = ", ".join(s.value for s in catalog_entry.session_types)
            raise InvalidSessionTypeError(
                value,
                reason=f"{catalog_entry.name} is offered as: {offered}",
            )
        return session
