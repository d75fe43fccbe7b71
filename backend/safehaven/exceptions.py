"""
Safe Haven Backend: Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every failure the API can report.
How:   Each exception carries a user-safe message and a context dict.
       Global handlers (registered in main.py) map them to HTTP responses.
Who:   Raised by services, repositories and auth dependencies.

Exception Hierarchy:
    SafeHavenError (base)
    ├── ValidationError               → 400 (field-level detail)
    │   ├── InvalidServiceTypeError
    │   ├── InvalidTimeFormatError
    │   ├── EndBeforeOrEqualStartError
    │   ├── InvalidDurationError
    │   ├── InvalidSessionTypeError
    │   ├── InvalidDateError
    │   └── InvalidCancelReasonError
    ├── NoCounselorAvailableError     → 400 (non-retryable booking rejection)
    ├── AuthenticationError           → 401
    ├── ForbiddenError                → 403
    ├── NotFoundError                 → 404
    ├── ConflictError                 → 409
    │   ├── IllegalTransitionError
    │   ├── ConcurrentUpdateError
    │   └── DuplicateEmailError
    ├── DependencyError               → collaborator unavailable
    │   ├── DatabaseError             → 500 (fatal to the request)
    │   └── MailDeliveryError         → 502 (swallowed by booking/contact flows)
    └── RateLimitExceededError        → 429
"""

from typing import Any, Dict, Optional


class SafeHavenError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


# ── Validation ────────────────────────────────────────────────────────────

class ValidationError(SafeHavenError):
    """
    Raised when client input fails a business rule.

    HTTP: 400 Bad Request. `field` names the offending input so the booking
    form can highlight it.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidServiceTypeError(ValidationError):
    def __init__(self, value: Any, field: str = "service_type"):
        super().__init__(
            message=f"'{value}' is not a recognized service type",
            field=field,
            context={"value": value},
        )


class InvalidTimeFormatError(ValidationError):
    def __init__(self, value: Any, field: str = "start_time"):
        super().__init__(
            message=f"'{value}' is not a valid time. Please use HH:MM (24-hour) format",
            field=field,
            context={"value": value},
        )


class EndBeforeOrEqualStartError(ValidationError):
    def __init__(self, start_time: str, end_time: str, field: str = "end_time"):
        super().__init__(
            message="End time must be after start time",
            field=field,
            context={"start_time": start_time, "end_time": end_time},
        )


class InvalidDurationError(ValidationError):
    def __init__(self, duration: int, minimum: int, maximum: int, field: str = "end_time"):
        super().__init__(
            message=(
                f"Session duration of {duration} minutes is outside the allowed "
                f"range of {minimum}-{maximum} minutes"
            ),
            field=field,
            context={"duration": duration, "min": minimum, "max": maximum},
        )


class InvalidSessionTypeError(ValidationError):
    def __init__(self, value: Any, field: str = "session_type", reason: Optional[str] = None):
        super().__init__(
            message=reason or f"'{value}' is not a valid session type",
            field=field,
            context={"value": value},
        )


class InvalidDateError(ValidationError):
    def __init__(self, value: Any, field: str = "appointment_date"):
        super().__init__(
            message=f"'{value}' is not a valid calendar date",
            field=field,
            context={"value": value},
        )


class InvalidCancelReasonError(ValidationError):
    def __init__(self, length: int, maximum: int, field: str = "cancel_reason"):
        super().__init__(
            message=f"Cancel reason cannot exceed {maximum} characters",
            field=field,
            context={"length": length, "max": maximum},
        )


class NoCounselorAvailableError(SafeHavenError):
    """
    Raised when the candidate pool for a booking is empty.

    HTTP: 400. This is a business outcome, not an outage, so the client is
    told to call the office rather than retry.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="No counselors available at this time. Please call us directly.",
            context=context,
        )


# ── Access ────────────────────────────────────────────────────────────────

class AuthenticationError(SafeHavenError):
    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(SafeHavenError):
    """Raised when the caller's role or ownership does not allow the action. HTTP 403."""

    def __init__(
        self,
        message: str = "Access denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SafeHavenError):
    """
    Raised when a requested resource does not exist.

    Repositories return None for missing rows; services convert that into
    NotFoundError so handlers can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


# ── Conflicts ─────────────────────────────────────────────────────────────

class ConflictError(SafeHavenError):
    """HTTP 409. The request is well-formed but clashes with current state."""

    def __init__(
        self,
        message: str = "The request conflicts with the current state of the resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IllegalTransitionError(ConflictError):
    def __init__(self, current: str, requested: str):
        super().__init__(
            message=f"Cannot change appointment status from '{current}' to '{requested}'",
            context={"current_status": current, "requested_status": requested},
        )
        self.current = current
        self.requested = requested


class ConcurrentUpdateError(ConflictError):
    def __init__(self, resource_id: str, expected_status: str):
        super().__init__(
            message="The appointment was modified by another request. Reload and try again.",
            context={"resource_id": resource_id, "expected_status": expected_status},
        )


class DuplicateEmailError(ConflictError):
    def __init__(self, email: str):
        super().__init__(
            message="An account with this email already exists",
            context={"field": "email"},
        )
        self.email = email


# ── Collaborators ─────────────────────────────────────────────────────────

class DependencyError(SafeHavenError):
    """Base for failures of an external collaborator (database, SMTP relay)."""


class DatabaseError(DependencyError):
    """
    Raised when a repository operation fails unexpectedly.

    The message returned to the client is always generic; the original
    exception type is kept in the context for the server log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MailDeliveryError(DependencyError):
    def __init__(
        self,
        message: str = "Email delivery failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(SafeHavenError):
    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
