"""
Safe Haven Backend: Appointment Status State Machine
======================================================

What:  Decides whether an appointment may move from its current status to a
       requested one, and for whom.
How:   Two explicit tables: ALLOWED_TRANSITIONS (what the lifecycle permits)
       and ROLE_PERMISSIONS (which targets each role may request).
Who:   AppointmentService.update_status, which persists the returned change
       with one conditional update keyed on the current status.

Lifecycle (forward only; staff may skip intermediate steps):

    scheduled ──▶ confirmed ──▶ in-progress ──▶ completed
        │             │              │
        ├─────────────┴──▶ cancelled │
        └─────────────┴──────────────┴──▶ no-show

    scheduled may also jump to in-progress or completed, and confirmed to
    completed. completed, cancelled and no-show are terminal.

Check order matters: an illegal pair is reported as IllegalTransitionError
for every role, and only a legal pair can be rejected as ForbiddenError.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from safehaven.enums import AppointmentStatus, Role
from safehaven.exceptions import (
    ForbiddenError,
    IllegalTransitionError,
    InvalidCancelReasonError,
)

MAX_CANCEL_REASON_LENGTH = 200

S = AppointmentStatus

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    S.SCHEDULED: frozenset({S.CONFIRMED, S.IN_PROGRESS, S.COMPLETED, S.CANCELLED, S.NO_SHOW}),
    S.CONFIRMED: frozenset({S.IN_PROGRESS, S.COMPLETED, S.CANCELLED, S.NO_SHOW}),
    S.IN_PROGRESS: frozenset({S.COMPLETED, S.NO_SHOW}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.NO_SHOW: frozenset(),
}

# Targets each role may request; the source must still be legal above.
ROLE_PERMISSIONS: Dict[Role, FrozenSet[AppointmentStatus]] = {
    Role.CLIENT: frozenset({S.CANCELLED}),
    Role.COUNSELOR: frozenset({S.CONFIRMED, S.IN_PROGRESS, S.COMPLETED, S.CANCELLED, S.NO_SHOW}),
    Role.ADMIN: frozenset({S.CONFIRMED, S.IN_PROGRESS, S.COMPLETED, S.CANCELLED, S.NO_SHOW}),
}


@dataclass(frozen=True)
class StatusChange:
    """An approved transition and the patch that records it."""

    source: AppointmentStatus
    target: AppointmentStatus
    patch: Dict[str, Any] = field(default_factory=dict)


class StatusStateMachine:
    """Stateless; one shared instance is enough."""

    def __init__(
        self,
        transitions: Optional[Dict[AppointmentStatus, FrozenSet[AppointmentStatus]]] = None,
        permissions: Optional[Dict[Role, FrozenSet[AppointmentStatus]]] = None,
    ):
        self.transitions = transitions or ALLOWED_TRANSITIONS
        self.permissions = permissions or ROLE_PERMISSIONS

    def is_allowed(self, source: AppointmentStatus, target: AppointmentStatus) -> bool:
        return target in self.transitions.get(source, frozenset())

    def transition(
        self,
        appointment: Any,
        requested_status: Any,
        actor_role: Any,
        cancel_reason: Optional[str] = None,
    ) -> StatusChange:
        """
        Approves or rejects moving `appointment` to `requested_status`.

        Args:
            appointment:      anything with a `status` attribute (ORM row or fake)
            requested_status: AppointmentStatus or its string value
            actor_role:       Role or its string value
            cancel_reason:    optional, only recorded for `cancelled`

        Returns:
            StatusChange whose patch holds `status` and, when given for a
            cancellation, `cancel_reason`.

        Raises:
            IllegalTransitionError: unknown status, terminal source, or pair not in the table
            ForbiddenError:         unknown role, or role may not request this target
            InvalidCancelReasonError: reason longer than 200 characters
        """
        current_raw = getattr(appointment, "status")
        try:
            source = AppointmentStatus(current_raw)
            target = AppointmentStatus(requested_status)
        except ValueError:
            raise IllegalTransitionError(str(current_raw), str(requested_status))

        if not self.is_allowed(source, target):
            raise IllegalTransitionError(source.value, target.value)

        try:
            role = Role(actor_role)
        except ValueError:
            raise ForbiddenError(
                message="Unknown role cannot change appointment status",
                context={"role": str(actor_role), "requested_status": target.value},
            )
        if target not in self.permissions.get(role, frozenset()):
            raise ForbiddenError(
                message=f"A {role.value} cannot change an appointment to '{target.value}'",
                context={"role": role.value, "requested_status": target.value},
            )

        patch: Dict[str, Any] = {"status": target.value}
        if target is AppointmentStatus.CANCELLED and cancel_reason:
            reason = cancel_reason.strip()
            if len(reason) > MAX_CANCEL_REASON_LENGTH:
                raise InvalidCancelReasonError(len(reason), MAX_CANCEL_REASON_LENGTH)
            if reason:
                patch["cancel_reason"] = reason

        return StatusChange(source=source, target=target, patch=patch)


status_machine = StatusStateMachine()
