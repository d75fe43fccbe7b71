"""
Safe Haven Backend: Appointment Route Handlers
================================================

What:  POST /api/appointments (public booking) plus the authenticated
       list/detail/status/notes endpoints.
How:   Thin handlers: unpack the request, call AppointmentService, shape
       the response. Every rule lives in the service layer.

Visibility:
    admin_notes are internal to the office and are blanked when the caller
    is a client.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from safehaven.dependencies import get_appointment_service, get_current_user
from safehaven.enums import Role
from safehaven.models.appointment import Appointment
from safehaven.models.user import User
from safehaven.schemas.appointment import (
    AppointmentEnvelope,
    AppointmentListResponse,
    AppointmentResponse,
    BookingRequest,
    BookingResponse,
    CounselorSummary,
    NotesUpdateRequest,
    StatusUpdateRequest,
)
from safehaven.schemas.common import ErrorResponse
from safehaven.services.appointment_service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def _to_response(appointment: Appointment, viewer_role: Optional[str] = None) -> AppointmentResponse:
    response = AppointmentResponse.model_validate(appointment)
    if viewer_role == Role.CLIENT.value:
        response.admin_notes = None
    return response


@router.post(
    "",
    response_model=BookingResponse,
    status_code=201,
    responses={
        400: {"description": "Invalid booking or no counselor available", "model": ErrorResponse},
        422: {"description": "Malformed request body"},
    },
    summary="Request an appointment",
)
async def create_appointment(
    request: BookingRequest,
    service: AppointmentService = Depends(get_appointment_service),
) -> BookingResponse:
    result = await service.create_appointment(request)
    return BookingResponse(
        appointment=_to_response(result.appointment, Role.CLIENT.value),
        counselor=CounselorSummary.model_validate(result.counselor),
    )


@router.get(
    "",
    response_model=AppointmentListResponse,
    responses={401: {"model": ErrorResponse}},
    summary="List the caller's appointments",
    description=(
        "Clients see their own appointments, counselors those assigned to them, "
        "admins all of them. Ordered by date, then start time."
    ),
)
async def list_appointments(
    status: Optional[str] = Query(default=None, description="Filter by status"),
    user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentListResponse:
    appointments = await service.list_appointments(user, status=status)
    return AppointmentListResponse(
        appointments=[_to_response(a, user.role) for a in appointments],
        total=len(appointments),
    )


@router.get(
    "/{appointment_id}",
    response_model=AppointmentEnvelope,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Get one appointment",
)
async def get_appointment(
    appointment_id: UUID,
    user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentEnvelope:
    appointment = await service.get_appointment(user, appointment_id)
    return AppointmentEnvelope(appointment=_to_response(appointment, user.role))


@router.put(
    "/{appointment_id}/status",
    response_model=AppointmentEnvelope,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"description": "Illegal transition or concurrent update", "model": ErrorResponse},
    },
    summary="Change appointment status",
)
async def update_status(
    appointment_id: UUID,
    body: StatusUpdateRequest,
    user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentEnvelope:
    appointment = await service.update_status(
        user, appointment_id, body.status, cancel_reason=body.cancel_reason
    )
    return AppointmentEnvelope(appointment=_to_response(appointment, user.role))


@router.put(
    "/{appointment_id}/notes",
    response_model=AppointmentEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Write the caller's notes on an appointment",
)
async def update_notes(
    appointment_id: UUID,
    body: NotesUpdateRequest,
    user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentEnvelope:
    appointment = await service.update_notes(user, appointment_id, body.notes)
    return AppointmentEnvelope(appointment=_to_response(appointment, user.role))
