"""
Safe Haven Backend: Service Catalog Routes
============================================

What:  Public read-only catalog plus per-day slot availability.
"""

from fastapi import APIRouter, Depends

from safehaven.dependencies import get_appointment_service
from safehaven.schemas.common import ErrorResponse
from safehaven.schemas.service import (
    AvailabilityResponse,
    ServiceEnvelope,
    ServiceListResponse,
    ServiceResponse,
)
from safehaven.services.appointment_service import AppointmentService
from safehaven.services.catalog import CatalogService, get_service, list_services

router = APIRouter(prefix="/api/services", tags=["Services"])


def _to_response(entry: CatalogService) -> ServiceResponse:
    return ServiceResponse(
        id=entry.id.value,
        name=entry.name,
        description=entry.description,
        duration=entry.duration,
        standard_price=entry.standard_price,
        sliding_scale=entry.sliding_scale,
        insurance_accepted=entry.insurance_accepted,
        availability=entry.availability,
        session_types=[s.value for s in entry.session_types],
        specialties=list(entry.specialties),
    )


@router.get("", response_model=ServiceListResponse, summary="List counseling services")
async def get_services() -> ServiceListResponse:
    return ServiceListResponse(services=[_to_response(s) for s in list_services()])


# Declared before /{service_id} so "availability" is not read as an id
@router.get(
    "/availability/{day}",
    response_model=AvailabilityResponse,
    responses={400: {"description": "Invalid date", "model": ErrorResponse}},
    summary="Open start times for a day",
)
async def get_availability(
    day: str,
    service: AppointmentService = Depends(get_appointment_service),
) -> AvailabilityResponse:
    slots = await service.available_slots(day)
    return AvailabilityResponse(date=day, available_slots=slots)


@router.get(
    "/{service_id}",
    response_model=ServiceEnvelope,
    responses={404: {"model": ErrorResponse}},
    summary="Get one service",
)
async def get_service_detail(service_id: str) -> ServiceEnvelope:
    return ServiceEnvelope(service=_to_response(get_service(service_id)))
