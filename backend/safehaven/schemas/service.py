"""
Safe Haven Backend: Service Catalog Schemas
"""

from typing import List

from pydantic import BaseModel, Field


class ServiceResponse(BaseModel):
    id: str
    name: str
    description: str
    duration: int = Field(description="Typical session length in minutes")
    standard_price: float
    sliding_scale: bool
    insurance_accepted: bool
    availability: str
    session_types: List[str]
    specialties: List[str]


class ServiceListResponse(BaseModel):
    success: bool = True
    services: List[ServiceResponse]


class ServiceEnvelope(BaseModel):
    success: bool = True
    service: ServiceResponse


class AvailabilityResponse(BaseModel):
    success: bool = True
    date: str
    available_slots: List[str]
