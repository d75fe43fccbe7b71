"""
Safe Haven Backend: Contact Form Route
"""

from fastapi import APIRouter, Depends

from safehaven.dependencies import get_contact_service
from safehaven.schemas.contact import ContactRequest, ContactResponse
from safehaven.services.contact_service import ContactService

router = APIRouter(prefix="/api/contact", tags=["Contact"])


@router.post("", response_model=ContactResponse, summary="Send a message to the office")
async def submit_contact_form(
    request: ContactRequest,
    service: ContactService = Depends(get_contact_service),
) -> ContactResponse:
    # Delivery problems are logged by the service; the visitor always gets the same answer
    await service.submit(request)
    return ContactResponse()
