"""
Safe Haven Backend: User Routes
=================================

What:  Profile updates for the signed-in user and admin soft-(de)activation.
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from safehaven.dependencies import get_current_user, get_user_service, require_admin
from safehaven.models.user import User
from safehaven.schemas.common import ErrorResponse
from safehaven.schemas.user import (
    ActivationRequest,
    ProfileUpdateRequest,
    UserEnvelope,
    UserResponse,
)
from safehaven.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.put(
    "/me",
    response_model=UserEnvelope,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="Update own profile",
)
async def update_profile(
    request: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserEnvelope:
    updated = await service.update_profile(user, request)
    return UserEnvelope(user=UserResponse.model_validate(updated))


@router.put(
    "/{user_id}/active",
    response_model=UserEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Activate or deactivate an account",
)
async def set_active(
    user_id: UUID,
    request: ActivationRequest,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserEnvelope:
    updated = await service.set_active(admin, user_id, request.is_active)
    return UserEnvelope(user=UserResponse.model_validate(updated))
