"""
Safe Haven Backend: Authentication Routes
===========================================

What:  Client self-registration, sign-in (JWT), and "who am I".
       Staff accounts are created by the seed script or an admin, never here.
"""

from fastapi import APIRouter, Depends

from safehaven.dependencies import get_current_user, get_user_service
from safehaven.models.user import User
from safehaven.schemas.common import ErrorResponse
from safehaven.schemas.user import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserEnvelope,
    UserResponse,
)
from safehaven.security import create_access_token
from safehaven.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=201,
    responses={409: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Create a client account",
)
async def register(
    request: RegisterRequest,
    service: UserService = Depends(get_user_service),
) -> TokenResponse:
    user = await service.register(request)
    token = create_access_token(str(user.id), user.role)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Sign in",
)
async def login(
    request: LoginRequest,
    service: UserService = Depends(get_user_service),
) -> TokenResponse:
    user, token = await service.authenticate(request.email, request.password)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserEnvelope, responses={401: {"model": ErrorResponse}})
async def me(user: User = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=UserResponse.model_validate(user))
