"""
Safe Haven Backend: FastAPI Dependencies
==========================================

What:  Wires repositories, the mailer, the assignment strategy and the
       services into route handlers, and resolves the signed-in user.
How:   Every factory is a plain FastAPI dependency, so tests replace any of
       them through `app.dependency_overrides` (see tests/conftest.py).

Dependency graph per request:

    get_db_session ─┬─▶ get_user_repository ─────────┬─▶ get_user_service
                    └─▶ get_appointment_repository ──┤
    get_mail_service ────────────────────────────────┼─▶ get_appointment_service
    get_counselor_strategy ──────────────────────────┘
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from safehaven.config import settings
from safehaven.database import get_db_session
from safehaven.enums import Role
from safehaven.exceptions import AuthenticationError, ForbiddenError
from safehaven.models.user import User
from safehaven.security import decode_access_token
from safehaven.services.appointment_service import AppointmentService
from safehaven.services.assignment import CounselorAssignmentStrategy, get_assignment_strategy
from safehaven.services.contact_service import ContactService
from safehaven.services.mail_service import MailService, mail_service
from safehaven.services.repositories import AppointmentRepository, UserRepository
from safehaven.services.sql_repositories import SQLAppointmentRepository, SQLUserRepository
from safehaven.services.user_service import UserService

# auto_error=False: a missing header becomes our AuthenticationError (401), not a 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_user_repository(db: AsyncSession = Depends(get_db_session)) -> UserRepository:
    return SQLUserRepository(db)


def get_appointment_repository(db: AsyncSession = Depends(get_db_session)) -> AppointmentRepository:
    return SQLAppointmentRepository(db)


def get_mail_service() -> MailService:
    return mail_service


def get_counselor_strategy() -> CounselorAssignmentStrategy:
    return get_assignment_strategy(settings.counselor_assignment_strategy)


def get_user_service(users: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserService(users)


def get_appointment_service(
    users: UserRepository = Depends(get_user_repository),
    appointments: AppointmentRepository = Depends(get_appointment_repository),
    mailer: MailService = Depends(get_mail_service),
    strategy: CounselorAssignmentStrategy = Depends(get_counselor_strategy),
) -> AppointmentService:
    return AppointmentService(users, appointments, mailer, strategy)


def get_contact_service(mailer: MailService = Depends(get_mail_service)) -> ContactService:
    return ContactService(mailer)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Resolves `Authorization: Bearer <jwt>` to an existing, active user."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    payload = decode_access_token(credentials.credentials)
    return await user_service.get_active_user(payload["sub"])


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != Role.ADMIN.value:
        raise ForbiddenError("Administrator access required")
    return user
