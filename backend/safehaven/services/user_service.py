"""
Safe Haven Backend: User Service
==================================

What:  Account use cases: registration, sign-in, profile edits, activation,
       and the find-or-create step of a public booking.
Who:   /api/auth and /api/users routes, AppointmentService, the auth
       dependency.

Email handling:
    Emails are compared lowercase everywhere. A booking email that already
    belongs to a counselor or admin is rejected: staff accounts must never
    end up as the client side of an appointment.
"""

import logging
from typing import Any, Dict, Tuple
from uuid import UUID

from safehaven.enums import Role
from safehaven.exceptions import (
    AuthenticationError,
    DuplicateEmailError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from safehaven.models.user import User
from safehaven.schemas.user import ProfileUpdateRequest, RegisterRequest
from safehaven.security import (
    create_access_token,
    generate_temporary_password,
    hash_password,
    verify_password,
)
from safehaven.services.repositories import UserRepository

logger = logging.getLogger(__name__)

# Profile fields only counselors may set on themselves
_COUNSELOR_FIELDS = {"specializations", "license_number", "bio"}


class UserService:

    def __init__(self, users: UserRepository):
        self.users = users

    async def register(self, request: RegisterRequest) -> User:
        """Creates a client account. Raises DuplicateEmailError (409) for a taken email."""
        email = request.email.strip().lower()
        if await self.users.find_by_email(email) is not None:
            raise DuplicateEmailError(email)

        user = User(
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
            email=email,
            password_hash=hash_password(request.password),
            phone=request.phone,
            date_of_birth=request.date_of_birth,
            role=Role.CLIENT.value,
            is_active=True,
        )
        user = await self.users.insert(user)
        logger.info("Registered client account %s", user.id)
        return user

    async def authenticate(self, email: str, password: str) -> Tuple[User, str]:
        """
        Returns the user and a fresh access token.

        Unknown email and wrong password produce the same message so the
        endpoint cannot be used to discover which emails have accounts.
        """
        user = await self.users.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed sign-in attempt")
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("This account has been deactivated")

        token = create_access_token(str(user.id), user.role)
        return user, token

    async def get_active_user(self, user_id: str) -> User:
        try:
            uid = UUID(str(user_id))
        except ValueError:
            raise AuthenticationError("Invalid token subject")
        user = await self.users.find_by_id(uid)
        if user is None or not user.is_active:
            raise AuthenticationError("User not found or inactive")
        return user

    async def find_or_create_client(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        phone: Any = None,
    ) -> Tuple[User, bool]:
        """
        Resolves the client for a booking request.

        Returns:
            (user, created). An existing client is returned as-is; their
            stored name and phone are not overwritten by the form.

        Raises:
            ValidationError: the email belongs to a counselor or admin
        """
        normalized = email.strip().lower()
        existing = await self.users.find_by_email(normalized)
        if existing is not None:
            self._ensure_client(existing)
            return existing, False

        user = User(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=normalized,
            password_hash=hash_password(generate_temporary_password()),
            phone=phone,
            role=Role.CLIENT.value,
            is_active=True,
        )
        try:
            user = await self.users.insert(user)
        except DuplicateEmailError:
            # Another booking with the same email created the account first
            existing = await self.users.find_by_email(normalized)
            if existing is None:
                raise
            self._ensure_client(existing)
            return existing, False

        logger.info("Created client account %s from booking request", user.id)
        return user, True

    async def update_profile(self, actor: User, request: ProfileUpdateRequest) -> User:
        patch: Dict[str, Any] = request.model_dump(exclude_unset=True, exclude_none=True)
        if actor.role == Role.CLIENT.value:
            blocked = sorted(_COUNSELOR_FIELDS & patch.keys())
            if blocked:
                raise ForbiddenError(
                    message="Clients cannot set counselor profile fields",
                    context={"fields": blocked},
                )
        if "specializations" in patch:
            patch["specializations"] = [s.strip() for s in patch["specializations"] if s.strip()]
        for name in ("first_name", "last_name"):
            if name in patch:
                patch[name] = patch[name].strip()
        if not patch:
            return actor

        updated = await self.users.update_by_id(actor.id, patch)
        if updated is None:
            raise NotFoundError("User", str(actor.id))
        return updated

    async def set_active(self, actor: User, user_id: UUID, is_active: bool) -> User:
        """Admin-only soft (de)activation. Users are never deleted."""
        if actor.role != Role.ADMIN.value:
            raise ForbiddenError("Only administrators can change account status")
        if actor.id == user_id and not is_active:
            raise ValidationError(
                "Administrators cannot deactivate their own account", field="is_active"
            )

        updated = await self.users.update_by_id(user_id, {"is_active": is_active})
        if updated is None:
            raise NotFoundError("User", str(user_id))
        logger.info(
            "User %s %s by admin %s",
            user_id,
            "activated" if is_active else "deactivated",
            actor.id,
        )
        return updated

    @staticmethod
    def _ensure_client(user: User) -> None:
        if user.role != Role.CLIENT.value:
            raise ValidationError(
                "This email belongs to a staff account. Please use a different email.",
                field="email",
            )
