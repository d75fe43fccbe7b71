"""
Safe Haven Backend: SQLAlchemy Repositories
=============================================

What:  AsyncSession-backed implementations of UserRepository and
       AppointmentRepository.
How:   One repository instance per request, sharing the request's session
       (commit/rollback is owned by get_db_session).

Conditional updates:
    update_by_id issues a single statement

        UPDATE appointments SET ... WHERE id = :id AND status = :expected

    and reads the affected row count. Two requests racing on the same
    transition both pass validation, but the row lock makes the second
    UPDATE re-check its WHERE clause after the first commits, match zero
    rows, and come back as None. No read-modify-write window exists in
    this process.

Error translation:
    IntegrityError on users.email → DuplicateEmailError (409)
    any other SQLAlchemyError     → DatabaseError (500), original type logged
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from safehaven.exceptions import DatabaseError, DuplicateEmailError
from safehaven.models.appointment import Appointment
from safehaven.models.user import User
from safehaven.services.repositories import AppointmentRepository, UserRepository

logger = logging.getLogger(__name__)

_WITH_PARTICIPANTS = (
    selectinload(Appointment.client),
    selectinload(Appointment.counselor),
)


def _db_error(operation: str, exc: Exception, **context: Any) -> DatabaseError:
    logger.error("Database error during %s: %s", operation, str(exc), exc_info=True)
    return DatabaseError(
        context={"operation": operation, "error_type": type(exc).__name__, **context}
    )


class SQLUserRepository(UserRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(
        self,
        *,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[User]:
        query = select(User)
        if role is not None:
            query = query.where(User.role == role)
        if is_active is not None:
            query = query.where(User.is_active == is_active)
        query = query.order_by(User.created_at, User.id)
        try:
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise _db_error("find_users", e)

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        try:
            return await self.session.get(User, user_id)
        except SQLAlchemyError as e:
            raise _db_error("get_user", e, user_id=str(user_id))

    async def find_by_email(self, email: str) -> Optional[User]:
        normalized = email.strip().lower()
        try:
            result = await self.session.execute(
                select(User).where(func.lower(User.email) == normalized)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise _db_error("find_user_by_email", e)

    async def insert(self, user: User) -> User:
        user.email = user.email.strip().lower()
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateEmailError(user.email)
        except SQLAlchemyError as e:
            raise _db_error("insert_user", e)
        return user

    async def update_by_id(self, user_id: UUID, patch: Dict[str, Any]) -> Optional[User]:
        values = dict(patch, updated_at=datetime.now(timezone.utc))
        try:
            result = await self.session.execute(
                update(User).where(User.id == user_id).values(**values)
            )
            if result.rowcount == 0:
                return None
            return await self.session.get(User, user_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise _db_error("update_user", e, user_id=str(user_id))


class SQLAppointmentRepository(AppointmentRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(
        self,
        *,
        client_id: Optional[UUID] = None,
        counselor_id: Optional[UUID] = None,
        counselor_ids: Optional[Sequence[UUID]] = None,
        status: Optional[str] = None,
        statuses: Optional[Sequence[str]] = None,
        appointment_date: Optional[date] = None,
    ) -> List[Appointment]:
        query = select(Appointment).options(*_WITH_PARTICIPANTS)
        if client_id is not None:
            query = query.where(Appointment.client_id == client_id)
        if counselor_id is not None:
            query = query.where(Appointment.counselor_id == counselor_id)
        if counselor_ids is not None:
            query = query.where(Appointment.counselor_id.in_(list(counselor_ids)))
        if status is not None:
            query = query.where(Appointment.status == status)
        if statuses is not None:
            query = query.where(Appointment.status.in_(list(statuses)))
        if appointment_date is not None:
            query = query.where(Appointment.appointment_date == appointment_date)
        query = query.order_by(Appointment.appointment_date, Appointment.start_time)
        query = query.execution_options(populate_existing=True)
        try:
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise _db_error("find_appointments", e)

    async def find_by_id(self, appointment_id: UUID) -> Optional[Appointment]:
        try:
            return await self.session.get(
                Appointment, appointment_id, populate_existing=True, options=_WITH_PARTICIPANTS
            )
        except SQLAlchemyError as e:
            raise _db_error("get_appointment", e, appointment_id=str(appointment_id))

    async def insert(self, appointment: Appointment) -> Appointment:
        self.session.add(appointment)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise _db_error("insert_appointment", e)
        return appointment

    async def update_by_id(
        self,
        appointment_id: UUID,
        patch: Dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> Optional[Appointment]:
        statement = update(Appointment).where(Appointment.id == appointment_id)
        if expected_status is not None:
            statement = statement.where(Appointment.status == expected_status)
        values = dict(patch, updated_at=datetime.now(timezone.utc))
        try:
            result = await self.session.execute(statement.values(**values))
            if result.rowcount == 0:
                return None
            return await self.session.get(
                Appointment, appointment_id, populate_existing=True, options=_WITH_PARTICIPANTS
            )
        except SQLAlchemyError as e:
            raise _db_error("update_appointment", e, appointment_id=str(appointment_id))

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise _db_error("commit_appointment", e)
