"""
Safe Haven Backend: Repository Interfaces
===========================================

What:  Abstract persistence contracts the services depend on.
Why:   Services receive a repository handle instead of reaching for a
       process-wide connection, so every use case can be exercised against
       an in-memory fake with the same interface.
How:   SQLAlchemy implementations live in sql_repositories.py.

Contract shared by both repositories:
    find(**criteria)       → list of entities (empty list, never None)
    find_by_id(id)         → entity or None
    insert(entity)         → the entity with its id assigned
    update_by_id(id, patch, expected_status=None)
                           → updated entity, or None when the id is unknown
                             or the precondition no longer holds

At most one writer wins per document: an update with `expected_status`
only applies if the stored status still equals it at write time.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from safehaven.models.appointment import Appointment
from safehaven.models.user import User


class UserRepository(ABC):

    @abstractmethod
    async def find(
        self,
        *,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[User]:
        """Users matching every given criterion, oldest first."""
        ...

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""
        ...

    @abstractmethod
    async def insert(self, user: User) -> User:
        """Raises DuplicateEmailError when the email is already taken."""
        ...

    @abstractmethod
    async def update_by_id(self, user_id: UUID, patch: Dict[str, Any]) -> Optional[User]:
        ...


class AppointmentRepository(ABC):

    @abstractmethod
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
        """Appointments matching every given criterion, ordered by date then start time."""
        ...

    @abstractmethod
    async def find_by_id(self, appointment_id: UUID) -> Optional[Appointment]:
        ...

    @abstractmethod
    async def insert(self, appointment: Appointment) -> Appointment:
        ...

    @abstractmethod
    async def update_by_id(
        self,
        appointment_id: UUID,
        patch: Dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> Optional[Appointment]:
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Makes pending writes durable before side effects such as email."""
        ...
