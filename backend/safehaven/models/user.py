"""
Safe Haven Backend: User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table. One table holds every actor:
       clients, counselors and admins, told apart by `role`.
Who:   Read and written through UserRepository; never serialized directly
       (response schemas leave out `password_hash`).

Table Design Rationale:
    - email is stored lowercase and carries a unique index, which makes the
      case-insensitive uniqueness rule a database guarantee
    - users are never hard-deleted; `is_active` is the soft-deactivation flag
    - specializations is a JSON list so counselors can carry free-form tags
      without a join table
"""

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, Date, DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from safehaven.database import Base
from safehaven.enums import Role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Any system actor.

    Lifecycle:
        1. Created by explicit registration, by the seed script, or on the
           first booking request from an unknown email (role = client)
        2. Mutated by profile updates
        3. Deactivated (is_active = False) instead of deleted
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.CLIENT.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    bio: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    specializations: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    license_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    email_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("ix_users_email", "email", unique=True),
        Index("ix_users_role", "role"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role='{self.role}', active={self.is_active})>"
