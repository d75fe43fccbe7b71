"""
Safe Haven Backend: Default Account Seeding
=============================================

What:  Creates the default admin and counselor accounts when no active
       account of that role exists yet. Safe to run on every deploy.
How:   `python -m safehaven.seed` (or the `safehaven-seed` console script)
       after `alembic upgrade head`.

The default passwords come from SEED_ADMIN_PASSWORD / SEED_COUNSELOR_PASSWORD
and must be changed after the first sign-in.
"""

import asyncio
import logging
import sys
from typing import List

from safehaven.config import settings
from safehaven.database import async_session_factory, dispose_engine
from safehaven.enums import Role
from safehaven.models.user import User
from safehaven.security import hash_password
from safehaven.services.repositories import UserRepository
from safehaven.services.sql_repositories import SQLUserRepository

logger = logging.getLogger(__name__)


def _default_admin() -> User:
    return User(
        first_name="SHRM",
        last_name="Administrator",
        email=settings.seed_admin_email,
        password_hash=hash_password(settings.seed_admin_password),
        role=Role.ADMIN.value,
        phone="(555) 123-4567",
        is_active=True,
        specializations=[],
    )


def _default_counselor() -> User:
    return User(
        first_name="Dr. Sarah",
        last_name="Johnson",
        email=settings.seed_counselor_email,
        password_hash=hash_password(settings.seed_counselor_password),
        role=Role.COUNSELOR.value,
        phone="(555) 123-4568",
        is_active=True,
        bio=(
            "Licensed professional counselor with 10+ years of experience "
            "in faith-based counseling."
        ),
        specializations=["Individual Counseling", "Family Therapy", "Trauma Recovery"],
        license_number="LPC",
    )


async def seed_defaults(users: UserRepository) -> List[User]:
    """Returns the accounts created on this run (empty when nothing was missing)."""
    created = []
    for role, factory in ((Role.ADMIN, _default_admin), (Role.COUNSELOR, _default_counselor)):
        if await users.find(role=role.value, is_active=True):
            logger.info("Active %s account already exists; skipping", role.value)
            continue
        user = factory()
        if await users.find_by_email(user.email) is not None:
            logger.warning(
                "Seed email %s is taken by an inactive or different account; skipping",
                user.email,
            )
            continue
        created.append(await users.insert(user))
        logger.info("Created default %s account %s", role.value, user.email)
    return created


async def _run() -> int:
    async with async_session_factory() as session:
        created = await seed_defaults(SQLUserRepository(session))
        await session.commit()
    await dispose_engine()
    if created:
        logger.warning("Default passwords are in use. Change them after the first sign-in.")
    return 0


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(_run()))


if __name__ == "__main__":
    main()
