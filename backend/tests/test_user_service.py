"""
Safe Haven Backend: User Service and Seeding Tests
"""

from uuid import uuid4

import pytest

from safehaven.exceptions import (
    AuthenticationError,
    DuplicateEmailError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from safehaven.schemas.user import ProfileUpdateRequest, RegisterRequest
from safehaven.security import decode_access_token, verify_password
from safehaven.seed import seed_defaults
from safehaven.services.user_service import UserService
from tests.conftest import TEST_PASSWORD
from tests.fakes import InMemoryUserRepository


class TestRegistrationAndLogin:

    @pytest.mark.asyncio
    async def test_register_stores_hash_not_password(self, user_repo):
        user = await UserService(user_repo).register(
            RegisterRequest(
                first_name="Ruth",
                last_name="Adams",
                email="Ruth@Example.org",
                password="s3cret-pass",
            )
        )
        assert user.email == "ruth@example.org"
        assert user.role == "client"
        assert user.password_hash != "s3cret-pass"
        assert verify_password("s3cret-pass", user.password_hash)

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, user_repo):
        with pytest.raises(DuplicateEmailError):
            await UserService(user_repo).register(
                RegisterRequest(
                    first_name="Jane", last_name="Again", email="JANE@example.org", password="whatever"
                )
            )

    @pytest.mark.asyncio
    async def test_authenticate_returns_token(self, user_repo, client_user):
        user, token = await UserService(user_repo).authenticate("jane@example.org", TEST_PASSWORD)

        assert user is client_user
        payload = decode_access_token(token)
        assert payload["sub"] == str(client_user.id)
        assert payload["role"] == "client"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [("jane@example.org", "wrong"), ("nobody@example.org", TEST_PASSWORD)])
    async def test_authenticate_rejects_bad_credentials(self, user_repo, email, password):
        with pytest.raises(AuthenticationError) as exc_info:
            await UserService(user_repo).authenticate(email, password)
        assert exc_info.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_inactive_user_cannot_sign_in(self, user_repo, client_user):
        client_user.is_active = False
        with pytest.raises(AuthenticationError):
            await UserService(user_repo).authenticate("jane@example.org", TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_get_active_user(self, user_repo, client_user):
        service = UserService(user_repo)
        assert await service.get_active_user(str(client_user.id)) is client_user
        with pytest.raises(AuthenticationError):
            await service.get_active_user("not-a-uuid")
        client_user.is_active = False
        with pytest.raises(AuthenticationError):
            await service.get_active_user(str(client_user.id))


class TestFindOrCreateClient:

    @pytest.mark.asyncio
    async def test_race_on_insert_returns_existing(self, client_user):
        class LateInsertRepository(InMemoryUserRepository):
            """The first lookup misses; the row appears before our insert."""

            def __init__(self):
                super().__init__()
                self.lookups = 0

            async def find_by_email(self, email):
                self.lookups += 1
                if self.lookups == 1:
                    return None
                return await super().find_by_email(email)

        repo = LateInsertRepository()
        repo._store(client_user)

        user, created = await UserService(repo).find_or_create_client(
            first_name="Jane", last_name="Doe", email="jane@example.org"
        )
        assert user is client_user
        assert created is False


class TestProfileAndActivation:

    @pytest.mark.asyncio
    async def test_update_profile_writes_only_sent_fields(self, user_repo, counselor):
        updated = await UserService(user_repo).update_profile(
            counselor,
            ProfileUpdateRequest(bio="Trauma-informed care", specializations=[" Grief ", ""]),
        )
        assert updated.bio == "Trauma-informed care"
        assert updated.specializations == ["Grief"]
        assert updated.first_name == "Sarah"

    @pytest.mark.asyncio
    async def test_client_cannot_set_counselor_fields(self, user_repo, client_user):
        with pytest.raises(ForbiddenError):
            await UserService(user_repo).update_profile(
                client_user, ProfileUpdateRequest(license_number="LPC-1")
            )

    @pytest.mark.asyncio
    async def test_client_can_opt_out_of_email(self, user_repo, client_user):
        updated = await UserService(user_repo).update_profile(
            client_user, ProfileUpdateRequest(email_notifications=False)
        )
        assert updated.email_notifications is False

    @pytest.mark.asyncio
    async def test_admin_deactivates_counselor(self, user_repo, admin, counselor):
        updated = await UserService(user_repo).set_active(admin, counselor.id, False)
        assert updated.is_active is False

    @pytest.mark.asyncio
    async def test_non_admin_cannot_deactivate(self, user_repo, counselor, client_user):
        with pytest.raises(ForbiddenError):
            await UserService(user_repo).set_active(counselor, client_user.id, False)

    @pytest.mark.asyncio
    async def test_admin_cannot_deactivate_self(self, user_repo, admin):
        with pytest.raises(ValidationError):
            await UserService(user_repo).set_active(admin, admin.id, False)

    @pytest.mark.asyncio
    async def test_unknown_user(self, user_repo, admin):
        with pytest.raises(NotFoundError):
            await UserService(user_repo).set_active(admin, uuid4(), True)


class TestSeedDefaults:

    @pytest.mark.asyncio
    async def test_creates_admin_and_counselor_once(self):
        repo = InMemoryUserRepository()

        created = await seed_defaults(repo)
        assert sorted(u.role for u in created) == ["admin", "counselor"]

        assert await seed_defaults(repo) == []
        assert len(repo.rows) == 2

    @pytest.mark.asyncio
    async def test_skips_roles_already_present(self, user_repo):
        assert await seed_defaults(user_repo) == []
