"""
Safe Haven Backend: Password Hashing and Token Tests
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from safehaven.config import settings
from safehaven.exceptions import AuthenticationError
from safehaven.security import (
    create_access_token,
    decode_access_token,
    generate_temporary_password,
    hash_password,
    verify_password,
)


class TestPasswords:

    def test_hash_verifies(self):
        digest = hash_password("open sesame")
        assert digest.startswith("$2")
        assert verify_password("open sesame", digest)
        assert not verify_password("open sesame!", digest)

    @pytest.mark.parametrize("digest", ["", "not-a-bcrypt-hash"])
    def test_malformed_digest_is_a_mismatch(self, digest):
        assert verify_password("anything", digest) is False

    def test_temporary_passwords_differ(self):
        assert generate_temporary_password() != generate_temporary_password()


class TestTokens:

    def test_round_trip(self):
        token = create_access_token("abc-123", "counselor")
        payload = decode_access_token(token)
        assert payload["sub"] == "abc-123"
        assert payload["role"] == "counselor"

    def test_expired_token(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "abc", "role": "client", "iat": past, "exp": past + timedelta(minutes=5)},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)
        assert "expired" in exc_info.value.message

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "abc"}, "some-other-secret", algorithm="HS256")
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_missing_subject(self):
        token = jwt.encode({"role": "admin"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthenticationError):
            decode_access_token(token)
