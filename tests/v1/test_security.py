"""Tests for password hashing and token helpers."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from freestealer.core import security
from freestealer.core.settings import settings


class TestPasswords:
    def test_round_trip(self):
        hashed = security.hash_password("correct horse")
        assert security.verify_password("correct horse", hashed)
        assert not security.verify_password("wrong horse", hashed)

    def test_malformed_hash_is_rejected(self):
        assert security.verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:
    def test_access_token_claims(self):
        token = security.create_token(7, "access", {"username": "sam", "email": "s@example.com"})
        payload = jwt.decode(
            token,
            settings.effective_jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )

        assert payload["sub"] == "7"
        assert payload["user_id"] == 7
        assert payload["type"] == "access"
        assert payload["iss"] == "freestealer"
        assert payload["username"] == "sam"
        assert payload["exp"] - payload["iat"] == settings.access_token_expire_minutes * 60

    def test_refresh_token_lives_longer(self):
        token = security.create_token(7, "refresh")
        payload = jwt.get_unverified_claims(token)
        assert payload["exp"] - payload["iat"] == settings.refresh_token_expire_minutes * 60

    def test_decode_returns_user_id(self):
        assert security.decode_token(security.create_token(12, "session"), "session") == 12

    def test_decode_rejects_wrong_type(self):
        token = security.create_token(12, "access")
        with pytest.raises(security.JWTError):
            security.decode_token(token, "refresh")

    def test_decode_rejects_foreign_issuer(self):
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "1", "type": "access", "iss": "someone-else", "exp": now + timedelta(minutes=5)},
            settings.effective_jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(security.JWTError):
            security.decode_token(token, "access")

    def test_decode_rejects_expired(self):
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": "1",
                "type": "access",
                "iss": settings.jwt_issuer,
                "exp": now - timedelta(minutes=1),
            },
            settings.effective_jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(security.JWTError):
            security.decode_token(token, "access")

    def test_token_pair_shape(self):
        pair = security.create_token_pair(3, "sam", "s@example.com")
        assert pair["token_type"] == "bearer"
        assert pair["expires_in"] == settings.access_token_expire_minutes * 60
        assert security.decode_token(pair["refresh_token"], "refresh") == 3
