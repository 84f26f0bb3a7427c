"""Tests for user account helpers."""

import pytest

from freestealer.core.security import verify_password
from freestealer.services import user_service
from freestealer.services.user_service import DuplicateUserError, GitHubIdentity
from tests.conftest import make_user


def _identity(**overrides) -> GitHubIdentity:
    fields = {
        "github_id": "9001",
        "login": "octo",
        "name": "Octo Cat",
        "email": "octo@example.com",
        "avatar_url": "https://avatars.example/octo.png",
        "access_token": "gho_first",
        "refresh_token": None,
    }
    fields.update(overrides)
    return GitHubIdentity(**fields)


class TestCreateUser:
    def test_password_is_hashed(self, db_session):
        user = user_service.create_user(
            db_session, username="ana", email="ana@example.com", password="secret123"
        )

        assert user.password_hash != "secret123"
        assert verify_password("secret123", user.password_hash)

    def test_without_password(self, db_session):
        user = user_service.create_user(db_session, username="bo", email="bo@example.com")
        assert user.password_hash is None

    def test_duplicate_email(self, db_session):
        make_user(db_session, email="dup@example.com")
        with pytest.raises(DuplicateUserError):
            user_service.create_user(db_session, username="fresh", email="dup@example.com")

    def test_duplicate_username(self, db_session):
        make_user(db_session, username="taken")
        with pytest.raises(DuplicateUserError):
            user_service.create_user(db_session, username="taken", email="new@example.com")


class TestFindLoginUser:
    def test_email_takes_precedence(self, db_session):
        by_email = make_user(db_session, email="first@example.com")
        make_user(db_session, username="second")

        found = user_service.find_login_user(
            db_session, email="first@example.com", username="second"
        )
        assert found.id == by_email.id

    def test_username_then_github_id(self, db_session):
        by_name = make_user(db_session, username="named")
        make_user(db_session, github_id="77")

        found = user_service.find_login_user(
            db_session, email="", username="named", github_id="77"
        )
        assert found.id == by_name.id

    def test_github_id_lookup(self, db_session):
        user = make_user(db_session, github_id="77", password=None)
        assert user_service.find_login_user(db_session, github_id="77").id == user.id

    def test_unknown_returns_none(self, db_session):
        assert user_service.find_login_user(db_session, email="ghost@example.com") is None

    def test_no_identifier(self, db_session):
        with pytest.raises(ValueError):
            user_service.find_login_user(db_session, email=None, username="", github_id=None)


class TestUpsertGitHubUser:
    def test_creates_user(self, db_session):
        user, created = user_service.upsert_github_user(db_session, _identity())

        assert created is True
        assert user.username == "octo"
        assert user.email == "octo@example.com"
        assert user.github_id == "9001"
        assert user.has_password is False

    def test_missing_email_gets_noreply_address(self, db_session):
        user, _ = user_service.upsert_github_user(db_session, _identity(email=None))
        assert user.email == "octo@users.noreply.github.com"

    def test_repeat_login_refreshes_tokens(self, db_session):
        first, _ = user_service.upsert_github_user(db_session, _identity())
        second, created = user_service.upsert_github_user(
            db_session,
            _identity(access_token="gho_second", avatar_url="https://avatars.example/new.png"),
        )

        assert created is False
        assert second.id == first.id
        assert second.access_token == "gho_second"
        assert second.avatar_url == "https://avatars.example/new.png"

    def test_username_clash_is_duplicate(self, db_session):
        make_user(db_session, username="octo")
        with pytest.raises(DuplicateUserError):
            user_service.upsert_github_user(db_session, _identity())
