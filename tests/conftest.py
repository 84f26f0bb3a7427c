from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from freestealer.api.v1.dependencies import get_counter_service
from freestealer.core.security import create_token, hash_password
from freestealer.db.session import build_engine, create_tables, drop_tables
from freestealer.db.session import get_db as app_get_session
from freestealer.main import app as fastapi_app
from freestealer.models import Comment, Tier, User, Vote
from freestealer.services.counters import CounterService

TEST_PASSWORD = "hunter22"


@pytest.fixture()
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """File-backed SQLite so separate sessions and threads share one database."""
    engine = build_engine(f"sqlite:///{tmp_path / 'freestealer-test.db'}")
    create_tables(bind=engine)
    try:
        yield engine
    finally:
        drop_tables(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def counter_service(session_factory: sessionmaker[Session]) -> CounterService:
    return CounterService(session_factory)


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    session_factory: sessionmaker[Session],
    counter_service: CounterService,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_counter_service] = lambda: counter_service
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def make_user(session: Session, *, password: str | None = TEST_PASSWORD, **fields: Any) -> User:
    n = uuid4().hex[:10]
    user = User(
        username=fields.pop("username", f"user{n}"),
        email=fields.pop("email", f"user{n}@example.com"),
        password_hash=hash_password(password) if password else None,
        **fields,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_tier(session: Session, owner: User, **fields: Any) -> Tier:
    tier = Tier(
        user_id=owner.id,
        platform=fields.pop("platform", "Railway"),
        name=fields.pop("name", "Hobby"),
        **fields,
    )
    session.add(tier)
    session.commit()
    session.refresh(tier)
    return tier


def bearer(user: User) -> dict[str, str]:
    token = create_token(user.id, "access", {"username": user.username, "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted test user."""
    return make_user(db_session)


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    return make_user(db_session)


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return bearer(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return bearer(other_user)


@pytest.fixture()
def test_tier(db_session: Session, test_user: User) -> Tier:
    """Create a public tier owned by the primary test user."""
    return make_tier(db_session, test_user)


@pytest.fixture()
def counts(session_factory: sessionmaker[Session]) -> Callable[[int], tuple[int, int, int]]:
    """Return a reader for a tier's stored (upvotes, downvotes, comments)."""

    def _read(tier_id: int) -> tuple[int, int, int]:
        with session_factory() as session:
            tier = session.get(Tier, tier_id)
            assert tier is not None
            return tier.upvote_count, tier.downvote_count, tier.comment_count

    return _read


@pytest.fixture()
def live_rows(session_factory: sessionmaker[Session]) -> Callable[[type, int], int]:
    """Return a counter of live Vote or Comment rows on a tier."""

    def _count(model: type, tier_id: int) -> int:
        assert model in (Vote, Comment)
        with session_factory() as session:
            return (
                session.query(model)
                .filter(model.tier_id == tier_id, model.deleted_at.is_(None))
                .count()
            )

    return _count
