"""
tests/conftest.py -- Shared test fixtures for TaskBoard.

This module provides:
  - engine / user_store / task_store: a fresh in-memory database per test
  - hasher / issuer / auth_service / task_service: services over those stores
  - make_user(): inserts a user straight into the store and returns (User, Identity)
  - api_client: TestClient over the real app with a patched lifespan

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format shares one in-memory instance
across all connections in the same process.

Environment must be set before any core/auth/api import: get_settings() is
cached on first call and api.limiter reads it at import time.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any project import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app, wire_services
from auth.models import Identity, Role, User
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import BcryptHasher, JwtIssuer
from core.database import init_schema, make_engine
from tasks.service import TaskService
from tasks.store import TaskStore

from tests.helpers import DEFAULT_PASSWORD, TEST_SECRET


# ---------------------------------------------------------------------------
# Store and service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine():
    eng = make_engine("sqlite:///:memory:")
    init_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def task_store(engine) -> TaskStore:
    return TaskStore(engine)


@pytest.fixture
def hasher() -> BcryptHasher:
    return BcryptHasher(rounds=4)


@pytest.fixture
def issuer() -> JwtIssuer:
    return JwtIssuer(secret_key=TEST_SECRET, algorithm="HS256", expire_seconds=3600)


@pytest.fixture
def auth_service(user_store, hasher, issuer) -> AuthService:
    return AuthService(user_store, hasher, issuer)


@pytest.fixture
def task_service(task_store) -> TaskService:
    return TaskService(task_store)


@pytest.fixture
def make_user(user_store, hasher) -> Callable[..., tuple[User, Identity]]:
    """Factory: insert a user with the given role and return (User, Identity)."""

    def _make(email: str | None = None, role: Role = Role.user, password: str = DEFAULT_PASSWORD):
        email = email or f"{uuid.uuid4().hex[:10]}@example.com"
        user_id = user_store.create_user(User(email=email, hashed_password=hasher.hash(password), role=role))
        user = user_store.get_by_id(user_id)
        return user, Identity(id=user.id, email=user.email, role=user.role)

    return _make


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, task_store: TaskStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see an
    isolated test DB rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        wire_services(app, user_store, task_store)
        yield

    return test_lifespan


@pytest.fixture
def api_client() -> Generator[tuple[TestClient, UserStore], None, None]:
    """Yield (client, user_store) backed by a fresh shared-memory database.

    user_store is exposed so tests can plant admin accounts, which cannot be
    created through the public registration route.
    """
    db_url = f"sqlite:///file:test_api_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    eng = make_engine(db_url)
    init_schema(eng)
    user_store = UserStore(eng)
    task_store = TaskStore(eng)

    app.router.lifespan_context = _patch_lifespan(user_store, task_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, user_store

    eng.dispose()

