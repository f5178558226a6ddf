"""tests/helpers.py -- Request helpers shared by the API integration tests."""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from auth.models import Role, User
from auth.store import UserStore
from auth.tokens import BcryptHasher

TEST_SECRET = "test-secret-key-that-is-long-enough-0123456789"
DEFAULT_PASSWORD = "Password123!"


def register(client: TestClient, email: str | None = None, password: str = DEFAULT_PASSWORD) -> tuple[str, dict]:
    """Register through the API and return (access_token, user)."""
    email = email or f"{uuid.uuid4().hex[:10]}@example.com"
    resp = client.post("/users/register", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    data = resp.json()
    return data["access_token"], data["user"]


def admin_token(client: TestClient, user_store: UserStore, email: str = "admin@example.com") -> str:
    """Plant an admin account in the store and log it in through the API."""
    hashed = BcryptHasher(rounds=4).hash(DEFAULT_PASSWORD)
    user_store.create_user(User(email=email, hashed_password=hashed, role=Role.admin))
    resp = client.post("/users/login", json={"email": email, "password": DEFAULT_PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def create_task(client: TestClient, token: str, **body) -> dict:
    body.setdefault("title", "Test Task")
    resp = client.post("/tasks", json=body, headers=bearer(token))
    assert resp.status_code == 201, resp.text
    return resp.json()
