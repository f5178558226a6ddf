"""tests/test_cli.py -- Administrative commands in main.py, run against a temp SQLite file."""

from __future__ import annotations

import pytest

from auth.models import Role
from auth.store import UserStore
from auth.tokens import BcryptHasher
from core.database import make_engine
from main import main
from tasks.models import TaskQuery
from tasks.store import TaskStore


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'cli.db'}"


def _stores(db_url: str) -> tuple[UserStore, TaskStore]:
    engine = make_engine(db_url)
    return UserStore(engine), TaskStore(engine)


def test_init_db_creates_schema(db_url) -> None:
    assert main(["--database-url", db_url, "init-db"]) == 0
    users, tasks = _stores(db_url)
    assert users.count() == 0
    assert tasks.count() == 0


def test_seed_populates_empty_database(db_url, capsys) -> None:
    assert main(["--database-url", db_url, "seed"]) == 0
    assert "Seeded 4 users and 8 tasks" in capsys.readouterr().out

    users, tasks = _stores(db_url)
    assert users.count() == 4
    assert tasks.count() == 8
    admin = users.get_by_email("admin@example.com")
    assert admin.role is Role.admin
    assert BcryptHasher().verify("Admin123!", admin.hashed_password)

    page, total = tasks.query_tasks(TaskQuery(offset=0, limit=100, owner_id=admin.id))
    assert total == 2
    assert all(t.due_date.endswith("+00:00") for t in page)


def test_seed_skips_when_users_exist(db_url, capsys) -> None:
    main(["--database-url", db_url, "seed"])
    capsys.readouterr()
    assert main(["--database-url", db_url, "seed"]) == 0
    assert "skipping" in capsys.readouterr().out
    assert _stores(db_url)[0].count() == 4


def test_create_admin(db_url) -> None:
    assert main(["--database-url", db_url, "create-admin", "boss@example.com", "S3cret!pass"]) == 0
    user = _stores(db_url)[0].get_by_email("boss@example.com")
    assert user.role is Role.admin
    assert BcryptHasher().verify("S3cret!pass", user.hashed_password)


def test_create_admin_promotes_existing_user(db_url) -> None:
    main(["--database-url", db_url, "seed"])
    assert main(["--database-url", db_url, "create-admin", "user1@example.com", "Whatever1!"]) == 0
    users, _ = _stores(db_url)
    promoted = users.get_by_email("user1@example.com")
    assert promoted.role is Role.admin
    # Promotion keeps the existing password
    assert BcryptHasher().verify("User123!", promoted.hashed_password)


def test_create_admin_rejects_short_password(db_url, capsys) -> None:
    assert main(["--database-url", db_url, "create-admin", "boss@example.com", "123"]) == 1
    assert "6-72 bytes" in capsys.readouterr().out
    assert _stores(db_url)[0].get_by_email("boss@example.com") is None
