"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as tasks/store.py).
UserStore is the repository; _row_to_user is the mapper.
Service and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Email uniqueness is enforced by the UNIQUE constraint on users.email, not
  by a read-then-write check, so two concurrent registrations for the same
  address cannot both succeed. create_user() lets the IntegrityError escape;
  AuthService.register() turns it into Conflict.

Layer rule: no imports from api/ or tasks/.
"""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from auth.models import Role, User
from core.database import now_iso, users


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(engine)
        user_id = store.create_user(User(email="a@example.com", hashed_password=hasher.hash("secret")))
        user = store.get_by_email("a@example.com")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_user(self, user: User) -> str:
        """Insert a new user and return its assigned ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        user_id = user.id or str(uuid.uuid4())
        now = now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                users.insert().values(
                    id=user_id,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    role=user.role.value,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
        return user_id

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def has_users(self) -> bool:
        return self.count() > 0

    def count(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(users)).scalar()
        return result or 0

    def set_role(self, user_id: str, role: Role) -> bool:
        """Change a user's role. Returns True if a row was updated."""
        with self.engine.connect() as conn:
            result = conn.execute(
                users.update().where(users.c.id == user_id).values(role=role.value, updated_at=now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def delete_user(self, user_id: str) -> bool:
        """Permanently delete a user. Their tasks go with them (ON DELETE CASCADE)."""
        with self.engine.connect() as conn:
            result = conn.execute(users.delete().where(users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        hashed_password=row.hashed_password,
        role=Role(row.role),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
