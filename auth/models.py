"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, near-zero logic). Stores and
services do the work; these types only own the domain shape.

Layer rule: no imports from api/ or tasks/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    user = "user"


@dataclass
class User:
    """A registered account.

    hashed_password is a bcrypt hash and must never leave the process --
    public() is the only representation handed to the HTTP layer.

    id is None before the record is written to the database.
    """

    email: str
    hashed_password: str
    role: Role = Role.user
    id: str | None = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""

    def public(self) -> dict:
        """Outward-facing representation with the password hash stripped."""
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, decoded from a verified token.

    Attached to a single request and discarded afterwards.
    """

    id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin


@dataclass(frozen=True)
class Session:
    """Result of a successful login or registration."""

    access_token: str
    user: dict
    token_type: str = "bearer"
