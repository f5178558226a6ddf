"""
auth/service.py -- Credential validation and session issuance.

AuthService owns the login/register flow. It knows nothing about HTTP:
failures are raised as core.errors types and the API layer maps them to
status codes.

Security:
  validate_credentials() always runs the hasher, even for unknown emails,
  against a dummy hash computed once per service. Response time therefore
  does not reveal whether an account exists, and callers get the same None
  for "no such user" and "wrong password".
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import Identity, Role, Session, User
from auth.store import UserStore
from auth.tokens import PasswordHasher, TokenIssuer
from core.errors import Conflict, Unauthorized

logger = logging.getLogger("taskboard.auth")

_CONFLICT_MESSAGE = "A user with that email already exists."


class AuthService:
    def __init__(self, store: UserStore, hasher: PasswordHasher, issuer: TokenIssuer) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        self._dummy_hash = hasher.hash("taskboard_timing_dummy")

    def validate_credentials(self, email: str, password: str) -> User | None:
        """Return the user when email and password match, None otherwise."""
        user = self.store.get_by_email(email)
        if user is None:
            # Equalize timing -- do NOT return before running the hasher
            self.hasher.verify(password, self._dummy_hash)
            return None
        if not self.hasher.verify(password, user.hashed_password):
            return None
        return user

    def register(self, email: str, password: str) -> Session:
        """Create a `user`-role account and log it in.

        The pre-check gives a fast Conflict for the common case; the UNIQUE
        constraint decides the race when two requests pass it together.
        """
        if self.store.get_by_email(email) is not None:
            raise Conflict(_CONFLICT_MESSAGE)
        user = User(email=email, hashed_password=self.hasher.hash(password), role=Role.user)
        try:
            user_id = self.store.create_user(user)
        except IntegrityError as exc:
            raise Conflict(_CONFLICT_MESSAGE) from exc
        created = self.store.get_by_id(user_id)
        logger.info("Registered user %s", user_id)
        return self.issue_session(created)

    def login(self, email: str, password: str) -> Session:
        user = self.validate_credentials(email, password)
        if user is None:
            raise Unauthorized("Invalid email or password.")
        return self.issue_session(user)

    def issue_session(self, user: User) -> Session:
        """Sign a token for user and pair it with the public user view."""
        claims = {"sub": user.id, "email": user.email, "role": user.role.value}
        return Session(access_token=self.issuer.issue(claims), user=user.public())

    def identity_from_token(self, token: str) -> Identity:
        """Verify token and return the caller's identity.

        Raises Unauthorized on a bad signature, an expired token, or claims
        that do not describe a valid identity.
        """
        payload = self.issuer.verify(token)
        if payload is None:
            raise Unauthorized("Invalid or expired token.")
        try:
            return Identity(id=payload["sub"], email=payload["email"], role=Role(payload["role"]))
        except (KeyError, ValueError) as exc:
            raise Unauthorized("Invalid or expired token.") from exc
