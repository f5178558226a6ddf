"""
auth/tokens.py -- JWT signing and password hashing primitives.

Security design decisions:
  JWT: python-jose. Tokens are signed with SECRET_KEY and carry exactly
       sub (user id), email, role, and exp. Verification returns None on any
       failure -- AuthService turns that into Unauthorized.

  Passwords: bcrypt, used directly (no passlib wrapper). The cost factor is
       a constructor argument fed from Settings.bcrypt_rounds.

Both primitives sit behind small Protocols so the signing algorithm and the
hash cost are configuration, and tests can swap in cheaper implementations.

Layer rule: no imports from api/ or tasks/. Import from core/ is allowed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol

import bcrypt
from jose import JWTError, jwt

from core.config import Settings


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------


class PasswordHasher(Protocol):
    def hash(self, plain: str) -> str: ...

    def verify(self, plain: str, hashed: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue(self, claims: dict) -> str: ...

    def verify(self, token: str) -> dict | None: ...


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


class BcryptHasher:
    """bcrypt hash + constant-time verify.

    bcrypt only looks at the first 72 bytes of a password and bcrypt>=4.1
    raises on longer input; the API layer caps passwords at 72 characters.
    """

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext password matches the bcrypt hash."""
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Malformed hash or over-long password
            return False


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


class JwtIssuer:
    """Sign and verify compact claims tokens with a process-wide secret."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_seconds: int = 3600) -> None:
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expire_seconds = expire_seconds

    def issue(self, claims: dict) -> str:
        """Encode claims plus an exp claim expire_seconds from now."""
        payload = dict(claims)
        payload["exp"] = datetime.now(timezone.utc) + timedelta(seconds=self.expire_seconds)
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> dict | None:
        """Decode and verify a JWT. Returns the payload dict or None on any failure.

        python-jose checks the signature and the exp claim; an expired token
        raises ExpiredSignatureError, a JWTError subclass.
        """
        try:
            return jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None


def build_primitives(settings: Settings) -> tuple[BcryptHasher, JwtIssuer]:
    """Construct the default hasher and issuer from Settings."""
    hasher = BcryptHasher(rounds=settings.bcrypt_rounds)
    issuer = JwtIssuer(
        secret_key=settings.secret_key,
        algorithm=settings.jwt_algorithm,
        expire_seconds=settings.token_expire_seconds,
    )
    return hasher, issuer
