"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Only one auth method exists: an `Authorization: Bearer <token>` header
carrying a JWT issued by AuthService. The decoded claims become an Identity
for the duration of the request; the token is never looked up server-side.

Layer rule: no imports from api/ or tasks/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import Identity
from auth.service import AuthService
from core.errors import Unauthorized


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_identity(request: Request) -> Identity:
    """Require authentication. Raises Unauthorized (401) if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise Unauthorized("Missing or malformed Authorization header. Expected: Bearer <token>")
    return get_auth_service(request).identity_from_token(token)
