"""
api/routes/users.py -- Registration, login, and identity endpoints.

Routes:
  POST /users/register  -- create a `user`-role account; returns token + user (201)
  POST /users/login     -- password login; returns token + user (200)
  GET  /users/me        -- identity carried by the caller's token (requires auth)

Security:
  Register and login are rate-limited per client IP (LOGIN_RATE_LIMIT).
  Login returns the same 401 for an unknown email and a wrong password.
  Cache-Control: no-store on every response that carries a token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import AUTH_RATE_LIMIT, limiter
from api.models import LoginRequest, MeResponse, RegisterRequest, SessionResponse, user_response
from auth.dependencies import get_auth_service, get_current_identity
from auth.models import Identity, Session
from auth.service import AuthService

# Auth policy:
# - POST /users/register: public
# - POST /users/login:    public
# - GET  /users/me:       requires auth (get_current_identity)
router = APIRouter(prefix="/users")


def _session_response(session: Session, response: Response) -> SessionResponse:
    response.headers["Cache-Control"] = "no-store"
    return SessionResponse(
        access_token=session.access_token,
        token_type=session.token_type,
        user=user_response(session.user),
    )


@router.post("/register", response_model=SessionResponse, status_code=201)
@limiter.limit(AUTH_RATE_LIMIT)
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Register a new account and log it in. 409 if the email is taken."""
    session = auth_service.register(body.email, body.password)
    return _session_response(session, response)


@router.post("/login", response_model=SessionResponse)
@limiter.limit(AUTH_RATE_LIMIT)
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse:
    """Authenticate with email and password and return a bearer token."""
    session = auth_service.login(body.email, body.password)
    return _session_response(session, response)


@router.get("/me", response_model=MeResponse)
def me(identity: Identity = Depends(get_current_identity)) -> MeResponse:
    return MeResponse(id=identity.id, email=identity.email, role=identity.role.value)
