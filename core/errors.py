"""
core/errors.py -- Caller-visible error taxonomy.

Services raise these; api/main.py maps every AppError to the standard
{"error": {"code", "message", "detail"}} envelope with the class's status
code. Services never import fastapi, so they stay usable from the CLI and
from unit tests without an HTTP stack.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors surfaced directly to the caller."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    default_message = "Request validation failed."


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required."


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "You do not have permission to access this resource."


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found."


class Conflict(AppError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already exists."
