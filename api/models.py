"""
API request and response models for TaskBoard REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
tasks/models.py, which own the internal domain representation. Route handlers
map between the two.

Task and user payloads use camelCase on the wire (dueDate, userId, createdAt).
Request bodies also accept the snake_case field names.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from tasks.models import Task, TaskDraft, TaskPage, TaskStatus


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------

_BCRYPT_MAX_BYTES = 72

# Trimmed before the length check. Passwords are never trimmed.
_LoginEmail = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class RegisterRequest(BaseModel):
    """Request body for POST /users/register.

    bcrypt ignores everything past 72 bytes, so longer passwords are rejected
    here rather than silently truncated. The password is taken exactly as
    sent; only the email is trimmed.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=6, max_length=_BCRYPT_MAX_BYTES)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        """max_length counts characters; bcrypt counts UTF-8 bytes."""
        if len(value.encode("utf-8")) > _BCRYPT_MAX_BYTES:
            raise ValueError(f"password must be at most {_BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
        return value


class LoginRequest(BaseModel):
    """Request body for POST /users/login.

    email is a plain string: a malformed address is just another bad
    credential and must produce the same 401 as an unknown one.
    """

    model_config = ConfigDict(extra="forbid")

    email: _LoginEmail
    password: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user. There is no password field to leak."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    email: str
    role: str
    created_at: str
    updated_at: str


class SessionResponse(BaseModel):
    """Response for register and login."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class MeResponse(BaseModel):
    """Identity carried by the caller's token."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    role: str


# ---------------------------------------------------------------------------
# Tasks -- request models
# ---------------------------------------------------------------------------


class TaskCreate(BaseModel):
    """Request body for POST /tasks. dueDate is parsed by TaskService."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
    )

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    due_date: Optional[str] = Field(default=None, max_length=64)
    status: Optional[TaskStatus] = None

    def to_draft(self) -> TaskDraft:
        return TaskDraft(
            title=self.title,
            description=self.description,
            due_date=self.due_date,
            status=self.status,
        )


class TaskUpdate(BaseModel):
    """Request body for PATCH/PUT /tasks/{id}. Every field is optional.

    Only fields the client actually sent reach TaskService (see to_patch()).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
    )

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    due_date: Optional[str] = Field(default=None, max_length=64)
    status: Optional[TaskStatus] = None

    def to_patch(self) -> dict:
        return self.model_dump(exclude_unset=True)


# ---------------------------------------------------------------------------
# Tasks -- response models
# ---------------------------------------------------------------------------


class TaskResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    description: Optional[str]
    due_date: Optional[str]
    status: TaskStatus
    user_id: str
    created_at: str
    updated_at: str

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        """Factory Method -- the mapping lives with the output model, not in route handlers."""
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            due_date=task.due_date,
            status=task.status,
            user_id=task.user_id,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskListResponse(BaseModel):
    """Response for GET /tasks. total counts every match, not just this page."""

    model_config = ConfigDict(frozen=True)

    tasks: list[TaskResponse]
    total: int
    page: int
    limit: int

    @classmethod
    def from_page(cls, page: TaskPage) -> "TaskListResponse":
        return cls(
            tasks=[TaskResponse.from_task(t) for t in page.tasks],
            total=page.total,
            page=page.page,
            limit=page.limit,
        )


def user_response(user: dict) -> UserResponse:
    """Build a UserResponse from User.public() output."""
    return UserResponse(**user)


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
