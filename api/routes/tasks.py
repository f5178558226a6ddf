"""
api/routes/tasks.py -- Task CRUD routes.

Routes:
  POST   /tasks        -- create a task owned by the caller (201)
  GET    /tasks        -- paginated list; users see their own, admins see all
  GET    /tasks/{id}   -- task detail (404 missing, 403 not owner/admin)
  PATCH  /tasks/{id}   -- partial update (PUT is accepted with the same semantics)
  DELETE /tasks/{id}   -- delete (204)

Handlers are thin: they translate HTTP shapes into TaskService calls. Every
ownership and visibility decision is made in tasks/service.py.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from api.models import TaskCreate, TaskListResponse, TaskResponse, TaskUpdate
from auth.dependencies import get_current_identity
from auth.models import Identity
from core.config import get_settings
from tasks.models import TaskFilter, TaskStatus
from tasks.service import TaskService

_settings = get_settings()

# All task routes require authentication. FastAPI caches get_current_identity
# per request, so handlers that also declare it reuse the same Identity.
router = APIRouter(prefix="/tasks", dependencies=[Depends(get_current_identity)])


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(
    body: TaskCreate,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    task = service.create(body.to_draft(), identity.id)
    return TaskResponse.from_task(task)


@router.get("", response_model=TaskListResponse)
def list_tasks(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=_settings.default_page_size, ge=1),
    status: Optional[TaskStatus] = Query(default=None),
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    """List tasks newest first. total is the full match count across all pages.

    limit above MAX_PAGE_SIZE is clamped, and the response reports the
    limit actually applied.
    """
    limit = min(limit, _settings.max_page_size)
    result = service.list(TaskFilter(page=page, limit=limit, status=status), identity)
    return TaskListResponse.from_page(result)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    return TaskResponse.from_task(service.get_one(task_id, identity))


@router.api_route("/{task_id}", methods=["PATCH", "PUT"], response_model=TaskResponse)
def update_task(
    task_id: str,
    body: TaskUpdate,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """Merge the fields present in the body onto the task. Absent fields are untouched."""
    task = service.update(task_id, body.to_patch(), identity)
    return TaskResponse.from_task(task)


@router.delete("/{task_id}", status_code=204)
def delete_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    service: TaskService = Depends(get_task_service),
) -> Response:
    service.remove(task_id, identity)
    return Response(status_code=204)
