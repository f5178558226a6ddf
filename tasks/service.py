"""
tasks/service.py -- Ownership checks, role-based visibility, and task CRUD.

Access policy (one rule, applied everywhere):
  A task is accessible to its owner and to any admin. Nobody else.

  get_one / update / remove all go through _fetch_authorized(), which loads
  the task first and checks access second. A missing task is NotFound for
  every caller, so the 404/403 split never depends on who is asking.

List visibility is composed by build_task_query(): one function that branches
on the caller's Role. Admins query across all owners; users are pinned to
their own id.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from auth.models import Identity, Role
from core.errors import Forbidden, NotFound, ValidationError
from tasks.models import Task, TaskDraft, TaskFilter, TaskPage, TaskQuery, TaskStatus
from tasks.store import TaskStore

logger = logging.getLogger("taskboard.tasks")

_PATCHABLE = ("title", "description", "due_date", "status")

# SQLite INTEGER (and BIGINT elsewhere) is signed 64-bit
_MAX_SQL_INT = 2**63 - 1


def parse_due_date(value: str) -> str:
    """Parse an ISO 8601 timestamp and return it normalized to UTC.

    Naive timestamps are taken as UTC. A trailing "Z" is accepted.
    Raises ValidationError on anything fromisoformat() rejects, and on
    timestamps whose UTC equivalent falls outside the datetime range.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc).isoformat()
    except (ValueError, OverflowError) as exc:
        raise ValidationError("dueDate must be an ISO 8601 timestamp.", detail=value) from exc


def can_access(task: Task, identity: Identity) -> bool:
    return identity.role is Role.admin or task.user_id == identity.id


def build_task_query(task_filter: TaskFilter, identity: Identity) -> TaskQuery:
    """Compose the list query for identity.

    Raises ValidationError when page or limit is below 1, or when the
    resulting offset does not fit a signed 64-bit SQL integer.
    """
    if task_filter.page < 1:
        raise ValidationError("page must be at least 1.")
    if task_filter.limit < 1:
        raise ValidationError("limit must be at least 1.")
    offset = (task_filter.page - 1) * task_filter.limit
    if offset > _MAX_SQL_INT or task_filter.limit > _MAX_SQL_INT:
        raise ValidationError("page is out of range.", detail=str(task_filter.page))

    if identity.role is Role.admin:
        owner_id = None
    elif identity.role is Role.user:
        owner_id = identity.id
    else:
        raise ValueError(f"Unhandled role: {identity.role!r}")

    return TaskQuery(
        offset=offset,
        limit=task_filter.limit,
        owner_id=owner_id,
        status=task_filter.status,
    )


class TaskService:
    def __init__(self, store: TaskStore) -> None:
        self.store = store

    def create(self, draft: TaskDraft, owner_id: str) -> Task:
        """Persist a new task owned by owner_id and return the stored record."""
        task = Task(
            title=draft.title,
            user_id=owner_id,
            status=draft.status or TaskStatus.todo,
            description=draft.description,
            due_date=parse_due_date(draft.due_date) if draft.due_date else None,
        )
        task_id = self.store.create_task(task)
        logger.info("Task %s created by %s", task_id, owner_id)
        return self.store.get_task(task_id)

    def list(self, task_filter: TaskFilter, identity: Identity) -> TaskPage:
        query = build_task_query(task_filter, identity)
        tasks, total = self.store.query_tasks(query)
        return TaskPage(page=task_filter.page, limit=task_filter.limit, total=total, tasks=tasks)

    def get_one(self, task_id: str, identity: Identity) -> Task:
        return self._fetch_authorized(task_id, identity)

    def update(self, task_id: str, patch: dict[str, Any], identity: Identity) -> Task:
        """Merge the fields present in patch onto the stored task.

        Keys absent from patch are left alone. An explicit None clears
        description or due_date; title and status cannot be cleared.
        """
        task = self._fetch_authorized(task_id, identity)
        self._assert_access(task, identity)

        fields = {k: v for k, v in patch.items() if k in _PATCHABLE}
        for required in ("title", "status"):
            if required in fields and fields[required] is None:
                raise ValidationError(f"{required} cannot be null.")
        if fields.get("due_date"):
            fields["due_date"] = parse_due_date(fields["due_date"])
        elif "due_date" in fields:
            fields["due_date"] = None

        if fields:
            self.store.update_task(task.id, **fields)
        return self._reload(task.id)

    def remove(self, task_id: str, identity: Identity) -> None:
        task = self._fetch_authorized(task_id, identity)
        self._assert_access(task, identity)
        if not self.store.delete_task(task.id):
            raise NotFound(f"Task with ID {task_id} not found.")
        logger.info("Task %s deleted by %s", task.id, identity.id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch_authorized(self, task_id: str, identity: Identity) -> Task:
        """Load a task and enforce the access policy. NotFound wins over Forbidden."""
        task = self.store.get_task(task_id)
        if task is None:
            raise NotFound(f"Task with ID {task_id} not found.")
        self._assert_access(task, identity)
        return task

    def _assert_access(self, task: Task, identity: Identity) -> None:
        if not can_access(task, identity):
            logger.warning("Denied %s access to task %s", identity.id, task.id)
            raise Forbidden("You do not have permission to access this task.")

    def _reload(self, task_id: str) -> Task:
        task: Optional[Task] = self.store.get_task(task_id)
        if task is None:
            # Deleted between the write and the read
            raise NotFound(f"Task with ID {task_id} not found.")
        return task
