"""
tasks/store.py -- SQLAlchemy-backed persistence layer for tasks.

Pattern: Repository + Data Mapper. TaskStore is the repository; _row_to_task
is the mapper that translates raw DB rows into Task dataclasses. The store
executes queries, it does not decide who may see what -- visibility is
composed by tasks/service.py and handed over as a TaskQuery.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = TaskStore(engine)
    task_id = store.create_task(task)
    tasks, total = store.query_tasks(TaskQuery(offset=0, limit=10, owner_id=uid))
    store.update_task(task_id, status="done")
    store.delete_task(task_id)
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.engine import Engine

from core.database import now_iso, tasks
from tasks.models import Task, TaskQuery, TaskStatus

# Columns a caller may change through update_task(). id, user_id and
# created_at are fixed at insert time.
_MUTABLE_FIELDS = frozenset({"title", "description", "due_date", "status"})


class TaskStore:
    """Repository for Task entities."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_task(self, task: Task) -> str:
        """Insert a new task and return its assigned ID.

        Raises sqlalchemy.exc.IntegrityError if user_id does not reference an
        existing user.
        """
        task_id = task.id or str(uuid.uuid4())
        now = now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                tasks.insert().values(
                    id=task_id,
                    title=task.title,
                    description=task.description,
                    due_date=task.due_date,
                    status=task.status.value,
                    user_id=task.user_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
        return task_id

    def get_task(self, task_id: str) -> Optional[Task]:
        """Look up a task by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(tasks.select().where(tasks.c.id == task_id)).fetchone()
        return _row_to_task(row) if row is not None else None

    def query_tasks(self, query: TaskQuery) -> tuple[list[Task], int]:
        """Return one page of matching tasks (newest first) and the unpaginated match count.

        id breaks created_at ties so pages stay stable across requests.
        """
        conditions = []
        if query.owner_id is not None:
            conditions.append(tasks.c.user_id == query.owner_id)
        if query.status is not None:
            conditions.append(tasks.c.status == query.status.value)

        page_stmt = tasks.select()
        count_stmt = select(func.count()).select_from(tasks)
        if conditions:
            page_stmt = page_stmt.where(and_(*conditions))
            count_stmt = count_stmt.where(and_(*conditions))
        page_stmt = (
            page_stmt.order_by(tasks.c.created_at.desc(), tasks.c.id.desc()).offset(query.offset).limit(query.limit)
        )

        with self.engine.connect() as conn:
            rows = conn.execute(page_stmt).fetchall()
            total = conn.execute(count_stmt).scalar() or 0
        return [_row_to_task(r) for r in rows], total

    def update_task(self, task_id: str, **fields) -> bool:
        """Update mutable fields on an existing task and stamp updated_at.

        Accepted fields: title, description, due_date, status. status may be
        passed as a TaskStatus. Unknown fields raise ValueError rather than
        being silently ignored.

        Returns True if a row was updated, False if task_id was not found.
        """
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown task fields: {sorted(unknown)!r}")
        if isinstance(fields.get("status"), TaskStatus):
            fields["status"] = fields["status"].value
        fields["updated_at"] = now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(tasks.update().where(tasks.c.id == task_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_task(self, task_id: str) -> bool:
        """Permanently delete a task. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(tasks.delete().where(tasks.c.id == task_id))
            conn.commit()
        return result.rowcount > 0

    def count(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(tasks)).scalar()
        return result or 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_task(row) -> Task:
    return Task(
        id=row.id,
        title=row.title,
        description=row.description,
        due_date=row.due_date,
        status=TaskStatus(row.status),
        user_id=row.user_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
