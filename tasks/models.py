"""
tasks/models.py -- Domain dataclasses for tasks and task queries.

These are pure data containers with zero logic. Authorization and query
composition live in tasks/service.py; SQL lives in tasks/store.py.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in_progress"
    done = "done"


@dataclass
class Task:
    """A unit of work owned by exactly one user.

    user_id is the owner, set from the creating identity and never changed.
    id is None before the record is written to the database.
    """

    title: str
    user_id: str
    status: TaskStatus = TaskStatus.todo
    description: Optional[str] = None
    due_date: Optional[str] = None  # ISO 8601
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""


@dataclass
class TaskDraft:
    """Caller-supplied fields for a new task. due_date is the raw ISO 8601 string."""

    title: str
    description: Optional[str] = None
    due_date: Optional[str] = None
    status: Optional[TaskStatus] = None


@dataclass
class TaskFilter:
    page: int = 1
    limit: int = 10
    status: Optional[TaskStatus] = None


@dataclass(frozen=True)
class TaskQuery:
    """A fully composed list query, ready for TaskStore.query_tasks().

    owner_id None means no owner restriction.
    """

    offset: int
    limit: int
    owner_id: Optional[str] = None
    status: Optional[TaskStatus] = None


@dataclass
class TaskPage:
    page: int
    limit: int
    total: int
    tasks: list[Task] = field(default_factory=list)
