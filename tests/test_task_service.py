"""
tests/test_task_service.py -- Unit tests for TaskService and the access policy.

Covers:
  - create: defaults, round-trip of every field, dueDate normalization
  - list: users see only their own tasks, admins see all, status filter, pagination
  - get_one / update / remove: NotFound before Forbidden, owner and admin access
  - update: partial merge, clearing dueDate, null title rejected
  - build_task_query: page/limit validation and role branching
"""

from __future__ import annotations

import pytest

from auth.models import Identity, Role
from core.errors import Forbidden, NotFound, ValidationError
from tasks.models import TaskDraft, TaskFilter, TaskStatus
from tasks.service import TaskService, build_task_query, can_access, parse_due_date


def _draft(title: str = "Write report", **kwargs) -> TaskDraft:
    kwargs.setdefault("description", None)
    kwargs.setdefault("due_date", None)
    kwargs.setdefault("status", None)
    return TaskDraft(title=title, **kwargs)


class TestCreate:
    def test_status_defaults_to_todo(self, task_service: TaskService, make_user) -> None:
        user, _ = make_user()
        task = task_service.create(_draft(), user.id)
        assert task.status is TaskStatus.todo
        assert task.user_id == user.id
        assert task.id
        assert task.created_at == task.updated_at

    def test_created_fields_round_trip(self, task_service: TaskService, make_user) -> None:
        user, identity = make_user()
        created = task_service.create(
            _draft(
                "Ship release",
                description="Tag and publish",
                due_date="2025-12-01T09:30:00Z",
                status=TaskStatus.in_progress,
            ),
            user.id,
        )
        fetched = task_service.get_one(created.id, identity)
        assert fetched.title == "Ship release"
        assert fetched.description == "Tag and publish"
        assert fetched.status is TaskStatus.in_progress
        assert fetched.due_date == "2025-12-01T09:30:00+00:00"

    def test_invalid_due_date_rejected(self, task_service: TaskService, make_user) -> None:
        user, _ = make_user()
        with pytest.raises(ValidationError):
            task_service.create(_draft(due_date="next tuesday"), user.id)


class TestList:
    def test_user_sees_only_own_tasks(self, task_service: TaskService, make_user) -> None:
        alice, alice_id = make_user()
        bob, _ = make_user()
        task_service.create(_draft("alice 1"), alice.id)
        task_service.create(_draft("alice 2"), alice.id)
        task_service.create(_draft("bob 1"), bob.id)

        page = task_service.list(TaskFilter(), alice_id)
        assert page.total == 2
        assert {t.user_id for t in page.tasks} == {alice.id}

    def test_admin_sees_all_tasks(self, task_service: TaskService, make_user) -> None:
        alice, _ = make_user()
        bob, _ = make_user()
        _, admin = make_user(role=Role.admin)
        task_service.create(_draft("alice"), alice.id)
        task_service.create(_draft("bob"), bob.id)

        page = task_service.list(TaskFilter(), admin)
        assert page.total == 2
        assert {t.user_id for t in page.tasks} == {alice.id, bob.id}

    def test_status_filter(self, task_service: TaskService, make_user) -> None:
        user, identity = make_user()
        task_service.create(_draft("open"), user.id)
        task_service.create(_draft("closed", status=TaskStatus.done), user.id)

        page = task_service.list(TaskFilter(status=TaskStatus.done), identity)
        assert [t.title for t in page.tasks] == ["closed"]
        assert page.total == 1

    def test_pagination_reports_full_total(self, task_service: TaskService, make_user) -> None:
        user, identity = make_user()
        for n in range(7):
            task_service.create(_draft(f"task {n}"), user.id)

        first = task_service.list(TaskFilter(page=1, limit=3), identity)
        last = task_service.list(TaskFilter(page=3, limit=3), identity)
        beyond = task_service.list(TaskFilter(page=4, limit=3), identity)

        assert (len(first.tasks), first.total, first.page, first.limit) == (3, 7, 1, 3)
        assert (len(last.tasks), last.total) == (1, 7)
        assert beyond.tasks == []
        assert beyond.total == 7

    def test_newest_first(self, task_service: TaskService, make_user) -> None:
        user, identity = make_user()
        for n in range(4):
            task_service.create(_draft(f"task {n}"), user.id)

        stamps = [t.created_at for t in task_service.list(TaskFilter(), identity).tasks]
        assert stamps == sorted(stamps, reverse=True)

    @pytest.mark.parametrize("page,limit", [(0, 10), (-1, 10), (1, 0)])
    def test_page_and_limit_must_be_positive(self, task_service: TaskService, make_user, page, limit) -> None:
        _, identity = make_user()
        with pytest.raises(ValidationError):
            task_service.list(TaskFilter(page=page, limit=limit), identity)


class TestAccessPolicy:
    @pytest.mark.parametrize("role", [Role.user, Role.admin])
    def test_missing_task_is_not_found_for_every_role(self, task_service: TaskService, make_user, role) -> None:
        _, identity = make_user(role=role)
        with pytest.raises(NotFound):
            task_service.get_one("does-not-exist", identity)
        with pytest.raises(NotFound):
            task_service.update("does-not-exist", {"title": "x"}, identity)
        with pytest.raises(NotFound):
            task_service.remove("does-not-exist", identity)

    def test_non_owner_is_forbidden(self, task_service: TaskService, make_user) -> None:
        owner, _ = make_user()
        _, intruder = make_user()
        task = task_service.create(_draft(), owner.id)

        with pytest.raises(Forbidden):
            task_service.get_one(task.id, intruder)
        with pytest.raises(Forbidden):
            task_service.update(task.id, {"title": "hijacked"}, intruder)
        with pytest.raises(Forbidden):
            task_service.remove(task.id, intruder)

        assert task_service.store.get_task(task.id).title == "Write report"

    def test_admin_can_manage_any_task(self, task_service: TaskService, make_user) -> None:
        owner, _ = make_user()
        _, admin = make_user(role=Role.admin)
        task = task_service.create(_draft(), owner.id)

        assert task_service.get_one(task.id, admin).id == task.id
        assert task_service.update(task.id, {"status": TaskStatus.done}, admin).status is TaskStatus.done
        task_service.remove(task.id, admin)
        assert task_service.store.get_task(task.id) is None

    def test_can_access(self, task_service: TaskService, make_user) -> None:
        owner, owner_id = make_user()
        _, other = make_user()
        task = task_service.create(_draft(), owner.id)
        assert can_access(task, owner_id)
        assert not can_access(task, other)
        assert can_access(task, Identity(id="anyone", email="a@example.com", role=Role.admin))


class TestUpdate:
    def test_partial_update_leaves_other_fields(self, task_service: TaskService, make_user) -> None:
        user, identity = make_user()
        task = task_service.create(_draft(description="keep me", due_date="2025-12-01"), user.id)

        updated = task_service.update(task.id, {"status": TaskStatus.in_progress}, identity)
        assert updated.status is TaskStatus.in_progress
        assert updated.title == "Write report"
        assert updated.description == "keep me"
        assert updated.due_date == "2025-12-01T00:00:00+00:00"
        assert updated.updated_at >= task.updated_at

    def test_null_due_date_clears_it(self, task_service: TaskService, make_user) -> None:
        user, identity = make_user()
        task = task_service.create(_draft(due_date="2025-12-01T10:00:00+02:00"), user.id)
        assert task.due_date == "2025-12-01T08:00:00+00:00"

        updated = task_service.update(task.id, {"due_date": None}, identity)
        assert updated.due_date is None

    def test_null_title_rejected(self, task_service: TaskService, make_user) -> None:
        user, identity = make_user()
        task = task_service.create(_draft(), user.id)
        with pytest.raises(ValidationError):
            task_service.update(task.id, {"title": None}, identity)

    @pytest.mark.parametrize("value", ["31/12/2025", "9999-12-31T23:59:59-05:00"])
    def test_invalid_due_date_rejected(self, task_service: TaskService, make_user, value) -> None:
        user, identity = make_user()
        task = task_service.create(_draft(), user.id)
        with pytest.raises(ValidationError):
            task_service.update(task.id, {"due_date": value}, identity)
        assert task_service.store.get_task(task.id).due_date is None

    def test_unknown_keys_ignored(self, task_service: TaskService, make_user) -> None:
        user, identity = make_user()
        _, other = make_user()
        task = task_service.create(_draft(), user.id)
        updated = task_service.update(task.id, {"user_id": other.id}, identity)
        assert updated.user_id == user.id


class TestHelpers:
    def test_parse_due_date_accepts_z_suffix(self) -> None:
        assert parse_due_date("2025-01-02T03:04:05Z") == "2025-01-02T03:04:05+00:00"

    @pytest.mark.parametrize("value", ["9999-12-31T23:59:59-05:00", "0001-01-01T00:00:00+05:00"])
    def test_parse_due_date_outside_utc_range(self, value) -> None:
        """Parses as ISO 8601 but has no UTC equivalent inside the datetime range."""
        with pytest.raises(ValidationError):
            parse_due_date(value)

    def test_build_task_query_rejects_offset_past_sql_integer(self) -> None:
        user = Identity(id="u-1", email="u@example.com", role=Role.user)
        with pytest.raises(ValidationError):
            build_task_query(TaskFilter(page=10**18, limit=100), user)

    def test_build_task_query_accepts_largest_offset(self) -> None:
        user = Identity(id="u-1", email="u@example.com", role=Role.user)
        query = build_task_query(TaskFilter(page=2**63, limit=1), user)
        assert query.offset == 2**63 - 1

    def test_build_task_query_branches_on_role(self) -> None:
        user = Identity(id="u-1", email="u@example.com", role=Role.user)
        admin = Identity(id="a-1", email="a@example.com", role=Role.admin)

        q_user = build_task_query(TaskFilter(page=3, limit=5, status=TaskStatus.done), user)
        q_admin = build_task_query(TaskFilter(page=1, limit=5), admin)

        assert (q_user.offset, q_user.limit, q_user.owner_id, q_user.status) == (10, 5, "u-1", TaskStatus.done)
        assert q_admin.owner_id is None
        assert q_admin.offset == 0
