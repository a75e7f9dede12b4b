# SPDX-License-Identifier: MIT

"""Shared fixtures: an in-memory backend, a task factory and a manual clock."""

from typing import Any, Optional

import pendulum
import pytest

from eventline.bus import EventBus
from eventline.configuration import get_default_configuration
from eventline.errors import ApiError, NotFoundError
from eventline.model.dependency import DependencyType, TaskDependencies
from eventline.model.member import Department, Member
from eventline.model.task import StatusChange, Task, TaskDraft, TaskStatus
from eventline.session import Session

EVENT_ID = "e1"
DEPARTMENT_ID = "d1"


def build_task(**overrides: Any) -> Task:
    task: dict[str, Any] = {
        "id": "t1",
        "event_id": EVENT_ID,
        "department_id": DEPARTMENT_ID,
        "zone_id": None,
        "zonal_dept_row_id": None,
        "title": "Task",
        "description": None,
        "priority": 3,
        "status": TaskStatus.TODO,
        "progress_pct": 0,
        "start_at": None,
        "due_at": None,
        "assignee_id": None,
        "venue_id": None,
        "creator_id": "u0",
        "created_at": None,
        "updated_at": None,
        "completed_at": None,
    }
    task.update(overrides)
    return task  # type: ignore[return-value]


class FakeTaskApi:
    """In-memory stand-in for ``TaskApi`` recording every call.

    ``failures`` maps a method name to an error raised on each call to it;
    ``failing_blockers`` makes add/remove dependency calls fail for those ids.
    """

    def __init__(self) -> None:
        self.tasks: dict[str, Task] = {}
        self.edges: dict[tuple[str, str], DependencyType] = {}
        self.members: dict[tuple[str, str], list[Member]] = {}
        self.departments: dict[str, list[Department]] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.failures: dict[str, ApiError] = {}
        self.failing_blockers: set[str] = set()
        self._next_id = 100

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, *args))
        error = self.failures.get(method)
        if error is not None:
            raise error

    def call_count(self, method: str) -> int:
        return len([call for call in self.calls if call[0] == method])

    def add(self, task: Task) -> Task:
        self.tasks[task["id"]] = task
        return task

    def _get(self, task_id: str) -> Task:
        if task_id not in self.tasks:
            raise NotFoundError(404, f"task {task_id} not found")
        return self.tasks[task_id]

    def list_tasks(
        self,
        event_id: str,
        department_id: str,
        assignee_id: Optional[str] = None,
        zone_id: Optional[str] = None,
        zonal_dept_row_id: Optional[str] = None,
    ) -> list[Task]:
        self._record(
            "list_tasks", event_id, department_id, assignee_id, zone_id, zonal_dept_row_id
        )
        return [
            dict(task)  # type: ignore[misc]
            for task in self.tasks.values()
            if task["event_id"] == event_id
            and task["department_id"] == department_id
            and (assignee_id is None or task["assignee_id"] == assignee_id)
            and (zone_id is None or task["zone_id"] == zone_id)
            and (
                zonal_dept_row_id is None
                or task["zonal_dept_row_id"] == zonal_dept_row_id
            )
        ]

    def create_task(self, event_id: str, department_id: str, draft: TaskDraft) -> Task:
        self._record("create_task", event_id, department_id, draft["title"])
        self._next_id += 1
        task = build_task(
            id=f"t{self._next_id}",
            event_id=event_id,
            department_id=department_id,
            **draft,
        )
        return dict(self.add(task))  # type: ignore[return-value]

    def update_task(
        self, event_id: str, department_id: str, task_id: str, patch: dict[str, Any]
    ) -> Task:
        self._record("update_task", event_id, department_id, task_id)
        task = self._get(task_id)
        task.update(patch)  # type: ignore[typeddict-item]
        return dict(task)  # type: ignore[return-value]

    def change_status(
        self,
        event_id: str,
        department_id: str,
        task_id: str,
        status: TaskStatus,
        progress_pct: Optional[int] = None,
    ) -> StatusChange:
        self._record("change_status", event_id, department_id, task_id, status)
        task = self._get(task_id)
        task["status"] = status
        if progress_pct is not None:
            task["progress_pct"] = progress_pct
        return {"status": status, "progress_pct": task["progress_pct"]}

    def delete_task(self, event_id: str, department_id: str, task_id: str) -> None:
        self._record("delete_task", event_id, department_id, task_id)
        self._get(task_id)
        del self.tasks[task_id]

    def list_dependencies(
        self, event_id: str, department_id: str, task_id: str
    ) -> TaskDependencies:
        self._record("list_dependencies", event_id, department_id, task_id)
        return {
            "blockers": [
                {"task": dict(self.tasks[blocker]), "dependency_type": kind}  # type: ignore[typeddict-item]
                for (blocker, blocked), kind in self.edges.items()
                if blocked == task_id and blocker in self.tasks
            ],
            "dependents": [
                {"task": dict(self.tasks[blocked]), "dependency_type": kind}  # type: ignore[typeddict-item]
                for (blocker, blocked), kind in self.edges.items()
                if blocker == task_id and blocked in self.tasks
            ],
        }

    def add_dependency(
        self,
        event_id: str,
        department_id: str,
        task_id: str,
        blocker_id: str,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
    ) -> None:
        self._record("add_dependency", event_id, department_id, task_id, blocker_id)
        if blocker_id in self.failing_blockers:
            raise ApiError(400, f"cannot link {blocker_id}")
        self.edges[(blocker_id, task_id)] = dependency_type

    def remove_dependency(
        self, event_id: str, department_id: str, task_id: str, blocker_id: str
    ) -> None:
        self._record("remove_dependency", event_id, department_id, task_id, blocker_id)
        if blocker_id in self.failing_blockers:
            raise ApiError(400, f"cannot unlink {blocker_id}")
        self.edges.pop((blocker_id, task_id), None)

    def search_tasks(
        self,
        event_id: str,
        department_id: str,
        title_query: str,
        target_department_id: str,
    ) -> list[Task]:
        self._record(
            "search_tasks", event_id, department_id, title_query, target_department_id
        )
        term = title_query.lower()
        return [
            dict(task)  # type: ignore[misc]
            for task in self.tasks.values()
            if task["event_id"] == event_id
            and task["department_id"] == target_department_id
            and term in task["title"].lower()
        ]

    def list_department_members(self, event_id: str, department_id: str) -> list[Member]:
        self._record("list_department_members", event_id, department_id)
        return list(self.members.get((event_id, department_id), []))

    def list_departments(self, event_id: str) -> list[Department]:
        self._record("list_departments", event_id)
        return list(self.departments.get(event_id, []))


class ManualClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def local_timezone():
    """Pin the local timezone to one with DST so date math is deterministic."""
    pendulum.set_local_timezone(pendulum.timezone("Europe/Amsterdam"))
    yield
    pendulum.set_local_timezone()


@pytest.fixture
def make_task():
    return build_task


@pytest.fixture
def api():
    return FakeTaskApi()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def session(api):
    config = get_default_configuration()
    config["event_id"] = EVENT_ID
    config["department_id"] = DEPARTMENT_ID
    return Session(config, api=api)  # type: ignore[arg-type]
