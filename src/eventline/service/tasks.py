# SPDX-License-Identifier: MIT

import logging
from typing import NamedTuple, Optional

import pendulum

from eventline.bus import EventBus, Scope, Unsubscribe
from eventline.errors import ApiError, NotFoundError
from eventline.model.entity_id import EntityId
from eventline.model.task import StatusChange, Task, TaskStatus
from eventline.query.projection import group_by_status, project
from eventline.repository.task import TaskRepository
from eventline.state import PageState

logger = logging.getLogger(__name__)


class LoadRequest(NamedTuple):
    event_id: EntityId
    department_ids: tuple[EntityId, ...]
    assignee_id: Optional[EntityId]
    zone_id: Optional[EntityId]
    zonal_dept_row_id: Optional[EntityId]


class TaskLoader:
    """
    Keeps the task list of the current page scope.

    A load remembers the parameters it was issued with and its result is only
    applied while those still match the page state, so a slow response for a
    previous department can not overwrite the current one.
    """

    def __init__(self, repository: TaskRepository, bus: EventBus, page: PageState) -> None:
        self.repository = repository
        self.bus = bus
        self.page = page
        self.tasks: list[Task] = []
        self.error: Optional[str] = None
        self._unsubscribe: Optional[Unsubscribe] = None

    def current_request(self) -> Optional[LoadRequest]:
        if self.page.event_id is None:
            return None
        filters = self.page.filters
        if self.page.department_id is not None:
            department_ids: tuple[EntityId, ...] = (self.page.department_id,)
        else:
            department_ids = tuple(filters["department_ids"])
        if not department_ids:
            return None
        return LoadRequest(
            self.page.event_id,
            department_ids,
            filters["assignee_id"],
            filters["zone_id"],
            filters["zonal_dept_row_id"],
        )

    def scope(self) -> Optional[Scope]:
        if self.page.event_id is None or self.page.department_id is None:
            return None
        return Scope(self.page.event_id, self.page.department_id)

    def fetch(self, request: LoadRequest, force: bool = False) -> list[Task]:
        tasks: dict[EntityId, Task] = {}
        for department_id in request.department_ids:
            for task in self.repository.list_tasks(
                request.event_id,
                department_id,
                assignee_id=request.assignee_id,
                zone_id=request.zone_id,
                zonal_dept_row_id=request.zonal_dept_row_id,
                force=force,
            ):
                # Deduplicate across departments, first occurrence wins
                tasks.setdefault(task["id"], task)
        return list(tasks.values())

    def apply(self, request: LoadRequest, tasks: list[Task]) -> bool:
        if request != self.current_request():
            logger.debug("discarding tasks loaded for stale scope %s", request)
            return False
        self.tasks = tasks
        return True

    def load(self, force: bool = False) -> bool:
        request = self.current_request()
        if request is None:
            self.tasks = []
            return False
        self.error = None
        try:
            tasks = self.fetch(request, force=force)
        except ApiError as e:
            self.error = e.message or "Failed to load tasks"
            logger.warning("loading tasks failed: %s", self.error)
            return False
        return self.apply(request, tasks)

    def subscribe(self) -> Unsubscribe:
        """Reload whenever a change is announced for the current scope."""
        if self._unsubscribe is not None:
            return self._unsubscribe

        def reload(scope: Scope) -> None:
            self.load(force=True)

        off = self.bus.on_tasks_changed(self.scope, reload)

        def unsubscribe() -> None:
            off()
            self._unsubscribe = None

        self._unsubscribe = unsubscribe
        return unsubscribe

    def visible(self, now: Optional[pendulum.DateTime] = None) -> list[Task]:
        return project(self.tasks, self.page.filters, now)

    def get(self, task_id: EntityId) -> Optional[Task]:
        for task in self.tasks:
            if task["id"] == task_id:
                return task
        return None

    def forget(self, task_id: EntityId) -> None:
        self.tasks = [task for task in self.tasks if task["id"] != task_id]

    def change_status(
        self,
        task_id: EntityId,
        status: TaskStatus,
        progress_pct: Optional[int] = None,
    ) -> StatusChange:
        """
        Change a task's status, showing the new value right away.

        The local copy is updated before the request. If the backend refuses,
        the previous status and progress are restored and the error is
        re-raised; if the task no longer exists it is dropped from the list.
        """
        task = self.get(task_id)
        if task is None:
            raise NotFoundError(404, f"task {task_id} is not loaded")
        if self.page.event_id is None:
            raise ValueError("event id cannot be None")

        previous_status = task["status"]
        previous_progress = task["progress_pct"]
        task["status"] = status
        if progress_pct is not None:
            task["progress_pct"] = progress_pct

        try:
            result = self.repository.change_status(
                self.page.event_id, task["department_id"], task_id, status, progress_pct
            )
        except NotFoundError:
            self.forget(task_id)
            raise
        except ApiError:
            task["status"] = previous_status
            task["progress_pct"] = previous_progress
            raise

        task["status"] = result["status"]
        if result["progress_pct"] is not None:
            task["progress_pct"] = result["progress_pct"]
        return result


class TaskBoard:
    """Status columns over the visible tasks; moving a card changes status."""

    def __init__(self, loader: TaskLoader) -> None:
        self.loader = loader

    def columns(
        self, now: Optional[pendulum.DateTime] = None
    ) -> dict[TaskStatus, list[Task]]:
        return group_by_status(self.loader.visible(now))

    def move_card(self, task_id: EntityId, to_status: TaskStatus) -> bool:
        task = self.loader.get(task_id)
        if task is None:
            raise NotFoundError(404, f"task {task_id} is not loaded")
        if task["status"] == to_status:
            return False
        self.loader.change_status(task_id, to_status)
        return True
