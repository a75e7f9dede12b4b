# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from time import monotonic
from typing import Any, Callable, NamedTuple, Optional

from eventline.bus import EventBus
from eventline.model.entity_id import EntityId
from eventline.model.member import Member
from eventline.model.task import StatusChange, Task, TaskDraft, TaskStatus
from eventline.repository.api import TaskApi

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 120.0


class ListKey(NamedTuple):
    event_id: EntityId
    department_id: EntityId
    assignee_id: Optional[EntityId]
    zone_id: Optional[EntityId]
    zonal_dept_row_id: Optional[EntityId]


class TaskRepository:
    """
    Task access with a short-lived list cache.

    Cached lists are keyed by every request parameter, never by call order, so
    a list fetched for one department or assignee can not answer a request for
    another. Mutations drop the cached lists of their department and announce
    the change on the bus.
    """

    def __init__(
        self,
        api: TaskApi,
        bus: EventBus,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.api = api
        self.bus = bus
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._lists: dict[ListKey, tuple[float, list[Task]]] = {}
        self._members: dict[tuple[EntityId, EntityId], list[Member]] = {}

    def list_tasks(
        self,
        event_id: EntityId,
        department_id: EntityId,
        assignee_id: Optional[EntityId] = None,
        zone_id: Optional[EntityId] = None,
        zonal_dept_row_id: Optional[EntityId] = None,
        force: bool = False,
    ) -> list[Task]:
        key = ListKey(event_id, department_id, assignee_id, zone_id, zonal_dept_row_id)
        now = self.clock()
        cached = self._lists.get(key)
        if not force and cached is not None and now - cached[0] < self.ttl_seconds:
            return deepcopy(cached[1])

        tasks = self.api.list_tasks(
            event_id,
            department_id,
            assignee_id=assignee_id,
            zone_id=zone_id,
            zonal_dept_row_id=zonal_dept_row_id,
        )
        self._lists[key] = (now, tasks)
        return deepcopy(tasks)

    def invalidate(self, event_id: EntityId, department_id: EntityId) -> None:
        for key in [
            key
            for key in self._lists
            if key.event_id == event_id and key.department_id == department_id
        ]:
            del self._lists[key]

    def __changed(self, event_id: EntityId, department_id: EntityId) -> None:
        self.invalidate(event_id, department_id)
        self.bus.emit_tasks_changed(event_id, department_id)

    def create_task(
        self, event_id: EntityId, department_id: EntityId, draft: TaskDraft
    ) -> Task:
        task = self.api.create_task(event_id, department_id, draft)
        logger.info("created task %s in department %s", task["id"], department_id)
        self.__changed(event_id, department_id)
        return task

    def update_task(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        patch: dict[str, Any],
    ) -> Task:
        task = self.api.update_task(event_id, department_id, task_id, patch)
        self.__changed(event_id, department_id)
        return task

    def change_status(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        status: TaskStatus,
        progress_pct: Optional[int] = None,
    ) -> StatusChange:
        result = self.api.change_status(
            event_id, department_id, task_id, status, progress_pct
        )
        self.__changed(event_id, department_id)
        return result

    def delete_task(
        self, event_id: EntityId, department_id: EntityId, task_id: EntityId
    ) -> None:
        self.api.delete_task(event_id, department_id, task_id)
        self.__changed(event_id, department_id)

    def search_tasks(
        self,
        event_id: EntityId,
        department_id: EntityId,
        title_query: str,
        target_department_id: EntityId,
    ) -> list[Task]:
        return self.api.search_tasks(
            event_id, department_id, title_query, target_department_id
        )

    def list_department_members(
        self, event_id: EntityId, department_id: EntityId
    ) -> list[Member]:
        key = (event_id, department_id)
        if key not in self._members:
            self._members[key] = self.api.list_department_members(
                event_id, department_id
            )
        return deepcopy(self._members[key])
