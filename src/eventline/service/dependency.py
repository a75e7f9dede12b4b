# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from typing import Iterable, Optional

from eventline.errors import ApiError
from eventline.model.dependency import (
    DependencyEdge,
    DependencyLink,
    DependencyType,
    ReconcilePlan,
    ReconcileResult,
    ResolvedLink,
    TaskDependencies,
)
from eventline.model.entity_id import EntityId
from eventline.model.member import Department
from eventline.repository.api import TaskApi

logger = logging.getLogger(__name__)

SAME_DEPARTMENT_LABEL = "Same Dept"


class DependencyGraph:
    """Blocker -> blocked edges seen so far, across departments."""

    def __init__(self) -> None:
        self._edges: dict[tuple[EntityId, EntityId], DependencyType] = {}

    def add_edge(
        self,
        blocker_id: EntityId,
        blocked_id: EntityId,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
    ) -> None:
        self._edges[(blocker_id, blocked_id)] = dependency_type

    def remove_edge(self, blocker_id: EntityId, blocked_id: EntityId) -> None:
        self._edges.pop((blocker_id, blocked_id), None)

    def has_edge(self, blocker_id: EntityId, blocked_id: EntityId) -> bool:
        return (blocker_id, blocked_id) in self._edges

    def blockers_of(self, task_id: EntityId) -> list[EntityId]:
        return [blocker for (blocker, blocked) in self._edges if blocked == task_id]

    def dependents_of(self, task_id: EntityId) -> list[EntityId]:
        return [blocked for (blocker, blocked) in self._edges if blocker == task_id]

    def edges(self) -> list[DependencyEdge]:
        return [
            {"blocker_id": blocker, "blocked_id": blocked, "dependency_type": kind}
            for (blocker, blocked), kind in self._edges.items()
        ]

    def absorb(self, task_id: EntityId, dependencies: TaskDependencies) -> None:
        """Replace every edge touching ``task_id`` with those of a fresh listing."""
        for key in [key for key in self._edges if task_id in key]:
            del self._edges[key]
        for link in dependencies["blockers"]:
            self.add_edge(link["task"]["id"], task_id, link["dependency_type"])
        for link in dependencies["dependents"]:
            self.add_edge(task_id, link["task"]["id"], link["dependency_type"])

    def would_create_cycle(self, blocker_id: EntityId, blocked_id: EntityId) -> bool:
        """True when ``blocked_id`` already (transitively) blocks ``blocker_id``."""
        if blocker_id == blocked_id:
            return True
        seen: set[EntityId] = set()
        pending = [blocked_id]
        while pending:
            current = pending.pop()
            if current == blocker_id:
                return True
            if current in seen:
                continue
            seen.add(current)
            pending.extend(self.dependents_of(current))
        return False


def plan_reconcile(
    current_ids: Iterable[EntityId], desired_ids: Iterable[EntityId]
) -> ReconcilePlan:
    current = list(dict.fromkeys(current_ids))
    desired = list(dict.fromkeys(desired_ids))
    return {
        "to_add": [blocker for blocker in desired if blocker not in current],
        "to_remove": [blocker for blocker in current if blocker not in desired],
    }


def blocker_ids(dependencies: TaskDependencies) -> list[EntityId]:
    return [link["task"]["id"] for link in dependencies["blockers"]]


def dependent_ids(dependencies: TaskDependencies) -> list[EntityId]:
    return [link["task"]["id"] for link in dependencies["dependents"]]


def resolve_departments(
    links: list[DependencyLink],
    departments: list[Department],
    home_department_id: EntityId,
) -> list[ResolvedLink]:
    names = {department["id"]: department["name"] for department in departments}
    resolved: list[ResolvedLink] = []
    for link in links:
        department_id = link["task"]["department_id"]
        cross = department_id is not None and department_id != home_department_id
        resolved.append(
            {
                "task": link["task"],
                "dependency_type": link["dependency_type"],
                "department_name": names.get(department_id, department_id)
                if cross
                else SAME_DEPARTMENT_LABEL,
                "cross_department": cross,
            }
        )
    return resolved


class DependencyGraphStore:
    """
    Dependency edits for tasks, backed by the REST API.

    The listing of each task is cached as its detail view. Every mutation
    invalidates that entry and fetches it again so the dependency panel shows
    what the backend holds. There is no client-side cycle or duplicate check.
    """

    def __init__(self, api: TaskApi, graph: Optional[DependencyGraph] = None) -> None:
        self.api = api
        self.graph = graph if graph is not None else DependencyGraph()
        self._details: dict[EntityId, TaskDependencies] = {}

    def cached(self, task_id: EntityId) -> Optional[TaskDependencies]:
        details = self._details.get(task_id)
        return deepcopy(details) if details is not None else None

    def invalidate(self, task_id: EntityId) -> None:
        self._details.pop(task_id, None)

    def list_dependencies(
        self, event_id: EntityId, department_id: EntityId, task_id: EntityId
    ) -> TaskDependencies:
        dependencies = self.api.list_dependencies(event_id, department_id, task_id)
        self._details[task_id] = dependencies
        self.graph.absorb(task_id, dependencies)
        return deepcopy(dependencies)

    def refresh(
        self, event_id: EntityId, department_id: EntityId, task_id: EntityId
    ) -> Optional[TaskDependencies]:
        self.invalidate(task_id)
        try:
            return self.list_dependencies(event_id, department_id, task_id)
        except ApiError as e:
            logger.warning("could not refresh dependencies of %s: %s", task_id, e)
            return None

    def add_dependency(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        blocker_id: EntityId,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
        refresh: bool = True,
    ) -> None:
        if self.graph.would_create_cycle(blocker_id, task_id):
            logger.warning(
                "linking %s -> %s closes a dependency cycle", blocker_id, task_id
            )
        try:
            self.api.add_dependency(
                event_id, department_id, task_id, blocker_id, dependency_type
            )
        finally:
            self.invalidate(task_id)
        self.graph.add_edge(blocker_id, task_id, dependency_type)
        if refresh:
            self.refresh(event_id, department_id, task_id)

    def remove_dependency(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        blocker_id: EntityId,
        refresh: bool = True,
    ) -> bool:
        """Remove one edge. API failures are logged and reported as False."""
        try:
            self.api.remove_dependency(event_id, department_id, task_id, blocker_id)
        except ApiError as e:
            logger.warning(
                "failed to remove dependency %s -> %s: %s", blocker_id, task_id, e
            )
            return False
        finally:
            self.invalidate(task_id)
        self.graph.remove_edge(blocker_id, task_id)
        if refresh:
            self.refresh(event_id, department_id, task_id)
        return True

    def reconcile(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        desired_blocker_ids: Iterable[EntityId],
        current_blocker_ids: Optional[Iterable[EntityId]] = None,
    ) -> ReconcileResult:
        """
        Bring the blockers of a task to ``desired_blocker_ids``.

        Issues one add or remove call per differing id, one after another. Each
        call is caught on its own so a failure does not stop the rest; partial
        application is possible and is not rolled back.

        Args:
            event_id: Event of the task
            department_id: Department owning the task
            task_id: The blocked task
            desired_blocker_ids: Blocker ids the task should end up with
            current_blocker_ids: Known server-side blockers (listed when omitted)

        Returns:
            The ids added, removed and failed
        """
        if current_blocker_ids is None:
            current_blocker_ids = blocker_ids(
                self.list_dependencies(event_id, department_id, task_id)
            )
        plan = plan_reconcile(current_blocker_ids, desired_blocker_ids)
        result: ReconcileResult = {"added": [], "removed": [], "failed": []}

        for blocker_id in plan["to_add"]:
            try:
                self.add_dependency(
                    event_id, department_id, task_id, blocker_id, refresh=False
                )
                result["added"].append(blocker_id)
            except ApiError as e:
                logger.warning(
                    "failed to add dependency %s -> %s: %s", blocker_id, task_id, e
                )
                result["failed"].append(blocker_id)

        for blocker_id in plan["to_remove"]:
            if self.remove_dependency(
                event_id, department_id, task_id, blocker_id, refresh=False
            ):
                result["removed"].append(blocker_id)
            else:
                result["failed"].append(blocker_id)

        if plan["to_add"] or plan["to_remove"]:
            self.refresh(event_id, department_id, task_id)
        return result
