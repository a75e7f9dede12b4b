# SPDX-License-Identifier: MIT

import logging
from time import monotonic
from typing import Callable, Iterable, NamedTuple, Optional

from eventline.errors import ApiError, LinkError
from eventline.model.dependency import DependencyType
from eventline.model.entity_id import EntityId
from eventline.model.task import Task
from eventline.repository.task import TaskRepository
from eventline.service.dependency import DependencyGraphStore
from eventline.template.task import get_task_draft_template

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 250


class LinkResolver:
    """Finds tasks to link as blockers, or creates one and links it."""

    def __init__(self, tasks: TaskRepository, dependencies: DependencyGraphStore) -> None:
        self.tasks = tasks
        self.dependencies = dependencies

    def search(
        self,
        event_id: EntityId,
        department_scope_id: EntityId,
        title_query: str,
        target_department_id: EntityId,
        exclude_ids: Iterable[EntityId] = (),
    ) -> list[Task]:
        excluded = set(exclude_ids)
        candidates = self.tasks.search_tasks(
            event_id, department_scope_id, title_query.strip(), target_department_id
        )
        return [task for task in candidates if task["id"] not in excluded]

    def create_and_link(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        title: str,
        target_department_id: EntityId,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
    ) -> Task:
        """
        Create a task in ``target_department_id`` and make it block ``task_id``.

        Two sequential calls. When linking fails the new task stays where it
        is and a ``LinkError`` naming it is raised.
        """
        if not title.strip():
            raise ValueError("title cannot be empty")

        new_task = self.tasks.create_task(
            event_id, target_department_id, get_task_draft_template(title.strip())
        )
        try:
            self.dependencies.add_dependency(
                event_id, department_id, task_id, new_task["id"], dependency_type
            )
        except ApiError as e:
            logger.warning(
                "created task %s but could not link it to %s: %s",
                new_task["id"],
                task_id,
                e,
            )
            raise LinkError(
                f"created task {new_task['id']} but could not link it: {e}",
                new_task["id"],
            ) from e
        return new_task


class SearchDebouncer:
    """Releases a query only after input has been quiet for ``delay_ms``."""

    def __init__(
        self,
        delay_ms: int = DEFAULT_DEBOUNCE_MS,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.delay = delay_ms / 1000
        self.clock = clock
        self._pending: Optional[str] = None
        self._last_input: float = 0.0

    def submit(self, query: str) -> None:
        self._pending = query
        self._last_input = self.clock()

    def due(self) -> Optional[str]:
        """The pending query once the quiet period passed; each query is released once."""
        if self._pending is None:
            return None
        if self.clock() - self._last_input < self.delay:
            return None
        query, self._pending = self._pending, None
        return query

    def cancel(self) -> None:
        self._pending = None


class SearchRequest(NamedTuple):
    query: str
    target_department_id: EntityId


class SearchSession:
    """
    Search-to-link state for one task being edited.

    Results belong to the (query, target department) pair that produced them;
    a response for a pair that is no longer current is dropped.
    """

    def __init__(
        self,
        resolver: LinkResolver,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        target_department_id: Optional[EntityId] = None,
        blocker_ids: Iterable[EntityId] = (),
        dependent_ids: Iterable[EntityId] = (),
        debouncer: Optional[SearchDebouncer] = None,
    ) -> None:
        self.resolver = resolver
        self.debouncer = debouncer
        self.event_id = event_id
        self.department_id = department_id
        self.task_id = task_id
        self.target_department_id = target_department_id or department_id
        self.blocker_ids: list[EntityId] = list(blocker_ids)
        self.dependent_ids: list[EntityId] = list(dependent_ids)
        self.selected: list[Task] = []
        self.query = ""
        self.results: list[Task] = []

    @property
    def excluded_ids(self) -> set[EntityId]:
        return {
            self.task_id,
            *self.blocker_ids,
            *self.dependent_ids,
            *(task["id"] for task in self.selected),
        }

    def current_request(self) -> SearchRequest:
        return SearchRequest(self.query, self.target_department_id)

    def set_query(self, query: str) -> None:
        self.query = query

    def type_query(self, query: str) -> None:
        """Queue a query typed into the search box; without a debouncer it applies at once."""
        if self.debouncer is None:
            self.set_query(query)
            return
        self.debouncer.submit(query)

    def poll(self) -> Optional[list[Task]]:
        """Search for the queued query once typing has paused, otherwise ``None``."""
        if self.debouncer is None:
            return None
        query = self.debouncer.due()
        if query is None:
            return None
        self.set_query(query)
        return self.search()

    def begin_search(self) -> SearchRequest:
        return self.current_request()

    def complete_search(self, request: SearchRequest, results: list[Task]) -> bool:
        if request != self.current_request():
            logger.debug("discarding stale results for %r", request.query)
            return False
        excluded = self.excluded_ids
        self.results = [task for task in results if task["id"] not in excluded]
        return True

    def search(self) -> list[Task]:
        request = self.begin_search()
        results = self.resolver.search(
            self.event_id,
            self.department_id,
            request.query,
            request.target_department_id,
            exclude_ids=self.excluded_ids,
        )
        self.complete_search(request, results)
        return list(self.results)

    def set_target_department(self, department_id: EntityId) -> list[Task]:
        """Switch the department searched in. Already selected tasks are kept as is."""
        self.target_department_id = department_id
        self.results = []
        return self.search()

    def select(self, task: Task) -> None:
        if task["id"] in self.excluded_ids:
            return
        self.selected.append(task)
        self.results = [result for result in self.results if result["id"] != task["id"]]

    def link(
        self,
        blocker_id: EntityId,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
    ) -> None:
        self.resolver.dependencies.add_dependency(
            self.event_id, self.department_id, self.task_id, blocker_id, dependency_type
        )
        self.blocker_ids.append(blocker_id)
        self.results = []
        self.query = ""

    def create_and_link(self, title: str) -> Task:
        new_task = self.resolver.create_and_link(
            self.event_id,
            self.department_id,
            self.task_id,
            title,
            self.target_department_id,
        )
        self.blocker_ids.append(new_task["id"])
        return new_task


