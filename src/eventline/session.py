# SPDX-License-Identifier: MIT

from typing import Iterable, Optional

from eventline.bus import EventBus
from eventline.configuration import Configuration
from eventline.model.entity_id import EntityId
from eventline.model.task import Task
from eventline.repository.api import TaskApi
from eventline.repository.task import TaskRepository
from eventline.service.dependency import DependencyGraphStore
from eventline.service.link import LinkResolver, SearchDebouncer, SearchSession
from eventline.service.tasks import TaskBoard, TaskLoader
from eventline.service.timeline import DateGrid
from eventline.state import PageState


class Session:
    """Wires the API client, repositories and services for one process."""

    def __init__(
        self,
        config: Configuration,
        api: Optional[TaskApi] = None,
        event_id: Optional[EntityId] = None,
        department_id: Optional[EntityId] = None,
    ) -> None:
        self.config = config
        self.api = (
            api
            if api is not None
            else TaskApi(
                config["api_base_url"],
                token=config["api_token"],
                timeout=config["request_timeout_seconds"],
            )
        )
        self.bus = EventBus()
        self.page = PageState(
            event_id=event_id or config["event_id"],
            department_id=department_id or config["department_id"],
            scale=config["scale"],
            theme=config["theme"],
        )
        self.tasks = TaskRepository(
            self.api, self.bus, ttl_seconds=config["task_cache_ttl_seconds"]
        )
        self.dependencies = DependencyGraphStore(self.api)
        self.resolver = LinkResolver(self.tasks, self.dependencies)
        self.loader = TaskLoader(self.tasks, self.bus, self.page)
        self.loader.subscribe()
        self.board = TaskBoard(self.loader)

    def require_scope(self) -> tuple[EntityId, EntityId]:
        if self.page.event_id is None:
            raise ValueError("no event selected, pass --event or set event_id")
        if self.page.department_id is None:
            raise ValueError(
                "no department selected, pass --department or set department_id"
            )
        return self.page.event_id, self.page.department_id

    def search_session(
        self,
        task_id: EntityId,
        target_department_id: Optional[EntityId] = None,
        blocker_ids: Iterable[EntityId] = (),
        dependent_ids: Iterable[EntityId] = (),
    ) -> SearchSession:
        """Search-to-link state for one edited task, debounced by ``search_debounce_ms``."""
        event_id, department_id = self.require_scope()
        return SearchSession(
            self.resolver,
            event_id,
            department_id,
            task_id,
            target_department_id=target_department_id,
            blocker_ids=blocker_ids,
            dependent_ids=dependent_ids,
            debouncer=SearchDebouncer(self.config["search_debounce_ms"]),
        )

    def date_grid(self, tasks: list[Task]) -> DateGrid:
        return DateGrid(
            tasks,
            scale=self.page.gantt["scale"],
            lead_days=self.config["lead_days"],
            trail_days=self.config["trail_days"],
            empty_days=self.config["empty_window_days"],
        )
