# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import NotRequired, Optional, TypedDict

import pendulum

from eventline.model.entity_id import EntityId


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"
    CANCELED = "canceled"


# Board column order
STATUS_ORDER: list[TaskStatus] = [
    TaskStatus.TODO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.BLOCKED,
    TaskStatus.DONE,
    TaskStatus.CANCELED,
]

CLOSED_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.DONE, TaskStatus.CANCELED}
)


class Task(TypedDict):
    id: EntityId
    event_id: Optional[EntityId]
    department_id: EntityId
    zone_id: Optional[EntityId]
    zonal_dept_row_id: Optional[EntityId]
    title: str
    description: Optional[str]
    priority: int
    status: TaskStatus
    progress_pct: int
    start_at: Optional[pendulum.DateTime]
    due_at: Optional[pendulum.DateTime]
    assignee_id: Optional[EntityId]
    venue_id: Optional[EntityId]
    creator_id: Optional[EntityId]
    created_at: Optional[pendulum.DateTime]
    updated_at: Optional[pendulum.DateTime]
    completed_at: Optional[pendulum.DateTime]


class TaskDraft(TypedDict):
    title: str
    priority: int
    description: NotRequired[Optional[str]]
    start_at: NotRequired[Optional[pendulum.DateTime]]
    due_at: NotRequired[Optional[pendulum.DateTime]]
    assignee_id: NotRequired[Optional[EntityId]]
    venue_id: NotRequired[Optional[EntityId]]
    zone_id: NotRequired[Optional[EntityId]]
    zonal_dept_row_id: NotRequired[Optional[EntityId]]


class StatusChange(TypedDict):
    status: TaskStatus
    progress_pct: Optional[int]
