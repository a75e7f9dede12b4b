# SPDX-License-Identifier: MIT

from enum import StrEnum
from typing import TypedDict

from eventline.model.entity_id import EntityId
from eventline.model.task import Task


class DependencyType(StrEnum):
    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"


class DependencyLink(TypedDict):
    task: Task
    dependency_type: DependencyType


class TaskDependencies(TypedDict):
    blockers: list[DependencyLink]
    dependents: list[DependencyLink]


class DependencyEdge(TypedDict):
    blocker_id: EntityId
    blocked_id: EntityId
    dependency_type: DependencyType


class ReconcilePlan(TypedDict):
    to_add: list[EntityId]
    to_remove: list[EntityId]


class ReconcileResult(TypedDict):
    added: list[EntityId]
    removed: list[EntityId]
    failed: list[EntityId]


class ResolvedLink(TypedDict):
    task: Task
    dependency_type: DependencyType
    department_name: str
    cross_department: bool
