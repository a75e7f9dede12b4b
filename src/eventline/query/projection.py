# SPDX-License-Identifier: MIT

from abc import ABC, abstractmethod
from typing import Optional

import pendulum

from eventline.model.entity_id import EntityId
from eventline.model.filter import FilterState, ZoneScope
from eventline.model.task import CLOSED_STATUSES, STATUS_ORDER, Task, TaskStatus
from eventline.time import end_of_local_day, now_utc, start_of_local_day


def is_overdue(task: Task, now: pendulum.DateTime) -> bool:
    return (
        task["due_at"] is not None
        and task["due_at"] < now
        and task["status"] not in CLOSED_STATUSES
    )


class Predicate(ABC):
    @abstractmethod
    def include(self, task: Task) -> bool: ...

    def filter(self, tasks: list[Task]) -> list[Task]:
        return [task for task in tasks if self.include(task)]


class And(Predicate):
    def __init__(self) -> None:
        self.predicates: list[Predicate] = []

    def add_predicate(self, predicate: Predicate) -> None:
        self.predicates.append(predicate)

    def include(self, task: Task) -> bool:
        return all(predicate.include(task) for predicate in self.predicates)


class StatusIn(Predicate):
    def __init__(self, statuses: list[TaskStatus]) -> None:
        self.statuses = set(statuses)

    def include(self, task: Task) -> bool:
        return task["status"] in self.statuses


class DepartmentIn(Predicate):
    def __init__(self, department_ids: list[EntityId]) -> None:
        self.department_ids = set(department_ids)

    def include(self, task: Task) -> bool:
        return task["department_id"] in self.department_ids


class PriorityEquals(Predicate):
    def __init__(self, priority: int) -> None:
        self.priority = priority

    def include(self, task: Task) -> bool:
        return task["priority"] == self.priority


class AssigneeEquals(Predicate):
    def __init__(self, assignee_id: EntityId) -> None:
        self.assignee_id = assignee_id

    def include(self, task: Task) -> bool:
        return task["assignee_id"] == self.assignee_id


class TextContains(Predicate):
    """Case-insensitive match against title or description."""

    def __init__(self, query: str) -> None:
        self.term = query.strip().lower()

    def include(self, task: Task) -> bool:
        return (
            self.term in task["title"].lower()
            or self.term in (task["description"] or "").lower()
        )


class DueBetween(Predicate):
    """Due date within [due_from, due_to]; ``due_to`` counts up to the end of its day."""

    def __init__(
        self,
        due_from: Optional[pendulum.DateTime],
        due_to: Optional[pendulum.DateTime],
    ) -> None:
        self.lower = start_of_local_day(due_from) if due_from is not None else None
        self.upper = end_of_local_day(due_to) if due_to is not None else None

    def include(self, task: Task) -> bool:
        due = task["due_at"]
        if due is None:
            return False
        if self.lower is not None and due < self.lower:
            return False
        if self.upper is not None and due > self.upper:
            return False
        return True


class Overdue(Predicate):
    def __init__(self, now: pendulum.DateTime) -> None:
        self.now = now

    def include(self, task: Task) -> bool:
        return is_overdue(task, self.now)


class InZoneScope(Predicate):
    """Central tasks have no zone; zonal tasks carry a zone and maybe a zonal row."""

    def __init__(
        self,
        zone_scope: ZoneScope,
        zone_id: Optional[EntityId] = None,
        zonal_dept_row_id: Optional[EntityId] = None,
    ) -> None:
        self.zone_scope = zone_scope
        self.zone_id = zone_id
        self.zonal_dept_row_id = zonal_dept_row_id

    def include(self, task: Task) -> bool:
        if self.zone_scope == "central":
            return task["zone_id"] is None
        if self.zone_scope == "zonal" and task["zone_id"] is None:
            return False
        if self.zone_id is not None and task["zone_id"] != self.zone_id:
            return False
        if (
            self.zonal_dept_row_id is not None
            and task["zonal_dept_row_id"] != self.zonal_dept_row_id
        ):
            return False
        return True


def build_predicate(filters: FilterState, now: Optional[pendulum.DateTime] = None) -> And:
    predicate = And()

    if filters["statuses"]:
        predicate.add_predicate(StatusIn(filters["statuses"]))
    if filters["department_ids"]:
        predicate.add_predicate(DepartmentIn(filters["department_ids"]))
    if filters["priority"] is not None:
        predicate.add_predicate(PriorityEquals(filters["priority"]))
    if filters["assignee_id"] is not None:
        predicate.add_predicate(AssigneeEquals(filters["assignee_id"]))
    if filters["query"].strip():
        predicate.add_predicate(TextContains(filters["query"]))
    if filters["due_from"] is not None or filters["due_to"] is not None:
        predicate.add_predicate(DueBetween(filters["due_from"], filters["due_to"]))
    if filters["overdue_only"]:
        predicate.add_predicate(Overdue(now if now is not None else now_utc()))
    if (
        filters["zone_scope"] != "all"
        or filters["zone_id"] is not None
        or filters["zonal_dept_row_id"] is not None
    ):
        predicate.add_predicate(
            InZoneScope(
                filters["zone_scope"], filters["zone_id"], filters["zonal_dept_row_id"]
            )
        )

    return predicate


def project(
    tasks: list[Task],
    filters: FilterState,
    now: Optional[pendulum.DateTime] = None,
) -> list[Task]:
    """
    Derive the visible task list from raw tasks and the current filters.

    All active predicates must hold. Empty selections (no statuses, no
    departments, no priority, ...) do not restrict the result. Input order is
    preserved.

    Args:
        tasks: Raw task list
        filters: Current filter state
        now: Reference instant for the overdue predicate (defaults to now)

    Returns:
        The tasks that pass every active predicate
    """
    return build_predicate(filters, now).filter(tasks)


def group_by_status(tasks: list[Task]) -> dict[TaskStatus, list[Task]]:
    """Board columns, always all five and always in display order."""
    grouped: dict[TaskStatus, list[Task]] = {status: [] for status in STATUS_ORDER}
    for task in tasks:
        grouped[TaskStatus(task["status"])].append(task)
    return grouped


def active_filter_count(filters: FilterState) -> int:
    return sum(
        [
            len(filters["department_ids"]) > 0,
            len(filters["statuses"]) > 0,
            filters["priority"] is not None,
            filters["assignee_id"] is not None,
            filters["query"].strip() != "",
            filters["due_from"] is not None or filters["due_to"] is not None,
            filters["overdue_only"],
            filters["zone_scope"] != "all"
            or filters["zone_id"] is not None
            or filters["zonal_dept_row_id"] is not None,
        ]
    )
