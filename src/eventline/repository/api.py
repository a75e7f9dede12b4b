# SPDX-License-Identifier: MIT

import logging
from typing import Any, Optional, cast
from urllib.parse import quote

import requests

from eventline.errors import TransportError, error_for_status
from eventline.model.dependency import (
    DependencyLink,
    DependencyType,
    TaskDependencies,
)
from eventline.model.entity_id import EntityId
from eventline.model.member import Department, Member
from eventline.model.task import StatusChange, Task, TaskDraft, TaskStatus
from eventline.time import datetime_from_str_optional, datetime_to_iso_str_optional

logger = logging.getLogger(__name__)

# snake_case field -> wire (camelCase) field
TASK_WIRE_FIELDS: dict[str, str] = {
    "id": "id",
    "event_id": "eventId",
    "department_id": "departmentId",
    "zone_id": "zoneId",
    "zonal_dept_row_id": "zonalDeptRowId",
    "title": "title",
    "description": "description",
    "priority": "priority",
    "status": "status",
    "progress_pct": "progressPct",
    "start_at": "startAt",
    "due_at": "dueAt",
    "assignee_id": "assigneeId",
    "venue_id": "venueId",
    "creator_id": "creatorId",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
    "completed_at": "completedAt",
}

TASK_DATETIME_FIELDS = {"start_at", "due_at", "created_at", "updated_at", "completed_at"}


def task_from_wire(raw: dict[str, Any], department_id: Optional[EntityId] = None) -> Task:
    task: dict[str, Any] = {}
    for field, wire_field in TASK_WIRE_FIELDS.items():
        value = raw.get(wire_field)
        if field in TASK_DATETIME_FIELDS:
            value = datetime_from_str_optional(value)
        task[field] = value

    # Listing endpoints omit the owning department; it is the one queried
    if task["department_id"] is None:
        task["department_id"] = department_id or (raw.get("department") or {}).get("id")
    task["status"] = TaskStatus(task["status"] or TaskStatus.TODO)
    task["priority"] = int(task["priority"] or 3)
    task["progress_pct"] = int(task["progress_pct"] or 0)
    task["title"] = task["title"] or ""
    return cast(Task, task)


def task_to_wire(task: TaskDraft | dict[str, Any]) -> dict[str, Any]:
    body: dict[str, Any] = {}
    for field, value in task.items():
        if field not in TASK_WIRE_FIELDS or field == "id":
            continue
        if field in TASK_DATETIME_FIELDS:
            value = datetime_to_iso_str_optional(value)
        elif field == "status" and value is not None:
            value = str(value)
        body[TASK_WIRE_FIELDS[field]] = value
    return body


def dependency_link_from_wire(raw: dict[str, Any]) -> DependencyLink:
    # Blockers are reported with the upstream task under "task"
    return {
        "task": task_from_wire(raw.get("task") or raw),
        "dependency_type": DependencyType(
            raw.get("depType") or DependencyType.FINISH_TO_START
        ),
    }


def dependencies_from_wire(raw: Optional[dict[str, Any]]) -> TaskDependencies:
    raw = raw or {}
    return {
        "blockers": [dependency_link_from_wire(b) for b in raw.get("blockers") or []],
        "dependents": [
            dependency_link_from_wire(d) for d in raw.get("dependents") or []
        ],
    }


def member_from_wire(raw: dict[str, Any]) -> Member:
    user = raw.get("user") or {}
    return {
        "user_id": raw["userId"],
        "full_name": user.get("fullName"),
        "display_name": user.get("displayName"),
        "role": raw.get("role"),
    }


class TaskApi:
    """
    Client for the task endpoints of the event-operations backend.

    Every method maps one request/response call. HTTP errors are raised as the
    matching ``ApiError`` subclass; connection problems and timeouts as
    ``TransportError``. Nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _tasks_path(self, event_id: EntityId, department_id: EntityId) -> str:
        return f"/events/{quote(event_id)}/departments/{quote(department_id)}/tasks"

    def _task_path(
        self, event_id: EntityId, department_id: EntityId, task_id: EntityId
    ) -> str:
        return f"{self._tasks_path(event_id, department_id)}/{quote(task_id)}"

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                params={k: v for k, v in (params or {}).items() if v is not None},
                json=json,
                timeout=self.timeout,
            )
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            raise error_for_status(response.status_code, _error_message(response))

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def list_tasks(
        self,
        event_id: EntityId,
        department_id: EntityId,
        assignee_id: Optional[EntityId] = None,
        zone_id: Optional[EntityId] = None,
        zonal_dept_row_id: Optional[EntityId] = None,
    ) -> list[Task]:
        rows = self._request(
            "GET",
            self._tasks_path(event_id, department_id),
            params={
                "assigneeId": assignee_id,
                "zoneId": zone_id,
                "zonalDeptRowId": zonal_dept_row_id,
            },
        )
        return [task_from_wire(row, department_id) for row in rows or []]

    def create_task(
        self, event_id: EntityId, department_id: EntityId, draft: TaskDraft
    ) -> Task:
        row = self._request(
            "POST", self._tasks_path(event_id, department_id), json=task_to_wire(draft)
        )
        return task_from_wire(row, department_id)

    def update_task(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        patch: dict[str, Any],
    ) -> Task:
        row = self._request(
            "PATCH",
            self._task_path(event_id, department_id, task_id),
            json=task_to_wire(patch),
        )
        return task_from_wire(row, department_id)

    def change_status(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        status: TaskStatus,
        progress_pct: Optional[int] = None,
    ) -> StatusChange:
        body: dict[str, Any] = {"status": str(status)}
        if progress_pct is not None:
            body["progressPct"] = progress_pct
        row = self._request(
            "PATCH",
            f"{self._task_path(event_id, department_id, task_id)}/status",
            json=body,
        )
        row = row or {}
        return {
            "status": TaskStatus(row.get("status") or status),
            "progress_pct": row.get("progressPct", progress_pct),
        }

    def delete_task(
        self, event_id: EntityId, department_id: EntityId, task_id: EntityId
    ) -> None:
        self._request("DELETE", self._task_path(event_id, department_id, task_id))

    def list_dependencies(
        self, event_id: EntityId, department_id: EntityId, task_id: EntityId
    ) -> TaskDependencies:
        raw = self._request(
            "GET",
            f"{self._task_path(event_id, department_id, task_id)}/dependencies",
        )
        return dependencies_from_wire(raw)

    def add_dependency(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        blocker_id: EntityId,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
    ) -> None:
        self._request(
            "POST",
            f"{self._task_path(event_id, department_id, task_id)}/dependencies",
            json={"blockerId": blocker_id, "depType": str(dependency_type)},
        )

    def remove_dependency(
        self,
        event_id: EntityId,
        department_id: EntityId,
        task_id: EntityId,
        blocker_id: EntityId,
    ) -> None:
        self._request(
            "DELETE",
            f"{self._task_path(event_id, department_id, task_id)}/dependencies",
            json={"blockerId": blocker_id},
        )

    def search_tasks(
        self,
        event_id: EntityId,
        department_id: EntityId,
        title_query: str,
        target_department_id: EntityId,
    ) -> list[Task]:
        rows = self._request(
            "GET",
            f"{self._tasks_path(event_id, department_id)}/search",
            params={"q": title_query, "departmentId": target_department_id},
        )
        return [task_from_wire(row, target_department_id) for row in rows or []]

    def list_department_members(
        self, event_id: EntityId, department_id: EntityId
    ) -> list[Member]:
        rows = self._request(
            "GET",
            f"/events/{quote(event_id)}/departments/{quote(department_id)}/members",
        )
        return [member_from_wire(row) for row in rows or []]

    def list_departments(self, event_id: EntityId) -> list[Department]:
        rows = self._request("GET", f"/events/{quote(event_id)}/departments")
        return [{"id": row["id"], "name": row.get("name") or row["id"]} for row in rows or []]


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("message"):
        message = payload["message"]
        return ", ".join(message) if isinstance(message, list) else str(message)
    return response.reason or f"HTTP {response.status_code}"
