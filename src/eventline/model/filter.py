# SPDX-License-Identifier: MIT

from typing import Literal, Optional, TypedDict, TypeAlias

import pendulum

from eventline.model.entity_id import EntityId
from eventline.model.task import TaskStatus

ViewMode: TypeAlias = Literal["list", "board"]

ZoneScope: TypeAlias = Literal["all", "central", "zonal"]


class FilterState(TypedDict):
    department_ids: list[EntityId]
    statuses: list[TaskStatus]
    priority: Optional[int]
    assignee_id: Optional[EntityId]
    query: str
    due_from: Optional[pendulum.DateTime]
    due_to: Optional[pendulum.DateTime]
    overdue_only: bool
    zone_scope: ZoneScope
    zone_id: Optional[EntityId]
    zonal_dept_row_id: Optional[EntityId]
    view_mode: ViewMode
