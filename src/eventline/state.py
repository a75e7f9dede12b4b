# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Any, Optional, TypedDict

from eventline.model.entity_id import EntityId
from eventline.model.filter import FilterState
from eventline.model.timeline import ScaleType, ThemeType
from eventline.template.filter import get_filter_state_template


class GanttPageState(TypedDict):
    department_id: Optional[EntityId]
    scale: ScaleType
    theme: ThemeType


class PageState:
    """Filter and view selections for one session.

    Created on first use and passed explicitly to whatever needs it; nothing is
    persisted, so a new process starts from the defaults again.
    """

    def __init__(
        self,
        event_id: Optional[EntityId] = None,
        department_id: Optional[EntityId] = None,
        scale: ScaleType = "day",
        theme: ThemeType = "default",
    ) -> None:
        self.event_id = event_id
        self.department_id = department_id
        self._filters: FilterState = get_filter_state_template()
        self._gantt: GanttPageState = {
            "department_id": department_id,
            "scale": scale,
            "theme": theme,
        }

    @property
    def filters(self) -> FilterState:
        return deepcopy(self._filters)

    @property
    def gantt(self) -> GanttPageState:
        return deepcopy(self._gantt)

    def set_filters(self, **patch: Any) -> None:
        unknown = [key for key in patch if key not in self._filters]
        if unknown:
            raise KeyError(f"unknown filter fields: {', '.join(unknown)}")
        self._filters.update(patch)  # type: ignore[typeddict-item]

    def reset_filters(self) -> None:
        view_mode = self._filters["view_mode"]
        self._filters = get_filter_state_template()
        self._filters["view_mode"] = view_mode

    def set_gantt(self, **patch: Any) -> None:
        unknown = [key for key in patch if key not in self._gantt]
        if unknown:
            raise KeyError(f"unknown gantt fields: {', '.join(unknown)}")
        self._gantt.update(patch)  # type: ignore[typeddict-item]

    def set_department(self, department_id: Optional[EntityId]) -> None:
        self.department_id = department_id
        self._gantt["department_id"] = department_id
