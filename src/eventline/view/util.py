# SPDX-License-Identifier: MIT

from typing import Optional

from eventline.model.entity_id import EntityId
from eventline.model.task import Task, TaskStatus
from eventline.model.timeline import ThemeType
from eventline.time import datetime_to_short_day_str

STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.TODO: "To do",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.BLOCKED: "Blocked",
    TaskStatus.DONE: "Done",
    TaskStatus.CANCELED: "Canceled",
}

THEMES: dict[ThemeType, dict[TaskStatus, str]] = {
    "default": {
        TaskStatus.TODO: "grey70",
        TaskStatus.IN_PROGRESS: "blue",
        TaskStatus.BLOCKED: "red",
        TaskStatus.DONE: "green",
        TaskStatus.CANCELED: "grey50",
    },
    "pastel": {
        TaskStatus.TODO: "grey85",
        TaskStatus.IN_PROGRESS: "sky_blue1",
        TaskStatus.BLOCKED: "light_pink1",
        TaskStatus.DONE: "pale_green1",
        TaskStatus.CANCELED: "grey66",
    },
    "contrast": {
        TaskStatus.TODO: "white",
        TaskStatus.IN_PROGRESS: "blue3",
        TaskStatus.BLOCKED: "red3",
        TaskStatus.DONE: "green4",
        TaskStatus.CANCELED: "grey35",
    },
}

PRIORITY_COLORS: dict[int, str] = {
    1: "bright_red",
    2: "dark_orange",
    3: "gold1",
    4: "green",
}

TODAY_STYLE = "on dark_red"


def status_color(status: TaskStatus, theme: ThemeType = "default") -> str:
    return THEMES.get(theme, THEMES["default"]).get(status, "grey50")


def priority_markup(priority: int) -> str:
    color = PRIORITY_COLORS.get(priority, "grey50")
    return f"[{color}]P{priority}[/{color}]"


def assignee_name(task: Task, names: Optional[dict[EntityId, str]]) -> str:
    if task["assignee_id"] is None:
        return "Unassigned"
    return (names or {}).get(task["assignee_id"], task["assignee_id"])


def short_date(task: Task, field: str) -> Optional[str]:
    value = task.get(field)
    if value is None:
        return None
    return datetime_to_short_day_str(value)  # type: ignore[arg-type]


def truncate(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text.ljust(width)
    if width == 1:
        return "…"
    return text[: width - 1] + "…"
