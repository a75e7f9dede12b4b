# SPDX-License-Identifier: MIT

from typing import Optional

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from eventline.model.entity_id import EntityId
from eventline.model.task import STATUS_ORDER, Task, TaskStatus
from eventline.model.timeline import ThemeType
from eventline.view.header import header
from eventline.view.util import (
    PRIORITY_COLORS,
    STATUS_LABELS,
    assignee_name,
    short_date,
    status_color,
)

COLUMN_WIDTH = 28


def board_view(
    scope: str,
    columns: dict[TaskStatus, list[Task]],
    member_names: Optional[dict[EntityId, str]] = None,
    theme: ThemeType = "default",
) -> None:
    """Render one panel per status with a card for each task."""
    header(scope, "board")

    panels = []
    for status in STATUS_ORDER:
        tasks = columns.get(status, [])
        color = status_color(status, theme)
        body = Text()
        for index, task in enumerate(tasks):
            if index:
                body.append("\n\n")
            body.append_text(_card(task, member_names))
        if not tasks:
            body.append("empty", style="dim")
        panels.append(
            Panel(
                body,
                title=f"[{color}]{STATUS_LABELS[status]}[/{color}] ({len(tasks)})",
                title_align="left",
                border_style=color,
                width=COLUMN_WIDTH,
            )
        )

    console = Console()
    console.print(Columns(panels))


def _card(task: Task, member_names: Optional[dict[EntityId, str]]) -> Text:
    card = Text()
    card.append(f"P{task['priority']} ", style=PRIORITY_COLORS.get(task["priority"], "grey50"))
    card.append(task["title"], style="bold")
    card.append(f"\n{task['id']}", style="dim")
    card.append(f"\n{assignee_name(task, member_names)}")
    due = short_date(task, "due_at")
    if due is not None:
        card.append(f"  due {due}", style="dim")
    if task["progress_pct"]:
        card.append(f"  {task['progress_pct']}%")
    return card
