# SPDX-License-Identifier: MIT

from typing import Optional

import pendulum
from rich import box
from rich.console import Console
from rich.table import Table

from eventline.model.dependency import ResolvedLink
from eventline.model.entity_id import EntityId
from eventline.model.task import Task
from eventline.model.timeline import ThemeType
from eventline.query.projection import is_overdue
from eventline.time import datetime_to_display_local_date_str_optional, now_utc
from eventline.view.header import header
from eventline.view.util import (
    STATUS_LABELS,
    assignee_name,
    priority_markup,
    status_color,
)


def tasks_view(
    scope: str,
    report_name: str,
    tasks: list[Task],
    member_names: Optional[dict[EntityId, str]] = None,
    theme: ThemeType = "default",
    columns: list[str] = [
        "id",
        "status",
        "priority",
        "title",
        "assignee",
        "due_at",
        "progress_pct",
    ],
    no_wrap: bool = False,
) -> None:
    header(scope, report_name)

    now = now_utc()
    tasks_table = Table(box=box.SIMPLE)
    for column in columns:
        if no_wrap and column not in ("id", "status"):
            tasks_table.add_column(column, no_wrap=True, overflow="ellipsis")
        else:
            tasks_table.add_column(column)

    for task in tasks:
        row = []
        for column in columns:
            column_value = ""
            if column == "status":
                color = status_color(task["status"], theme)
                column_value = f"[{color}]{STATUS_LABELS[task['status']]}[/{color}]"
            elif column == "priority":
                column_value = priority_markup(task["priority"])
            elif column == "assignee":
                column_value = assignee_name(task, member_names)
            elif column == "progress_pct":
                column_value = f"{task['progress_pct']}%"
            elif column == "due_at":
                column_value = task["due_at"].to_date_string() if task["due_at"] else ""
                if is_overdue(task, now):
                    column_value = f"[red]{column_value}[/red]"
            elif isinstance(task[column], pendulum.DateTime):  # type: ignore[literal-required]
                column_value = task[column].to_date_string()  # type: ignore[literal-required]
            elif task[column] is not None:  # type: ignore[literal-required]
                column_value = str(task[column])  # type: ignore[literal-required]
            row.append(column_value)
        tasks_table.add_row(*row)

    if len(tasks) == 0:
        tasks_table.add_row("[dim]no tasks[/dim]", *["" for _ in columns[1:]])

    console = Console()
    console.print(tasks_table)


def single_task_view(
    scope: str,
    task: Task,
    member_names: Optional[dict[EntityId, str]] = None,
    theme: ThemeType = "default",
) -> None:
    header(scope, "task")

    color = status_color(task["status"], theme)
    task_table = Table(box=box.SIMPLE)
    task_table.add_column("property")
    task_table.add_column("value")

    task_table.add_row("id", task["id"])
    task_table.add_row("title", task["title"])
    task_table.add_row("description", task["description"] or "")
    task_table.add_row("department", task["department_id"])
    task_table.add_row(
        "status", f"[{color}]{STATUS_LABELS[task['status']]}[/{color}]"
    )
    task_table.add_row("priority", priority_markup(task["priority"]))
    task_table.add_row("progress", f"{task['progress_pct']}%")
    task_table.add_row("assignee", assignee_name(task, member_names))
    task_table.add_row(
        "start", datetime_to_display_local_date_str_optional(task["start_at"]) or ""
    )
    task_table.add_row(
        "due", datetime_to_display_local_date_str_optional(task["due_at"]) or ""
    )
    task_table.add_row("zone", task["zone_id"] or "central")
    task_table.add_row(
        "completed",
        datetime_to_display_local_date_str_optional(task["completed_at"]) or "",
    )

    console = Console()
    console.print(task_table)


def dependencies_view(
    scope: str,
    task: Task,
    blockers: list[ResolvedLink],
    dependents: list[ResolvedLink],
    theme: ThemeType = "default",
) -> None:
    header(scope, f"dependencies of {task['title']}")

    console = Console()
    for title, links in (("Waiting On", blockers), ("Blocking", dependents)):
        table = Table(box=box.SIMPLE, title=title, title_justify="left")
        table.add_column("id")
        table.add_column("title")
        table.add_column("status")
        table.add_column("department")
        table.add_column("type")
        for link in links:
            linked = link["task"]
            color = status_color(linked["status"], theme)
            department = link["department_name"]
            if link["cross_department"]:
                department = f"[bold plum1]{department}[/bold plum1]"
            table.add_row(
                linked["id"],
                linked["title"],
                f"[{color}]{STATUS_LABELS[linked['status']]}[/{color}]",
                department,
                str(link["dependency_type"]),
            )
        if not links:
            table.add_row("", "[dim]none[/dim]", "", "", "")
        console.print(table)


def search_results_view(scope: str, query: str, tasks: list[Task]) -> None:
    header(scope, f"search: {query}")

    table = Table(box=box.SIMPLE)
    table.add_column("S.#")
    table.add_column("id")
    table.add_column("title")
    table.add_column("department")
    table.add_column("status")
    for index, task in enumerate(tasks, start=1):
        table.add_row(
            str(index),
            task["id"],
            task["title"],
            task["department_id"],
            STATUS_LABELS[task["status"]],
        )
    if not tasks:
        table.add_row("", "", "[dim]no matches[/dim]", "", "")

    console = Console()
    console.print(table)
