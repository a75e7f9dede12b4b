# SPDX-License-Identifier: MIT

from typing import Optional

from rich import box
from rich.console import Console, Group
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

from eventline.model.entity_id import EntityId
from eventline.model.task import STATUS_ORDER, Task
from eventline.model.timeline import ThemeType
from eventline.service.scroll import Pane, ScrollCoordinator
from eventline.service.timeline import DateGrid
from eventline.view.header import header
from eventline.view.util import (
    STATUS_LABELS,
    TODAY_STYLE,
    assignee_name,
    status_color,
    truncate,
)

# Narrowest day width; one terminal cell stands for this many pixels
PIXELS_PER_CELL = 14


def gantt_view(
    scope: str,
    grid: DateGrid,
    tasks: list[Task],
    member_names: Optional[dict[EntityId, str]] = None,
    theme: ThemeType = "default",
    left_column_width: int = 40,
    shift_days: int = 0,
    width: Optional[int] = None,
) -> None:
    """
    Display tasks as bars over the grid's chart window.

    The visible part of the timeline is chosen the way the scrolling panes do
    it: today is centered first, then the header is shifted by ``shift_days``
    and the body follows. Tasks without dates are listed in a separate
    unscheduled table.

    Args:
        scope: Event/department description for the header
        grid: Date grid computed for ``tasks``
        tasks: Tasks to draw, one row each, in the given order
        member_names: Assignee display names by user id
        theme: Status color theme
        left_column_width: Width of the frozen title column
        shift_days: Days to scroll right (positive) or left from today
        width: Console width override
    """
    header(scope, f"gantt ({grid.scale})")

    console = Console(width=width) if width is not None else Console()
    timeline_cells = max(1, console.width - left_column_width)

    header_pane = Pane("header", client_width=timeline_cells * PIXELS_PER_CELL)
    left_pane = Pane("left")
    right_pane = Pane("right", client_width=timeline_cells * PIXELS_PER_CELL)
    coordinator = ScrollCoordinator(header_pane, left_pane, right_pane)
    coordinator.on_grid_change(grid)
    if shift_days:
        header_pane.scroll_left = header_pane.scroll_left + shift_days * grid.day_width
    first_cell = int(right_pane.scroll_left) // PIXELS_PER_CELL
    coordinator.detach()

    cells_per_day = grid.day_width // PIXELS_PER_CELL
    visible_cells = min(timeline_cells, grid.grid_width // PIXELS_PER_CELL - first_cell)
    window = range(first_cell, first_cell + max(0, visible_cells))

    today = grid.today_geometry()
    today_cells = range(
        today["left"] // PIXELS_PER_CELL,
        (today["left"] + today["width"]) // PIXELS_PER_CELL,
    )

    console.print(
        f"\n[bold]{grid.chart_start.format('YYYY-MM-DD')} to "
        f"{grid.chart_end.format('YYYY-MM-DD')}[/bold] "
        f"(scale: {grid.scale}, {grid.total_days} days)\n"
    )
    console.print(_legend(theme))

    elements: list[Text] = []
    if grid.scale == "day":
        elements.append(_month_row(grid, window, cells_per_day, left_column_width))
    elements.append(_day_row(grid, window, cells_per_day, left_column_width, today_cells))
    elements.append(Text("─" * (left_column_width + len(window)), style="dim"))

    scheduled = [task for task in tasks if grid.bar_for_task(task) is not None]
    for index, task in enumerate(scheduled, start=1):
        elements.append(
            _task_row(
                index,
                task,
                grid,
                window,
                today_cells,
                member_names,
                theme,
                left_column_width,
            )
        )

    if not scheduled:
        elements.append(Text("No scheduled tasks", style="dim"))

    console.print(Padding(Group(*elements), (0, 0, 1, 0)))

    unscheduled = grid.unscheduled(tasks)
    if unscheduled:
        unscheduled_view(console, unscheduled, member_names)


def unscheduled_view(
    console: Console, tasks: list[Task], member_names: Optional[dict[EntityId, str]]
) -> None:
    table = Table(box=box.SIMPLE, title="Unscheduled", title_justify="left")
    table.add_column("S.#")
    table.add_column("title")
    table.add_column("assignee")
    for index, task in enumerate(tasks, start=1):
        name = assignee_name(task, member_names)
        table.add_row(
            str(index), task["title"], "—" if task["assignee_id"] is None else name
        )
    console.print(table)


def _legend(theme: ThemeType) -> Text:
    legend = Text("Legend: ", style="bold")
    for status in STATUS_ORDER:
        legend.append("■ ", style=status_color(status, theme))
        legend.append(f"{STATUS_LABELS[status]}  ")
    legend.append("  ", style=TODAY_STYLE)
    legend.append(" today")
    return legend


def _month_row(
    grid: DateGrid, window: range, cells_per_day: int, left_column_width: int
) -> Text:
    cells: list[str] = []
    for band in grid.month_bands():
        band_cells = band["span"] * cells_per_day
        cells.extend(truncate("│" + band["label"], band_cells))

    row = Text(" " * left_column_width)
    for i in window:
        if i >= len(cells):
            break
        row.append(cells[i], style="dim" if cells[i] == "│" else None)
    return row


def _day_row(
    grid: DateGrid,
    window: range,
    cells_per_day: int,
    left_column_width: int,
    today_cells: range,
) -> Text:
    row = Text(truncate("S.#  title", left_column_width), style="bold")
    days = grid.days()
    for i in window:
        day_index = i // cells_per_day
        if day_index >= len(days):
            break
        day = days[day_index]
        style = TODAY_STYLE if i in today_cells else ""
        if grid.scale == "day":
            label = day.format("DD")
            row.append(label[i % cells_per_day], style=style or None)
        else:
            # One cell per day: mark each week start
            row.append("|" if day.day_of_week == 1 else "·", style=style or "dim")
    return row


def _task_row(
    index: int,
    task: Task,
    grid: DateGrid,
    window: range,
    today_cells: range,
    member_names: Optional[dict[EntityId, str]],
    theme: ThemeType,
    left_column_width: int,
) -> Text:
    color = status_color(task["status"], theme)
    title = f"{index:>3}  {task['title']}"
    if task["assignee_id"] is not None:
        title += f" ({assignee_name(task, member_names)})"

    row = Text(truncate(title, left_column_width), style=color)

    geometry = grid.bar_for_task(task)
    if geometry is None:
        return row

    bar_start = geometry["left"] // PIXELS_PER_CELL
    bar_end = (geometry["left"] + geometry["width"]) // PIXELS_PER_CELL
    progress_end = bar_start + (bar_end - bar_start) * task["progress_pct"] // 100

    for i in window:
        background = f" {TODAY_STYLE}" if i in today_cells else ""
        if bar_start <= i < bar_end:
            glyph = "█" if i < progress_end else "▒"
            row.append(glyph, style=color + background)
        else:
            row.append(" ", style=background.strip() or None)
    return row
