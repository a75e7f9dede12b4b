# SPDX-License-Identifier: MIT

from typing import Optional

import pendulum

from eventline.model.task import Task
from eventline.model.timeline import BarGeometry, MonthBand, ScaleType, TaskBar
from eventline.time import (
    datetime_to_month_str,
    days_between,
    start_of_local_day,
    today_local,
)

DAY_WIDTHS: dict[ScaleType, int] = {"day": 28, "week": 14}

DEFAULT_LEAD_DAYS = 3
DEFAULT_TRAIL_DAYS = 7
DEFAULT_EMPTY_WINDOW_DAYS = 21


def day_width_for_scale(scale: ScaleType) -> int:
    if scale not in DAY_WIDTHS:
        raise ValueError(f"unknown scale: {scale}")
    return DAY_WIDTHS[scale]


def is_scheduled(task: Task) -> bool:
    return task["start_at"] is not None or task["due_at"] is not None


def compute_window(
    tasks: list[Task],
    today: Optional[pendulum.DateTime] = None,
    lead_days: int = DEFAULT_LEAD_DAYS,
    trail_days: int = DEFAULT_TRAIL_DAYS,
    empty_days: int = DEFAULT_EMPTY_WINDOW_DAYS,
) -> tuple[pendulum.DateTime, pendulum.DateTime]:
    """
    Derive the visible [chart_start, chart_end] range for a task list.

    The earliest date is taken from each task's start (or due when it has no
    start) and the latest from its due (or start when it has no due). The
    window is padded by ``lead_days`` before and ``trail_days`` after. With no
    dated tasks the window runs from today to ``empty_days`` ahead, padded the
    same way.

    Args:
        tasks: Tasks to derive the window from
        today: Reference day (defaults to the local today)
        lead_days: Days added before the earliest date
        trail_days: Days added after the latest date
        empty_days: Window length used when no task is dated

    Returns:
        Tuple of (chart_start, chart_end), both at local start of day
    """
    reference = start_of_local_day(today if today is not None else today_local())

    dated = [task for task in tasks if is_scheduled(task)]
    if dated:
        min_start = min(
            start_of_local_day(task["start_at"] or task["due_at"])  # type: ignore[arg-type]
            for task in dated
        )
        max_end = max(
            start_of_local_day(task["due_at"] or task["start_at"])  # type: ignore[arg-type]
            for task in dated
        )
    else:
        min_start = reference
        max_end = reference.add(days=empty_days)

    return min_start.subtract(days=lead_days), max_end.add(days=trail_days)


class DateGrid:
    """Maps calendar dates onto pixel offsets of a Gantt timeline."""

    def __init__(
        self,
        tasks: list[Task],
        scale: ScaleType = "day",
        today: Optional[pendulum.DateTime] = None,
        lead_days: int = DEFAULT_LEAD_DAYS,
        trail_days: int = DEFAULT_TRAIL_DAYS,
        empty_days: int = DEFAULT_EMPTY_WINDOW_DAYS,
    ) -> None:
        self.scale = scale
        self.day_width = day_width_for_scale(scale)
        self.today = start_of_local_day(today if today is not None else today_local())
        self.chart_start, self.chart_end = compute_window(
            tasks,
            today=self.today,
            lead_days=lead_days,
            trail_days=trail_days,
            empty_days=empty_days,
        )
        self.total_days = max(1, days_between(self.chart_start, self.chart_end))
        self.grid_width = self.total_days * self.day_width

    def pos_for_date(self, date: Optional[pendulum.DateTime]) -> Optional[int]:
        if date is None:
            return None
        offset = days_between(self.chart_start, date) * self.day_width
        return max(0, min(self.grid_width, offset))

    def width_for_range(
        self,
        start: Optional[pendulum.DateTime],
        end: Optional[pendulum.DateTime],
    ) -> Optional[BarGeometry]:
        start_pos = self.pos_for_date(start)
        end_pos = self.pos_for_date(end)

        if start_pos is not None and end_pos is not None:
            # Inclusive of the end day
            return {
                "left": start_pos,
                "width": max(self.day_width, end_pos - start_pos + self.day_width),
            }

        if start_pos is not None:
            # Open ended: two days from the start
            return {"left": start_pos, "width": self.day_width * 2}

        if end_pos is not None:
            return {"left": end_pos, "width": self.day_width}

        return None

    def today_geometry(self) -> BarGeometry:
        # Always within [0, grid_width] because of the clamp, even off-window
        return {"left": self.pos_for_date(self.today) or 0, "width": self.day_width}

    def days(self) -> list[pendulum.DateTime]:
        return [self.chart_start.add(days=i) for i in range(self.total_days)]

    def month_bands(self) -> list[MonthBand]:
        bands: list[MonthBand] = []
        for day in self.days():
            if bands and bands[-1]["start"].month == day.month and (
                bands[-1]["start"].year == day.year
            ):
                bands[-1]["span"] += 1
            else:
                bands.append(
                    {"label": datetime_to_month_str(day), "start": day, "span": 1}
                )
        return bands

    def bar_for_task(self, task: Task) -> Optional[BarGeometry]:
        return self.width_for_range(task["start_at"], task["due_at"])

    def bars(self, tasks: list[Task]) -> list[TaskBar]:
        bars: list[TaskBar] = []
        for task in tasks:
            geometry = self.bar_for_task(task)
            if geometry is not None:
                bars.append({"task": task, "geometry": geometry})
        return bars

    def unscheduled(self, tasks: list[Task]) -> list[Task]:
        return [task for task in tasks if not is_scheduled(task)]
