# SPDX-License-Identifier: MIT

from typing import Literal, TypedDict, TypeAlias

import pendulum

from eventline.model.task import Task

ScaleType: TypeAlias = Literal["day", "week"]

ThemeType: TypeAlias = Literal["default", "pastel", "contrast"]


class BarGeometry(TypedDict):
    left: int
    width: int


class TaskBar(TypedDict):
    task: Task
    geometry: BarGeometry


class MonthBand(TypedDict):
    label: str
    start: pendulum.DateTime
    span: int
