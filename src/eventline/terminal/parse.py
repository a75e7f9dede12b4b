# SPDX-License-Identifier: MIT

import re
from typing import Optional

import pendulum
import typer

from eventline.model.dependency import DependencyType
from eventline.model.task import TaskStatus
from eventline.time import datetime_from_local_date_str


def parse_datetime(datetime_param: Optional[str | int]) -> Optional[pendulum.DateTime]:
    if datetime_param is None:
        return None

    datetime = str(datetime_param)

    # Match YYYY-MM-DD format, taken as the local day
    if re.match(r"^\d{4}-\d{2}-\d{2}$", datetime):
        try:
            return datetime_from_local_date_str(datetime).in_tz("UTC")
        except ValueError as e:
            raise typer.BadParameter(f"Invalid date: {e}")

    # Match numeric input for relative days (e.g., "1", "-1", "365")
    if re.match(r"^-?\d+$", datetime):
        days_offset = int(datetime)
        pendulum_date_time = pendulum.today("local").add(days=days_offset)
        return pendulum_date_time.in_tz("UTC")

    if datetime == "now" or datetime == "n":
        return pendulum.now("UTC")
    if datetime == "today" or datetime == "t":
        return pendulum.today("local").in_tz("UTC")
    if datetime == "yesterday" or datetime == "y":
        return pendulum.yesterday("local").in_tz("UTC")
    if datetime == "tomorrow" or datetime == "o":
        return pendulum.tomorrow("local").in_tz("UTC")
    raise typer.BadParameter("Incorrect datetime format")


def parse_status(status_param: Optional[str]) -> Optional[TaskStatus]:
    if status_param is None:
        return None
    normalized = status_param.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return TaskStatus(normalized)
    except ValueError:
        valid = ", ".join(status.value for status in TaskStatus)
        raise typer.BadParameter(
            f"Unknown status '{status_param}' (valid input: {valid})"
        )


def parse_status_list(status_param: Optional[str]) -> list[TaskStatus]:
    """
    Parse a comma-separated list of statuses, e.g. "todo,in_progress".

    Returns:
        The statuses in input order without duplicates

    Raises:
        typer.BadParameter: If any entry is not a known status
    """
    if status_param is None:
        return []
    statuses: list[TaskStatus] = []
    for part in status_param.split(","):
        if not part.strip():
            continue
        status = parse_status(part)
        if status is not None and status not in statuses:
            statuses.append(status)
    return statuses


def parse_id_list(id_param: Optional[str]) -> list[str]:
    """
    Parse a single id or a comma-separated list of ids.

    An empty string is a valid, empty list so that "--blockers ''" can clear
    every blocker of a task.
    """
    if id_param is None:
        return []
    ids: list[str] = []
    for id_str in id_param.split(","):
        id_str = id_str.strip()
        if id_str and id_str not in ids:
            ids.append(id_str)
    return ids


def parse_dependency_type(type_param: Optional[str]) -> DependencyType:
    if type_param is None:
        return DependencyType.FINISH_TO_START
    try:
        return DependencyType(type_param.strip().lower().replace("-", "_"))
    except ValueError:
        valid = ", ".join(kind.value for kind in DependencyType)
        raise typer.BadParameter(
            f"Unknown dependency type '{type_param}' (valid input: {valid})"
        )
