# SPDX-License-Identifier: MIT

from typing import Annotated, Any, Optional

import pendulum
import typer

from eventline.errors import ApiError, NotFoundError, PermissionDeniedError
from eventline.session import Session
from eventline.template.task import get_task_draft_template
from eventline.terminal.context import (
    fail,
    get_session,
    member_names,
    require_event,
    require_scope,
    scope_label,
)
from eventline.terminal.custom_typer import AliasedTyperGroup
from eventline.terminal.parse import (
    parse_datetime,
    parse_id_list,
    parse_status,
    parse_status_list,
)
from eventline.terminal.validate import (
    validate_priority,
    validate_progress,
    validate_zone_scope,
)
from eventline.view.board import board_view
from eventline.view.task import single_task_view, tasks_view

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

DATE_HELP = "valid inputs: YYYY-MM-DD, now, today, yesterday, tomorrow, or day offset like 1, -1"


def _apply_filters(
    session: Session,
    departments: Optional[str],
    statuses: Optional[str],
    priority: Optional[int],
    assignee: Optional[str],
    query: Optional[str],
    due_from: Optional[pendulum.DateTime],
    due_to: Optional[pendulum.DateTime],
    overdue: bool,
    zone_scope: Optional[str],
    zone: Optional[str],
    zonal_row: Optional[str],
) -> None:
    department_ids = parse_id_list(departments)
    if department_ids:
        # Several departments are loaded through the filter, not the page scope
        session.page.set_department(None)

    patch: dict[str, Any] = {
        "department_ids": department_ids,
        "statuses": parse_status_list(statuses),
        "priority": priority,
        "assignee_id": assignee,
        "query": query or "",
        "due_from": due_from,
        "due_to": due_to,
        "overdue_only": overdue,
        "zone_id": zone,
        "zonal_dept_row_id": zonal_row,
    }
    if zone_scope is not None:
        patch["zone_scope"] = zone_scope
    session.page.set_filters(**patch)


def _load(session: Session) -> None:
    require_event(session)
    if session.loader.current_request() is None:
        fail("no department selected, pass --department or --departments")
    if not session.loader.load():
        fail(session.loader.error or "could not load tasks")


def _loaded_department_ids(session: Session) -> list[str]:
    request = session.loader.current_request()
    return list(request.department_ids) if request is not None else []


FiltersDepartments = Annotated[
    Optional[str],
    typer.Option(
        "--departments",
        "-ds",
        help="comma-separated department ids, loads all of them",
    ),
]
FiltersStatus = Annotated[
    Optional[str],
    typer.Option("--status", "-s", help="comma-separated, e.g. todo,in_progress"),
]
FiltersPriority = Annotated[
    Optional[int],
    typer.Option(
        "--priority",
        "-pr",
        callback=validate_priority,
        help="valid input: 1-5 (1=highest, 5=lowest)",
    ),
]
FiltersAssignee = Annotated[Optional[str], typer.Option("--assignee", "-as")]
FiltersQuery = Annotated[
    Optional[str],
    typer.Option("--query", "-q", help="text in title or description"),
]
FiltersDueFrom = Annotated[
    Optional[pendulum.DateTime],
    typer.Option("--due-from", "-df", parser=parse_datetime, help=DATE_HELP),
]
FiltersDueTo = Annotated[
    Optional[pendulum.DateTime],
    typer.Option("--due-to", "-dt", parser=parse_datetime, help=DATE_HELP),
]
FiltersOverdue = Annotated[
    bool, typer.Option("--overdue", "-o", help="open tasks past their due date")
]
FiltersZoneScope = Annotated[
    Optional[str],
    typer.Option(
        "--zone-scope",
        "-zs",
        callback=validate_zone_scope,
        help="valid input: all, central, zonal",
    ),
]
FiltersZone = Annotated[Optional[str], typer.Option("--zone", "-z")]
FiltersZonalRow = Annotated[Optional[str], typer.Option("--zonal-row", "-zr")]


@app.command("list, ls")
def list_tasks(
    departments: FiltersDepartments = None,
    statuses: FiltersStatus = None,
    priority: FiltersPriority = None,
    assignee: FiltersAssignee = None,
    query: FiltersQuery = None,
    due_from: FiltersDueFrom = None,
    due_to: FiltersDueTo = None,
    overdue: FiltersOverdue = False,
    zone_scope: FiltersZoneScope = None,
    zone: FiltersZone = None,
    zonal_row: FiltersZonalRow = None,
    no_wrap: Annotated[bool, typer.Option("--no-wrap", "-nw")] = False,
) -> None:
    """List the tasks of the selected department(s) matching all given filters."""
    session = get_session()
    _apply_filters(
        session,
        departments,
        statuses,
        priority,
        assignee,
        query,
        due_from,
        due_to,
        overdue,
        zone_scope,
        zone,
        zonal_row,
    )
    _load(session)

    tasks = session.loader.visible()
    names = member_names(
        session, require_event(session), _loaded_department_ids(session)
    )
    tasks_view(
        scope_label(session),
        f"tasks ({len(tasks)}/{len(session.loader.tasks)})",
        tasks,
        member_names=names,
        theme=session.page.gantt["theme"],
        no_wrap=no_wrap,
    )


@app.command("board, b")
def board(
    departments: FiltersDepartments = None,
    statuses: FiltersStatus = None,
    priority: FiltersPriority = None,
    assignee: FiltersAssignee = None,
    query: FiltersQuery = None,
    due_from: FiltersDueFrom = None,
    due_to: FiltersDueTo = None,
    overdue: FiltersOverdue = False,
    zone_scope: FiltersZoneScope = None,
    zone: FiltersZone = None,
    zonal_row: FiltersZonalRow = None,
) -> None:
    """Show the filtered tasks as status columns."""
    session = get_session()
    _apply_filters(
        session,
        departments,
        statuses,
        priority,
        assignee,
        query,
        due_from,
        due_to,
        overdue,
        zone_scope,
        zone,
        zonal_row,
    )
    session.page.set_filters(view_mode="board")
    _load(session)

    names = member_names(
        session, require_event(session), _loaded_department_ids(session)
    )
    board_view(
        scope_label(session),
        session.board.columns(),
        member_names=names,
        theme=session.page.gantt["theme"],
    )


@app.command("show, s", no_args_is_help=True)
def show(task_id: str) -> None:
    session = get_session()
    event_id, department_id = require_scope(session)
    _load(session)

    task = session.loader.get(task_id)
    if task is None:
        fail(f"task {task_id} not found in department {department_id}")
    names = member_names(session, event_id, [department_id])
    single_task_view(
        scope_label(session), task, member_names=names, theme=session.page.gantt["theme"]
    )


@app.command("move, mv", no_args_is_help=True)
def move(
    task_id: str,
    status: Annotated[
        str,
        typer.Argument(help="todo, in_progress, blocked, done or canceled"),
    ],
    progress: Annotated[
        Optional[int],
        typer.Option("--progress", "-p", callback=validate_progress),
    ] = None,
) -> None:
    """Move a task to another status column."""
    to_status = parse_status(status)
    if to_status is None:
        fail("status is required")

    session = get_session()
    require_scope(session)
    _load(session)

    try:
        if progress is None:
            moved = session.board.move_card(task_id, to_status)
        else:
            session.loader.change_status(task_id, to_status, progress)
            moved = True
    except PermissionDeniedError as e:
        fail(f"not allowed to change task {task_id}: {e.message}")
    except NotFoundError as e:
        fail(f"task {task_id} no longer exists: {e.message}")
    except ApiError as e:
        fail(f"could not change status: {e.message}")

    if not moved:
        typer.echo(f"task {task_id} is already {to_status.value}")
        return

    task = session.loader.get(task_id)
    if task is not None:
        single_task_view(
            scope_label(session), task, theme=session.page.gantt["theme"]
        )


@app.command("add, a", no_args_is_help=True)
def add(
    title: str,
    priority: Annotated[
        Optional[int],
        typer.Option(
            "--priority",
            "-pr",
            callback=validate_priority,
            help="valid input: 1-5 (1=highest, 5=lowest)",
        ),
    ] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-d")] = None,
    start: Annotated[
        Optional[pendulum.DateTime],
        typer.Option("--start", "-st", parser=parse_datetime, help=DATE_HELP),
    ] = None,
    due: Annotated[
        Optional[pendulum.DateTime],
        typer.Option("--due", "-u", parser=parse_datetime, help=DATE_HELP),
    ] = None,
    assignee: Annotated[Optional[str], typer.Option("--assignee", "-as")] = None,
    zone: Annotated[Optional[str], typer.Option("--zone", "-z")] = None,
    zonal_row: Annotated[Optional[str], typer.Option("--zonal-row", "-zr")] = None,
) -> None:
    session = get_session()
    event_id, department_id = require_scope(session)

    draft = get_task_draft_template(title, priority or 3)
    draft["description"] = description
    draft["start_at"] = start
    draft["due_at"] = due
    draft["assignee_id"] = assignee
    draft["zone_id"] = zone
    draft["zonal_dept_row_id"] = zonal_row

    try:
        task = session.tasks.create_task(event_id, department_id, draft)
    except ApiError as e:
        fail(f"could not create task: {e.message}")

    single_task_view(scope_label(session), task, theme=session.page.gantt["theme"])


@app.command("modify, m", no_args_is_help=True)
def modify(
    task_id: str,
    title: Annotated[Optional[str], typer.Option("--title", "-t")] = None,
    priority: Annotated[
        Optional[int],
        typer.Option("--priority", "-pr", callback=validate_priority),
    ] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-d")] = None,
    start: Annotated[
        Optional[pendulum.DateTime],
        typer.Option("--start", "-st", parser=parse_datetime, help=DATE_HELP),
    ] = None,
    due: Annotated[
        Optional[pendulum.DateTime],
        typer.Option("--due", "-u", parser=parse_datetime, help=DATE_HELP),
    ] = None,
    remove_start: Annotated[bool, typer.Option("--remove-start", "-rst")] = False,
    remove_due: Annotated[bool, typer.Option("--remove-due", "-ru")] = False,
    assignee: Annotated[Optional[str], typer.Option("--assignee", "-as")] = None,
) -> None:
    session = get_session()
    event_id, department_id = require_scope(session)

    patch: dict[str, Any] = {}
    if title is not None:
        patch["title"] = title
    if priority is not None:
        patch["priority"] = priority
    if description is not None:
        patch["description"] = description
    if start is not None:
        patch["start_at"] = start
    if due is not None:
        patch["due_at"] = due
    if remove_start:
        patch["start_at"] = None
    if remove_due:
        patch["due_at"] = None
    if assignee is not None:
        patch["assignee_id"] = assignee
    if not patch:
        fail("nothing to modify")

    try:
        task = session.tasks.update_task(event_id, department_id, task_id, patch)
    except ApiError as e:
        fail(f"could not modify task {task_id}: {e.message}")

    single_task_view(scope_label(session), task, theme=session.page.gantt["theme"])


@app.command("delete, del", no_args_is_help=True)
def delete(
    task_id: str,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="skip confirmation")] = False,
) -> None:
    session = get_session()
    event_id, department_id = require_scope(session)

    if not yes:
        typer.confirm(f"Delete task {task_id}?", abort=True)

    try:
        session.tasks.delete_task(event_id, department_id, task_id)
    except ApiError as e:
        fail(f"could not delete task {task_id}: {e.message}")
    typer.echo(f"deleted task {task_id}")
