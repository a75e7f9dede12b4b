# SPDX-License-Identifier: MIT

import logging
from typing import Annotated, Optional

import typer
from rich.console import Console

from eventline.errors import ApiError, LinkError
from eventline.model.dependency import DependencyType, TaskDependencies
from eventline.model.entity_id import EntityId
from eventline.model.member import Department
from eventline.model.task import Task
from eventline.service.dependency import (
    blocker_ids,
    dependent_ids,
    resolve_departments,
)
from eventline.service.link import SearchSession
from eventline.session import Session
from eventline.terminal.context import fail, get_session, require_scope, scope_label
from eventline.terminal.custom_typer import AliasedTyperGroup
from eventline.terminal.parse import parse_dependency_type, parse_id_list
from eventline.view.task import dependencies_view, search_results_view

logger = logging.getLogger(__name__)

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

DependencyTypeOption = Annotated[
    Optional[str],
    typer.Option(
        "--type",
        "-ty",
        callback=parse_dependency_type,
        help="finish_to_start (default), start_to_start, finish_to_finish, start_to_finish",
    ),
]
TargetDepartmentOption = Annotated[
    Optional[str],
    typer.Option(
        "--target-department",
        "-td",
        help="department to search in or create the blocker in (default: own)",
    ),
]


def _departments(session: Session, event_id: EntityId) -> list[Department]:
    try:
        return session.api.list_departments(event_id)
    except ApiError as e:
        logger.warning("could not list departments of event %s: %s", event_id, e)
        return []


def _dependencies(
    session: Session, event_id: EntityId, department_id: EntityId, task_id: EntityId
) -> TaskDependencies:
    try:
        return session.dependencies.list_dependencies(event_id, department_id, task_id)
    except ApiError as e:
        fail(f"could not list dependencies of task {task_id}: {e.message}")


def _show(
    session: Session,
    event_id: EntityId,
    department_id: EntityId,
    task_id: EntityId,
    dependencies: Optional[TaskDependencies] = None,
) -> None:
    if dependencies is None:
        dependencies = session.dependencies.cached(task_id)
    if dependencies is None:
        dependencies = _dependencies(session, event_id, department_id, task_id)

    task = _find_task(session, task_id)
    departments = _departments(session, event_id)
    dependencies_view(
        scope_label(session),
        task,
        resolve_departments(dependencies["blockers"], departments, department_id),
        resolve_departments(dependencies["dependents"], departments, department_id),
        theme=session.page.gantt["theme"],
    )


def _find_task(session: Session, task_id: EntityId) -> Task:
    if not session.loader.tasks and not session.loader.load():
        fail(session.loader.error or "could not load tasks")
    task = session.loader.get(task_id)
    if task is None:
        fail(f"task {task_id} not found in department {session.page.department_id}")
    return task


@app.command("list, ls", no_args_is_help=True)
def list_dependencies(task_id: str) -> None:
    """Show what a task is waiting on and what it is blocking."""
    session = get_session()
    event_id, department_id = require_scope(session)
    _show(
        session,
        event_id,
        department_id,
        task_id,
        _dependencies(session, event_id, department_id, task_id),
    )


@app.command("add, a", no_args_is_help=True)
def add(
    task_id: str,
    blocker_id: str,
    dependency_type: DependencyTypeOption = None,
) -> None:
    """Make BLOCKER_ID block TASK_ID."""
    session = get_session()
    event_id, department_id = require_scope(session)

    try:
        session.dependencies.add_dependency(
            event_id,
            department_id,
            task_id,
            blocker_id,
            dependency_type or DependencyType.FINISH_TO_START,
        )
    except ApiError as e:
        fail(f"could not add dependency {blocker_id} -> {task_id}: {e.message}")

    _show(session, event_id, department_id, task_id)


@app.command("remove, rm", no_args_is_help=True)
def remove(task_id: str, blocker_id: str) -> None:
    """Stop BLOCKER_ID from blocking TASK_ID."""
    session = get_session()
    event_id, department_id = require_scope(session)

    if not session.dependencies.remove_dependency(
        event_id, department_id, task_id, blocker_id
    ):
        fail(f"could not remove dependency {blocker_id} -> {task_id}")

    _show(session, event_id, department_id, task_id)


@app.command("set", no_args_is_help=True)
def set_blockers(
    task_id: str,
    blockers: Annotated[
        str,
        typer.Option(
            "--blockers",
            "-b",
            help="comma-separated ids of every blocker the task should have",
        ),
    ],
) -> None:
    """Replace the blockers of a task with exactly the given ones."""
    session = get_session()
    event_id, department_id = require_scope(session)

    current = _dependencies(session, event_id, department_id, task_id)
    result = session.dependencies.reconcile(
        event_id,
        department_id,
        task_id,
        parse_id_list(blockers),
        current_blocker_ids=blocker_ids(current),
    )

    console = Console()
    if result["added"]:
        console.print(f"[green]added:[/green] {', '.join(result['added'])}")
    if result["removed"]:
        console.print(f"[yellow]removed:[/yellow] {', '.join(result['removed'])}")
    if not result["added"] and not result["removed"] and not result["failed"]:
        console.print("[dim]blockers already up to date[/dim]")

    _show(session, event_id, department_id, task_id)

    if result["failed"]:
        fail(f"some dependencies were not updated: {', '.join(result['failed'])}")


def _search_session(
    session: Session,
    event_id: EntityId,
    department_id: EntityId,
    task_id: EntityId,
    target_department: Optional[EntityId],
) -> SearchSession:
    current = _dependencies(session, event_id, department_id, task_id)
    return session.search_session(
        task_id,
        target_department_id=target_department,
        blocker_ids=blocker_ids(current),
        dependent_ids=dependent_ids(current),
    )


@app.command("search, s", no_args_is_help=True)
def search(
    task_id: str,
    query: str,
    target_department: TargetDepartmentOption = None,
    link: Annotated[
        Optional[int],
        typer.Option("--link", "-l", help="link the result with this S.# as a blocker"),
    ] = None,
    dependency_type: DependencyTypeOption = None,
) -> None:
    """Find tasks to link as blockers of TASK_ID."""
    session = get_session()
    event_id, department_id = require_scope(session)

    search_session = _search_session(
        session, event_id, department_id, task_id, target_department
    )
    search_session.set_query(query)
    try:
        results = search_session.search()
    except ApiError as e:
        fail(f"search failed: {e.message}")

    if link is None:
        search_results_view(scope_label(session), query, results)
        return

    if not (1 <= link <= len(results)):
        fail(f"no search result with S.# {link}")
    blocker = results[link - 1]
    try:
        search_session.link(
            blocker["id"], dependency_type or DependencyType.FINISH_TO_START
        )
    except ApiError as e:
        fail(f"could not link {blocker['id']}: {e.message}")

    _show(session, event_id, department_id, task_id)


@app.command("create, c", no_args_is_help=True)
def create(
    task_id: str,
    title: str,
    target_department: TargetDepartmentOption = None,
) -> None:
    """Create a new task and make it block TASK_ID."""
    session = get_session()
    event_id, department_id = require_scope(session)

    search_session = _search_session(
        session, event_id, department_id, task_id, target_department
    )
    try:
        new_task = search_session.create_and_link(title)
    except ValueError as e:
        fail(str(e))
    except LinkError as e:
        fail(
            f"{e} (task {e.orphan_task_id} was created, link it with "
            f"'eventline dep add {task_id} {e.orphan_task_id}')"
        )
    except ApiError as e:
        fail(f"could not create task: {e.message}")

    typer.echo(f"created task {new_task['id']} blocking {task_id}")
    _show(session, event_id, department_id, task_id)
