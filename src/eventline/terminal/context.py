# SPDX-License-Identifier: MIT

import logging
from contextvars import ContextVar
from typing import NoReturn, Optional

import typer
from rich.console import Console

from eventline.errors import ApiError
from eventline.model.entity_id import EntityId
from eventline.model.member import member_name_map
from eventline.repository.configuration import CONFIGURATION_REPO
from eventline.session import Session

logger = logging.getLogger(__name__)

_event_id: ContextVar[Optional[EntityId]] = ContextVar("event_id", default=None)
_department_id: ContextVar[Optional[EntityId]] = ContextVar(
    "department_id", default=None
)

error_console = Console(stderr=True)


def set_scope_override(
    event_id: Optional[EntityId], department_id: Optional[EntityId]
) -> None:
    """Event and department given on the command line win over the configured ones."""
    _event_id.set(event_id)
    _department_id.set(department_id)


def get_session() -> Session:
    return Session(
        CONFIGURATION_REPO.get_config(),
        event_id=_event_id.get(),
        department_id=_department_id.get(),
    )


def fail(message: str) -> NoReturn:
    error_console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def require_scope(session: Session) -> tuple[EntityId, EntityId]:
    try:
        return session.require_scope()
    except ValueError as e:
        fail(str(e))


def require_event(session: Session) -> EntityId:
    if session.page.event_id is None:
        fail("no event selected, pass --event or set event_id")
    return session.page.event_id


def scope_label(session: Session) -> str:
    event = session.page.event_id or "-"
    department = session.page.department_id
    if department is None:
        departments = session.page.filters["department_ids"]
        department = ", ".join(departments) if departments else "-"
    return f"event {event} / department {department}"


def member_names(
    session: Session, event_id: EntityId, department_ids: list[EntityId]
) -> dict[EntityId, str]:
    """Assignee names for display; ids are shown where members can not be listed."""
    names: dict[EntityId, str] = {}
    for department_id in department_ids:
        try:
            members = session.tasks.list_department_members(event_id, department_id)
        except ApiError as e:
            logger.warning(
                "could not list members of department %s: %s", department_id, e
            )
            continue
        names.update(member_name_map(members))
    return names
