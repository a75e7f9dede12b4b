# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer

from eventline.terminal.context import (
    fail,
    get_session,
    member_names,
    require_scope,
    scope_label,
)
from eventline.terminal.parse import parse_status_list
from eventline.terminal.validate import validate_scale, validate_theme
from eventline.view.gantt import gantt_view


def gantt(
    scale: Annotated[
        Optional[str],
        typer.Option(
            "--scale", "-sc", callback=validate_scale, help="valid input: day, week"
        ),
    ] = None,
    theme: Annotated[
        Optional[str],
        typer.Option(
            "--theme",
            "-th",
            callback=validate_theme,
            help="valid input: default, pastel, contrast",
        ),
    ] = None,
    shift: Annotated[
        int,
        typer.Option(
            "--shift",
            "-sh",
            help="days to scroll from today, negative scrolls back",
        ),
    ] = 0,
    statuses: Annotated[
        Optional[str],
        typer.Option("--status", "-s", help="comma-separated, e.g. todo,in_progress"),
    ] = None,
    assignee: Annotated[Optional[str], typer.Option("--assignee", "-as")] = None,
    query: Annotated[Optional[str], typer.Option("--query", "-q")] = None,
    title_width: Annotated[int, typer.Option("--title-width", "-tw", min=10)] = 40,
) -> None:
    """Show the tasks of a department on a timeline, centered on today."""
    session = get_session()
    event_id, department_id = require_scope(session)

    if scale is not None:
        session.page.set_gantt(scale=scale)
    if theme is not None:
        session.page.set_gantt(theme=theme)
    session.page.set_filters(
        statuses=parse_status_list(statuses),
        assignee_id=assignee,
        query=query or "",
    )

    if not session.loader.load():
        fail(session.loader.error or "could not load tasks")

    tasks = session.loader.visible()
    gantt_view(
        scope_label(session),
        session.date_grid(tasks),
        tasks,
        member_names=member_names(session, event_id, [department_id]),
        theme=session.page.gantt["theme"],
        left_column_width=title_width,
        shift_days=shift,
    )
