# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer

from eventline.terminal import configuration, dependency, task
from eventline.terminal.context import set_scope_override
from eventline.terminal.custom_typer import OrderedAliasedTyperGroup
from eventline.terminal.gantt import gantt
from eventline.view import state as view_state

app = typer.Typer(
    cls=OrderedAliasedTyperGroup,
    help="Eventline - Department tasks, dependencies and timelines in the CLI",
    no_args_is_help=True,
)
app.add_typer(task.app, name="task, t")
app.command(name="gantt, g")(gantt)
app.add_typer(dependency.app, name="dep, d")
app.add_typer(configuration.app, name="config, c")


@app.callback()
def main_callback(
    no_header: Annotated[
        bool,
        typer.Option(
            "--no-header",
            "-nh",
            help="Suppress header output in reports",
        ),
    ] = False,
    event: Annotated[
        Optional[str],
        typer.Option("--event", "-e", help="Event id, overrides event_id"),
    ] = None,
    department: Annotated[
        Optional[str],
        typer.Option(
            "--department", "-dp", help="Department id, overrides department_id"
        ),
    ] = None,
) -> None:
    """
    Eventline - Department tasks, dependencies and timelines in the CLI

    Global options that apply to all commands.
    """
    if no_header:
        view_state.set_show_header(False)
    set_scope_override(event, department)


def run() -> None:
    app()
