# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from eventline import configuration
from eventline.repository.configuration import CONFIGURATION_REPO
from eventline.terminal.custom_typer import AliasedTyperGroup
from eventline.terminal.validate import validate_scale, validate_theme

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


@app.command("show, v")
def show() -> None:
    """Display current configuration settings."""
    config = CONFIGURATION_REPO.get_config()

    console = Console()
    table = Table()
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    for key, value in config.items():
        if key == "api_token":
            table.add_row(key, "********" if value else "None")
        elif isinstance(value, bool):
            table.add_row(key, "✓ Enabled" if value else "✗ Disabled")
        else:
            table.add_row(key, str(value))

    console.print(table)
    console.print()
    console.print(f"Config file: {configuration.APP_CONFIG_PATH}")


@app.command("set, s")
def set(
    api_base_url: Annotated[
        Optional[str],
        typer.Option("--api-base-url", help="Base URL of the backend REST API"),
    ] = None,
    api_token: Annotated[
        Optional[str],
        typer.Option("--api-token", help="Bearer token sent with every request"),
    ] = None,
    remove_api_token: Annotated[
        bool, typer.Option("--remove-api-token", help="Stop sending a token")
    ] = False,
    request_timeout_seconds: Annotated[
        Optional[float],
        typer.Option("--request-timeout-seconds", min=0.1),
    ] = None,
    event_id: Annotated[
        Optional[str], typer.Option("--event-id", help="Default event")
    ] = None,
    department_id: Annotated[
        Optional[str], typer.Option("--department-id", help="Default department")
    ] = None,
    scale: Annotated[
        Optional[str],
        typer.Option("--scale", callback=validate_scale, help="day or week"),
    ] = None,
    theme: Annotated[
        Optional[str],
        typer.Option(
            "--theme", callback=validate_theme, help="default, pastel or contrast"
        ),
    ] = None,
    lead_days: Annotated[
        Optional[int],
        typer.Option("--lead-days", min=0, help="Days shown before the first task"),
    ] = None,
    trail_days: Annotated[
        Optional[int],
        typer.Option("--trail-days", min=0, help="Days shown after the last task"),
    ] = None,
    empty_window_days: Annotated[
        Optional[int],
        typer.Option(
            "--empty-window-days", min=1, help="Window length when no task is dated"
        ),
    ] = None,
    search_debounce_ms: Annotated[
        Optional[int], typer.Option("--search-debounce-ms", min=0)
    ] = None,
    task_cache_ttl_seconds: Annotated[
        Optional[int], typer.Option("--task-cache-ttl-seconds", min=0)
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    ] = None,
    show_header: Annotated[
        Optional[bool],
        typer.Option("--show-header/--no-show-header", help="Show report headers"),
    ] = None,
) -> None:
    """Set configuration values."""
    if log_level is not None and log_level.upper() not in (
        "DEBUG",
        "INFO",
        "WARNING",
        "ERROR",
    ):
        raise typer.BadParameter(
            "Log level must be one of: DEBUG, INFO, WARNING, ERROR",
            param_hint="--log-level",
        )

    CONFIGURATION_REPO.update_config(
        api_base_url=api_base_url,
        api_token=api_token,
        request_timeout_seconds=request_timeout_seconds,
        event_id=event_id,
        department_id=department_id,
        scale=scale,
        theme=theme,
        lead_days=lead_days,
        trail_days=trail_days,
        empty_window_days=empty_window_days,
        search_debounce_ms=search_debounce_ms,
        task_cache_ttl_seconds=task_cache_ttl_seconds,
        log_level=log_level.upper() if log_level is not None else None,
        show_header=show_header,
    )
    if remove_api_token:
        CONFIGURATION_REPO.unset("api_token")

    show()
