# SPDX-License-Identifier: MIT

from typing import Optional

import typer

from eventline.service.timeline import DAY_WIDTHS
from eventline.view.util import THEMES


def validate_priority(priority: Optional[int]) -> Optional[int]:
    if priority is None:
        return None
    if not (1 <= priority <= 5):
        raise typer.BadParameter("Priority must be between 1 and 5 (inclusive)")
    return priority


def validate_progress(progress: Optional[int]) -> Optional[int]:
    if progress is None:
        return None
    if not (0 <= progress <= 100):
        raise typer.BadParameter("Progress must be between 0 and 100 (inclusive)")
    return progress


def validate_scale(scale: Optional[str]) -> Optional[str]:
    if scale is None:
        return None
    if scale not in DAY_WIDTHS:
        raise typer.BadParameter(f"Scale must be one of: {', '.join(DAY_WIDTHS)}")
    return scale


def validate_theme(theme: Optional[str]) -> Optional[str]:
    if theme is None:
        return None
    if theme not in THEMES:
        raise typer.BadParameter(f"Theme must be one of: {', '.join(THEMES)}")
    return theme


def validate_zone_scope(zone_scope: Optional[str]) -> Optional[str]:
    if zone_scope is None:
        return None
    if zone_scope not in ("all", "central", "zonal"):
        raise typer.BadParameter("Zone scope must be one of: all, central, zonal")
    return zone_scope
