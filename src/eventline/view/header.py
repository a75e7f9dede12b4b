# SPDX-License-Identifier: MIT

from typing import Optional

from rich import print
from rich.padding import Padding

from eventline.view.state import get_show_header


def header(scope: str, sub_header: Optional[str] = None) -> None:
    """Print the application header with the selected event and department.

    Args:
        scope: Human readable event/department selection
        sub_header: Optional sub-header text to display
    """
    if not get_show_header():
        return

    additional = ""
    if sub_header is not None:
        additional = f"[sandy_brown]{sub_header}[/sandy_brown]"

    print(Padding("[dark_orange]eventline[/dark_orange]", (1, 0, 0, 1)))
    print(Padding(additional, (0, 1)))
    print(Padding(f"[plum1]{scope}[/plum1]", (0, 1)))
