# SPDX-License-Identifier: MIT

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Route all eventline loggers through a rich handler on stderr.

    Safe to call more than once; the handler is only installed the first time.
    """
    logger = logging.getLogger("eventline")
    logger.setLevel(level.upper())
    if any(isinstance(handler, RichHandler) for handler in logger.handlers):
        return
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
