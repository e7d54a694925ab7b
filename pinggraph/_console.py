from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# ------------- Shared consoles and logger
console = Console()
err_console = Console(stderr=True)
FORMAT = "%(message)s"
logger = logging.getLogger("pinggraph")


def setup_logging(verbose: bool = False) -> None:
    """Route pinggraph logging through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=FORMAT,
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=err_console,
                rich_tracebacks=True,
                markup=True,
                show_time=False,
            )
        ],
        force=True,
    )
