"""CLI entry point for running pinggraph as a module."""

import sys

from ._console import console
from .main import main as run_cli


def main() -> None:
    try:
        sys.exit(run_cli())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
