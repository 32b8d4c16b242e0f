"""taskboard command line."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from typing_extensions import Annotated

from .commands import item, view

app = typer.Typer(
    name="taskboard",
    help="Kanban board with approval workflow over a JSON item file",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    """Configure logging for the invoked command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register sub-apps for each command group
app.add_typer(item.app, name="item")
app.add_typer(view.app, name="view")


def main():
    app()


if __name__ == "__main__":
    main()
