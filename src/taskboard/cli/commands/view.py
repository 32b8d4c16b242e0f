"""Read-only views: the board, delegated work, approvals, completions."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table
from typing_extensions import Annotated

from taskboard.status.models import Status, WorkItem
from taskboard.views import (
    completed_items,
    delegated_by,
    is_delayed,
    pending_approvals,
)

from ..helpers import console, open_board, output_result

app = typer.Typer(
    name="view",
    help="Show board columns and item lists",
    no_args_is_help=True,
)

ItemsOption = Annotated[
    Path,
    typer.Option("--items", envvar="TASKBOARD_ITEMS", help="JSON file holding the board items"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Machine-readable JSON output")]

_COLUMN_TITLES = {
    Status.NOT_STARTED: "Not started",
    Status.IN_PROGRESS: "In progress",
    Status.COMPLETED: "Completed",
}


def _card(item: WorkItem, today: date) -> dict:
    return {
        "key": str(item.key),
        "title": item.title,
        "status": str(item.status),
        "requested_status": str(item.requested_status) if item.requested_status else None,
        "responsible": item.responsible,
        "kanban_order": item.kanban_order,
        "delayed": is_delayed(item, today),
    }


def _card_line(item: WorkItem, today: date) -> str:
    line = f"{item.title} [dim]{item.key}[/dim]"
    if item.is_pending:
        line += f" [yellow](awaiting {item.requested_status})[/yellow]"
    if is_delayed(item, today):
        line += " [red]delayed[/red]"
    return line


@app.command()
def board(
    items_path: ItemsOption = Path("items.json"),
    show_all: Annotated[
        Optional[bool],
        typer.Option("--show-all/--pending-only", help="List every completed card, not only those awaiting approval"),
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """Show the three board columns."""
    the_board, _ = open_board(items_path, json_output)
    columns = the_board.columns(show_all_completed=show_all)
    today = date.today()

    if json_output:
        payload = {str(status): [_card(i, today) for i in cards] for status, cards in columns.as_dict().items()}
        payload["completed_total"] = columns.completed_total
        output_result(True, payload)
        return

    table = Table(show_header=True, header_style="bold")
    for status in columns.as_dict():
        title = _COLUMN_TITLES[status]
        if status == Status.COMPLETED:
            title += f" ({len(columns.completed)}/{columns.completed_total})"
        table.add_column(title, overflow="fold")
    lanes = [[_card_line(i, today) for i in cards] for cards in columns.as_dict().values()]
    for row in range(max((len(lane) for lane in lanes), default=0)):
        table.add_row(*(lane[row] if row < len(lane) else "" for lane in lanes))
    console.print(table)


@app.command()
def delegated(
    user: Annotated[str, typer.Argument(help="Responsible person of the parent items")],
    items_path: ItemsOption = Path("items.json"),
    json_output: JsonOption = False,
) -> None:
    """List subtasks under items USER is responsible for, newest first."""
    the_board, _ = open_board(items_path, json_output)
    rows = delegated_by(user, the_board.items)

    if json_output:
        output_result(
            True,
            [
                {
                    "key": str(d.item.key),
                    "title": d.item.title,
                    "parent_title": d.parent_title,
                    "responsible": d.item.responsible,
                    "status": str(d.item.status),
                }
                for d in rows
            ],
        )
        return

    if not rows:
        console.print(f"[dim]Nothing delegated by {user}[/dim]")
        return
    table = Table("Item", "Parent", "Responsible", "Status")
    for d in rows:
        table.add_row(f"{d.item.title} [dim]{d.item.key}[/dim]", d.parent_title, d.item.responsible, str(d.item.status))
    console.print(table)


@app.command()
def approvals(
    approver: Annotated[str, typer.Argument(help="Approver whose queue to show")],
    items_path: ItemsOption = Path("items.json"),
    json_output: JsonOption = False,
) -> None:
    """List requests waiting on APPROVER, grouped by project."""
    the_board, _ = open_board(items_path, json_output)
    groups = pending_approvals(the_board.items, approver)

    if json_output:
        output_result(
            True,
            {
                group: [
                    {
                        "key": str(i.key),
                        "title": i.title,
                        "underlying_status": str(i.underlying_status),
                        "requested_status": str(i.requested_status),
                    }
                    for i in members
                ]
                for group, members in groups.items()
            },
        )
        return

    if not groups:
        console.print(f"[dim]No requests waiting on {approver}[/dim]")
        return
    for group, members in groups.items():
        console.print(f"[bold]{group}[/bold]")
        for i in members:
            console.print(f"  {i.title} [dim]{i.key}[/dim]: {i.underlying_status} -> {i.requested_status}")


@app.command()
def completed(
    items_path: ItemsOption = Path("items.json"),
    json_output: JsonOption = False,
) -> None:
    """List completed items with their completion dates."""
    the_board, _ = open_board(items_path, json_output)
    rows = completed_items(the_board.items)

    if json_output:
        output_result(
            True,
            [
                {
                    "key": str(c.item.key),
                    "title": c.item.title,
                    "completed_at": c.completed_at.isoformat() if c.completed_at else None,
                }
                for c in rows
            ],
        )
        return

    table = Table("Item", "Completed")
    for c in rows:
        table.add_row(
            f"{c.item.title} [dim]{c.item.key}[/dim]",
            c.completed_at.strftime("%Y-%m-%d %H:%M") if c.completed_at else "-",
        )
    console.print(table)
