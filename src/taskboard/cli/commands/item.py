"""Item commands: status changes, approval decisions, and card moves.

- ``taskboard item transition`` -- explicit status edit (errors are reported)
- ``taskboard item decide`` -- approve or reject a pending request
- ``taskboard item reorder`` -- move a card within its column
- ``taskboard item move`` -- drop a card on a column (illegal drops are no-ops)
- ``taskboard item chain`` -- show the parent/child tree around an item
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.tree import Tree
from typing_extensions import Annotated

from taskboard.hierarchy import ChainNode
from taskboard.status.models import ApprovalDecision

from ..helpers import console, open_board, output_error, output_result, require_item, write_back

app = typer.Typer(
    name="item",
    help="Change item status and position",
    no_args_is_help=True,
)

ItemsOption = Annotated[
    Path,
    typer.Option("--items", envvar="TASKBOARD_ITEMS", help="JSON file holding the board items"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Machine-readable JSON output")]
WriteOption = Annotated[bool, typer.Option("--write", help="Save the updated items back to the file")]


@app.command()
def transition(
    key: Annotated[str, typer.Argument(help="Item key, e.g. activity:12")],
    to: Annotated[str, typer.Option("--to", help="Target status (not_started, in_progress, completed)")],
    items_path: ItemsOption = Path("items.json"),
    comment: Annotated[Optional[str], typer.Option("--comment", help="Note attached to the request")] = None,
    file_url: Annotated[Optional[str], typer.Option("--file-url", help="Attachment URL")] = None,
    actor: Annotated[Optional[str], typer.Option("--actor", help="Who is making this change")] = None,
    write: WriteOption = False,
    json_output: JsonOption = False,
) -> None:
    """Request a status change for an item.

    Workflow-enabled items go to pending approval instead of changing
    status directly.

    Examples:
        taskboard item transition activity:12 --to in_progress
        taskboard item transition action:3 --to completed --comment "shipped" --write
    """
    board, _ = open_board(items_path, json_output)
    item = require_item(board, key, json_output)

    change = board.change_status(item, to, comment=comment, file_url=file_url, actor=actor)
    if not change.ok:
        output_error(json_output, change.message or "Transition refused")
        raise typer.Exit(1)

    write_back(board, items_path, write, json_output)
    result = {
        "key": str(item.key),
        "status": str(item.status),
        "requested_status": str(item.requested_status) if item.requested_status else None,
        "approval_status": str(item.approval_status),
        "event_id": change.entry.event_id if change.entry else None,
    }
    if item.is_pending:
        message = f"[yellow]PENDING[/yellow] {item.key}: waiting for approval of {item.requested_status}"
    else:
        message = f"[green]OK[/green] {item.key}: now {item.status}"
    output_result(json_output, result, message)


@app.command()
def decide(
    key: Annotated[str, typer.Argument(help="Item key, e.g. activity:12")],
    decision: Annotated[ApprovalDecision, typer.Option("--decision", help="approved or rejected")],
    items_path: ItemsOption = Path("items.json"),
    comment: Annotated[Optional[str], typer.Option("--comment", help="Reason for the decision")] = None,
    file_url: Annotated[Optional[str], typer.Option("--file-url", help="Attachment URL")] = None,
    actor: Annotated[Optional[str], typer.Option("--actor", help="Approver making the decision")] = None,
    write: WriteOption = False,
    json_output: JsonOption = False,
) -> None:
    """Approve or reject an item's pending status request."""
    board, _ = open_board(items_path, json_output)
    item = require_item(board, key, json_output)

    entry = board.decide(item, decision, comment=comment, file_url=file_url, actor=actor)
    if entry is None:
        output_error(json_output, f"{item.key} has no pending approval")
        raise typer.Exit(1)

    write_back(board, items_path, write, json_output)
    output_result(
        json_output,
        {
            "key": str(item.key),
            "decision": str(decision),
            "status": str(item.status),
            "approval_status": str(item.approval_status),
        },
        f"[green]OK[/green] {item.key}: {decision}, now {item.status}",
    )


@app.command()
def reorder(
    key: Annotated[str, typer.Argument(help="Item key, e.g. activity:12")],
    index: Annotated[int, typer.Option("--index", help="Position among the other cards of the column")],
    items_path: ItemsOption = Path("items.json"),
    write: WriteOption = False,
    json_output: JsonOption = False,
) -> None:
    """Move a card to another position in its own column."""
    board, _ = open_board(items_path, json_output)
    item = require_item(board, key, json_output)

    updates = board.reorder(item, index)
    write_back(board, items_path, write, json_output)
    output_result(
        json_output,
        {"updates": [u.to_dict() for u in updates]},
        f"[green]OK[/green] {len(updates)} card(s) renumbered in {item.effective_status}",
    )


@app.command()
def move(
    key: Annotated[str, typer.Argument(help="Item key, e.g. activity:12")],
    to: Annotated[str, typer.Option("--to", help="Target column")],
    index: Annotated[Optional[int], typer.Option("--index", help="Drop position when staying in the same column")] = None,
    items_path: ItemsOption = Path("items.json"),
    write: WriteOption = False,
    json_output: JsonOption = False,
) -> None:
    """Drop a card on a column, as a drag-and-drop gesture would.

    Illegal moves leave the card where it was and exit successfully.
    """
    board, _ = open_board(items_path, json_output)
    item = require_item(board, key, json_output)

    with board.drag(item) as session:
        outcome = session.drop(to, drop_index=index)

    if outcome.status == "moved":
        write_back(board, items_path, write, json_output)
    updates = [u.to_dict() for u in outcome.move.updates] if outcome.move else []
    output_result(
        json_output,
        {"key": str(item.key), "outcome": outcome.status, "updates": updates},
        f"{item.key}: {outcome.status} ({item.effective_status})",
    )


def _render_node(node: ChainNode, tree: Tree) -> None:
    for child in node.children:
        branch = tree.add(_label(child))
        _render_node(child, branch)


def _label(node: ChainNode) -> str:
    item = node.item
    text = f"{item.title} [dim]({item.key}, {item.status}, {item.responsible or '-'})[/dim]"
    return f"[bold yellow]{text}[/bold yellow]" if node.is_target else text


def _node_to_dict(node: ChainNode) -> dict:
    return {
        "key": str(node.key),
        "title": node.item.title,
        "status": str(node.item.status),
        "is_target": node.is_target,
        "children": [_node_to_dict(child) for child in node.children],
    }


@app.command()
def chain(
    key: Annotated[str, typer.Argument(help="Item key, e.g. activity:12")],
    items_path: ItemsOption = Path("items.json"),
    json_output: JsonOption = False,
) -> None:
    """Show the full parent/child tree an item belongs to."""
    board, _ = open_board(items_path, json_output)
    item = require_item(board, key, json_output)

    root = board.chain(item)
    if json_output:
        output_result(True, _node_to_dict(root))
        return
    tree = Tree(_label(root))
    _render_node(root, tree)
    console.print(tree)
