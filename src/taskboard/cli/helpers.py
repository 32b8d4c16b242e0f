"""Helpers shared by the command modules."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from taskboard.board import Board
from taskboard.config import ConfigError, load_config, locate_project_root
from taskboard.hooks import RecordingHooks
from taskboard.status.models import ItemKey, WorkItem
from taskboard.store import StoreError, load_items, save_items

console = Console()


def output_result(json_mode: bool, data: dict | list, success_message: str | None = None) -> None:
    """Output result in JSON or human-readable format."""
    if json_mode:
        print(json.dumps(data, ensure_ascii=False, default=str))
    elif success_message:
        console.print(success_message)


def output_error(json_mode: bool, error_message: str) -> None:
    """Output error in JSON or human-readable format."""
    if json_mode:
        print(json.dumps({"error": error_message}, ensure_ascii=False))
    else:
        console.print(f"[red]Error:[/red] {error_message}")


def open_board(items_path: Path, json_mode: bool) -> tuple[Board, RecordingHooks]:
    """Load the item file and project config into a Board.

    Raises:
        typer.Exit: If the file or config cannot be read.
    """
    try:
        items = load_items(items_path)
        config = load_config(locate_project_root(Path.cwd()))
    except (StoreError, ConfigError) as exc:
        output_error(json_mode, str(exc))
        raise typer.Exit(1)
    hooks = RecordingHooks(items=items)
    return Board(items, hooks=hooks, config=config), hooks


def require_item(board: Board, key_text: str, json_mode: bool) -> WorkItem:
    """Resolve a ``type:id`` argument to an item on the board."""
    try:
        key = ItemKey.parse(key_text)
    except ValueError as exc:
        output_error(json_mode, str(exc))
        raise typer.Exit(1)
    item = board.find(key)
    if item is None:
        output_error(json_mode, f"No item {key} in the item file")
        raise typer.Exit(1)
    return item


def write_back(board: Board, items_path: Path, write: bool, json_mode: bool) -> None:
    if not write:
        return
    try:
        save_items(items_path, board.items)
    except StoreError as exc:
        output_error(json_mode, str(exc))
        raise typer.Exit(1)
