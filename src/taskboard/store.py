"""JSON item file used by the command line.

The file holds a JSON array of item objects in the shape produced by
``WorkItem.to_dict``. Writes go through a temporary file and
``os.replace`` so a crash never leaves a half-written board.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from taskboard.status.models import WorkItem


class StoreError(Exception):
    """Raised when the item file is missing, corrupted, or unwritable."""


def load_items(path: Path) -> list[WorkItem]:
    """Read and deserialize the items in ``path``.

    Raises :class:`StoreError` on invalid JSON or an invalid item,
    naming the 0-based position of the offending item.
    """
    if not path.exists():
        raise StoreError(f"Item file not found: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise StoreError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(raw, list):
        raise StoreError(f"{path} must contain a JSON array of items")

    items: list[WorkItem] = []
    for position, obj in enumerate(raw):
        if not isinstance(obj, dict):
            raise StoreError(
                f"Invalid item at position {position}: expected an object, got {type(obj).__name__}"
            )
        try:
            items.append(WorkItem.from_dict(obj))
        except (KeyError, ValueError, TypeError) as exc:
            raise StoreError(f"Invalid item at position {position}: {exc}") from exc
    return items


def items_to_json(items: list[WorkItem]) -> str:
    """Serialize items deterministically, with a trailing newline."""
    return (
        json.dumps(
            [item.to_dict() for item in items],
            indent=2,
            ensure_ascii=False,
        )
        + "\n"
    )


def save_items(path: Path, items: list[WorkItem]) -> None:
    """Write ``items`` to ``path`` atomically."""
    tmp_path = path.with_name(path.name + ".tmp")
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        tmp_path.write_text(items_to_json(items), encoding="utf-8")
        os.replace(str(tmp_path), str(path))
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise StoreError(f"Failed to write {path}: {exc}") from exc
